"""
ReviewImportService - concurrent cross-platform business and review search.

Fans one query out to every configured platform client, absorbs per-platform
failures, ranks the merged results and caches them per query.
"""

import asyncio
import concurrent.futures
import time
from typing import Any, Sequence

from api.base_client import BasePlatformClient
from api.google_places_client import GooglePlacesClient
from api.http_retry import RetryPolicy
from api.tripadvisor_client import TripAdvisorClient
from api.yelp_client import YelpClient
from config.config import Config, PlatformCredentials
from models.errors import ErrorKind, ReviewImportError, config_error
from models.review import Review, SearchResult
from orchestrator.ranking import drop_empty, rank_results
from orchestrator.review_validator import validate_review
from utils.logger import get_logger
from utils.ttl_cache import InMemoryTTLCache

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "search:"
DEFAULT_CACHE_TTL_S = 300


def cache_key_for(query: str) -> str:
    return CACHE_KEY_PREFIX + query.lower()


def build_platform_clients(
    credentials: PlatformCredentials, **client_kwargs: Any
) -> list[BasePlatformClient]:
    """
    Construct a client for every platform whose key is present.

    A platform whose client refuses to construct (CONFIG_ERROR) is left out
    with a warning.
    """
    candidates = [
        (GooglePlacesClient, credentials.google_key),
        (YelpClient, credentials.yelp_key),
        (TripAdvisorClient, credentials.tripadvisor_key),
    ]
    clients: list[BasePlatformClient] = []
    for client_cls, key in candidates:
        try:
            clients.append(client_cls(key, **client_kwargs))
        except ReviewImportError as e:
            if e.kind is not ErrorKind.CONFIG_ERROR:
                raise
            logger.warning(
                f"{client_cls.platform.value} service not available: {e.message}",
                extra={"extra_fields": {"platform": client_cls.platform.value}},
            )
    return clients


class ReviewImportService:
    """
    Single entry point for cross-platform review search.

    Example usage:
        service = ReviewImportService.from_config(Config())
        results = service.search_businesses_sync("coffee shop")
        for result in results:
            print(f"{result.platform.value}: {result.name} ({result.rating})")
    """

    def __init__(
        self,
        clients: Sequence[BasePlatformClient] | None = None,
        *,
        credentials: PlatformCredentials | None = None,
        cache: InMemoryTTLCache[list[SearchResult]] | None = None,
        **client_kwargs: Any,
    ):
        """
        Initialize the service.

        Args:
            clients: Ready-made platform clients; when omitted they are built
                from credentials
            credentials: Platform keys used when clients is None (defaults to
                the process environment)
            cache: Result cache (defaults to a 300s TTL cache)
            **client_kwargs: Passed to each client constructor (retry_policy,
                max_places, timeout_s, transport, sleep)

        Raises:
            ReviewImportError: CONFIG_ERROR when no platform is available
        """
        if clients is None:
            clients = build_platform_clients(
                credentials or PlatformCredentials.from_env(), **client_kwargs
            )
        self.clients: tuple[BasePlatformClient, ...] = tuple(clients)

        if not self.clients:
            raise config_error(
                "No review platforms are configured. At least one platform must be available."
            )

        self.cache = cache if cache is not None else InMemoryTTLCache(DEFAULT_CACHE_TTL_S)

        logger.info(
            f"Review import service ready with {len(self.clients)} platforms",
            extra={"extra_fields": {"platforms": self.platforms}},
        )

    @classmethod
    def from_config(cls, config: Config, **client_kwargs: Any) -> "ReviewImportService":
        client_kwargs.setdefault(
            "retry_policy",
            RetryPolicy(
                max_attempts=config.RETRY_MAX_ATTEMPTS,
                base_delay_s=config.RETRY_BASE_DELAY_SECONDS,
            ),
        )
        client_kwargs.setdefault("max_places", config.MAX_PLACES)
        client_kwargs.setdefault("timeout_s", config.HTTP_TIMEOUT_SECONDS)
        return cls(
            credentials=config.credentials(),
            cache=InMemoryTTLCache(config.CACHE_TTL_SECONDS),
            **client_kwargs,
        )

    @property
    def platforms(self) -> list[str]:
        return [c.provider_name for c in self.clients]

    async def _safe_search(
        self, client: BasePlatformClient, query: str
    ) -> list[SearchResult] | None:
        """
        Run one platform search. Returns None instead of raising on failure.
        """
        start_time = time.monotonic()
        try:
            results = await client.search_businesses(query)
        except ReviewImportError as e:
            logger.error(
                f"Error fetching from {client.provider_name}: {e.message}",
                extra={
                    "extra_fields": {
                        "platform": client.provider_name,
                        "kind": e.kind.value,
                        "status_code": e.status_code,
                        "retryable": e.retryable,
                    }
                },
            )
            return None
        except Exception as e:
            logger.error(
                f"Unexpected error for {client.provider_name}: {e}",
                exc_info=True,
                extra={
                    "extra_fields": {
                        "platform": client.provider_name,
                        "error_type": type(e).__name__,
                    }
                },
            )
            return None

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug(
            f"{client.provider_name} returned {len(results)} results in {elapsed_ms}ms",
            extra={"extra_fields": {"platform": client.provider_name, "latency_ms": elapsed_ms}},
        )
        return results

    async def search_businesses(self, query: str) -> list[SearchResult]:
        """
        Search every configured platform concurrently and rank the merged results.

        Args:
            query: Free-text business query

        Returns:
            Results from all platforms that answered, best first, never
            including a place without reviews

        Raises:
            ReviewImportError: SEARCH_ERROR when no platform produced results
        """
        cache_key = cache_key_for(query)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Search cache hit", extra={"extra_fields": {"cache_key": cache_key}})
            return list(cached)

        # Cancellation propagates out of gather before anything is cached
        outcomes = await asyncio.gather(
            *(self._safe_search(client, query) for client in self.clients)
        )

        succeeded = [r for r in outcomes if r is not None]
        failed_platforms = [
            c.provider_name for c, r in zip(self.clients, outcomes) if r is None
        ]

        if not succeeded:
            raise ReviewImportError(
                kind=ErrorKind.SEARCH_ERROR,
                message="Failed to search for businesses across platforms",
                details={"failed_platforms": failed_platforms},
            )

        merged = [result for platform_results in succeeded for result in platform_results]
        ranked = rank_results(drop_empty(merged))

        self.cache.set(cache_key, ranked)

        logger.info(
            f"Search complete: {len(succeeded)} platforms succeeded, "
            f"{len(failed_platforms)} failed, {len(ranked)} results",
            extra={
                "extra_fields": {
                    "success_count": len(succeeded),
                    "error_count": len(failed_platforms),
                    "failed_platforms": failed_platforms,
                    "result_count": len(ranked),
                }
            },
        )
        return list(ranked)

    def search_businesses_sync(self, query: str) -> list[SearchResult]:
        """
        Synchronous wrapper for search_businesses.

        When an event loop is already running, the search runs in a separate
        thread with its own loop.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.search_businesses(query))

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self.search_businesses(query)).result()

    def validate_review(self, review: Any) -> Review:
        return validate_review(review)

    def invalidate(self, query: str) -> None:
        self.cache.delete(cache_key_for(query))
