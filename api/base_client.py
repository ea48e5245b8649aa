"""
Base class for review platform clients.

Holds the two-phase search protocol shared by every platform and the small
helpers the platform modules use to map their payloads.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from api.http_retry import RetryPolicy, Sleeper, fetch_with_retry
from models.errors import ReviewImportError, api_error, config_error
from models.review import Platform, Review, SearchResult
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_PLACES = 5
DEFAULT_TIMEOUT_S = 10.0

# Payload problems that mean "the platform sent something we cannot read"
PAYLOAD_ERRORS = (KeyError, TypeError, ValueError, ValidationError)


@dataclass(frozen=True)
class PlaceStub:
    """Lightweight place returned by a platform's search phase."""

    place_id: str
    name: str
    address: str = ""
    rating: float | None = None
    url: str | None = None


def join_address(*parts: str | None) -> str:
    return ", ".join(p.strip() for p in parts if p and p.strip())


class BasePlatformClient(ABC):
    """
    Abstract base class for review platform clients.

    Each platform runs the same two-phase protocol: one search call that yields
    place stubs, then one reviews call per stub (run concurrently). Subclasses
    only describe the platform's endpoints and payload mapping.
    """

    platform: Platform
    base_url: str
    credential_name: str

    def __init__(
        self,
        api_key: str | None,
        *,
        retry_policy: RetryPolicy | None = None,
        max_places: int = DEFAULT_MAX_PLACES,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """
        Initialize the platform client.

        Args:
            api_key: Platform credential; a missing key is a CONFIG_ERROR
            retry_policy: Backoff policy shared by every call this client makes
            max_places: Cap on places taken from the search phase
            timeout_s: Per-request HTTP timeout
            transport: Optional httpx transport (tests inject httpx.MockTransport)
            sleep: Coroutine used for backoff waits
        """
        if not api_key or not api_key.strip():
            raise config_error(
                f"{self.credential_name} is not configured", platform=self.provider_name
            )
        self.api_key = api_key.strip()
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_places = max_places
        self.timeout_s = timeout_s
        self._transport = transport
        self._sleep = sleep

    @property
    def provider_name(self) -> str:
        return self.platform.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(platform={self.provider_name!r})"

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _default_headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    def _build_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._default_headers(),
            timeout=self.timeout_s,
            transport=self._transport,
        )

    async def _get_json(
        self, client: httpx.AsyncClient, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        return await fetch_with_retry(
            client,
            path,
            platform=self.provider_name,
            policy=self.retry_policy,
            sleep=self._sleep,
            params=params,
        )

    # ------------------------------------------------------------------
    # Platform-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _search_places(self, client: httpx.AsyncClient, query: str) -> list[PlaceStub]:
        """Search phase: query the platform and return place stubs in platform order."""

    @abstractmethod
    async def _fetch_reviews(
        self, client: httpx.AsyncClient, place: PlaceStub
    ) -> tuple[list[Any], str | None]:
        """
        Detail phase for one place.

        Returns:
            (raw review records, canonical place url if the details call gave one)
        """

    @abstractmethod
    def _normalize_review(self, raw: Any, place: PlaceStub) -> Review:
        """Map one raw platform review onto Review. Raise on unusable records."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search_businesses(self, query: str) -> list[SearchResult]:
        """
        Search the platform and attach normalized reviews to each place found.

        A place whose reviews call fails is dropped; the others are returned.

        Raises:
            ReviewImportError: API_ERROR when the search phase fails or returns
                a payload that cannot be parsed
        """
        async with self._build_http_client() as client:
            try:
                places = await self._search_places(client, query)
            except ReviewImportError:
                raise
            except PAYLOAD_ERRORS as e:
                raise api_error(
                    f"{self.provider_name} returned an unexpected search payload: {e}",
                    platform=self.provider_name,
                    error_type=type(e).__name__,
                ) from e

            places = places[: self.max_places]
            logger.debug(
                f"{self.provider_name} search found {len(places)} places",
                extra={"extra_fields": {"platform": self.provider_name, "query": query}},
            )

            results = await asyncio.gather(*(self._build_result(client, p) for p in places))

        return [r for r in results if r is not None]

    async def _build_result(
        self, client: httpx.AsyncClient, place: PlaceStub
    ) -> SearchResult | None:
        try:
            raw_reviews, details_url = await self._fetch_reviews(client, place)
        except (ReviewImportError, *PAYLOAD_ERRORS) as e:
            logger.warning(
                f"Dropping {self.provider_name} place {place.place_id}: {e}",
                extra={
                    "extra_fields": {
                        "platform": self.provider_name,
                        "place_id": place.place_id,
                        "error_type": type(e).__name__,
                    }
                },
            )
            return None

        reviews = []
        for raw in raw_reviews or []:
            try:
                reviews.append(self._normalize_review(raw, place))
            except PAYLOAD_ERRORS as e:
                logger.debug(
                    f"Skipping unreadable {self.provider_name} review for {place.place_id}: {e}"
                )

        return SearchResult(
            place_id=place.place_id,
            name=place.name,
            address=place.address,
            platform=self.platform,
            rating=place.rating,
            reviews=tuple(reviews),
            url=details_url or place.url,
        )
