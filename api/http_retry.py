"""Shared retry-with-backoff helper for outbound platform calls."""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from models.errors import api_error
from utils.logger import get_logger

logger = get_logger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_s: float = 1.0
    retryable_statuses: frozenset[int] = frozenset({429})
    retry_on_transport_error: bool = True

    def delay_for(self, attempt: int) -> float:
        """Backoff before the next try, where attempt is the 0-based index of the failed one."""
        return self.base_delay_s * (2**attempt)

    def should_retry(self, status_code: int) -> bool:
        return status_code in self.retryable_statuses

    def has_attempts_left(self, attempt: int) -> bool:
        return attempt + 1 < self.max_attempts


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    platform: str,
    policy: RetryPolicy,
    method: str = "GET",
    sleep: Sleeper = asyncio.sleep,
    **request_kwargs,
) -> Any:
    """
    Issue one HTTP request, retrying rate limits with exponential backoff.

    Retryable statuses (429 by default) and transport errors are retried up to
    policy.max_attempts. Any other non-2xx status, and any other httpx error
    (bad content encoding, too many redirects), fails at once.

    Returns:
        The decoded JSON body

    Raises:
        ReviewImportError: API_ERROR once the request cannot succeed
    """
    for attempt in range(policy.max_attempts):
        try:
            response = await client.request(method, url, **request_kwargs)
        except httpx.TransportError as e:
            if policy.retry_on_transport_error and policy.has_attempts_left(attempt):
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"{platform} transport error, retrying in {delay}s: {e}",
                    extra={
                        "extra_fields": {
                            "platform": platform,
                            "attempt": attempt + 1,
                            "delay_s": delay,
                            "error_type": type(e).__name__,
                        }
                    },
                )
                await sleep(delay)
                continue
            raise api_error(
                f"{platform} request failed: {e}",
                platform=platform,
                retryable=True,
                attempts=attempt + 1,
                error_type=type(e).__name__,
            ) from e
        except httpx.HTTPError as e:
            # Decoding and redirect failures will not go away on retry
            raise api_error(
                f"{platform} request failed: {e}",
                platform=platform,
                attempts=attempt + 1,
                error_type=type(e).__name__,
            ) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise api_error(
                    f"{platform} returned a non-JSON body",
                    platform=platform,
                    status_code=response.status_code,
                ) from e

        if policy.should_retry(response.status_code):
            if policy.has_attempts_left(attempt):
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"{platform} rate limited (HTTP {response.status_code}), retrying in {delay}s",
                    extra={
                        "extra_fields": {
                            "platform": platform,
                            "attempt": attempt + 1,
                            "delay_s": delay,
                            "status_code": response.status_code,
                        }
                    },
                )
                await sleep(delay)
                continue
            raise api_error(
                f"{platform} rate limit persisted after {policy.max_attempts} attempts",
                platform=platform,
                status_code=response.status_code,
                retryable=True,
                attempts=attempt + 1,
            )

        raise api_error(
            f"{platform} HTTP error: {response.status_code} {response.reason_phrase}".rstrip(),
            platform=platform,
            status_code=response.status_code,
        )

    # Only reachable with max_attempts < 1
    raise api_error(f"{platform} request was never attempted", platform=platform)
