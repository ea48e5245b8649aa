import pytest

from api.base_client import BasePlatformClient
from models.review import Platform, Review, SearchResult

PLATFORM_ENV_VARS = ("GOOGLE_PLACES_API_KEY", "YELP_API_KEY", "TRIPADVISOR_API_KEY")


@pytest.fixture(autouse=True)
def isolated_platform_env(monkeypatch):
    """Keep real platform keys from leaking into tests."""
    for name in PLATFORM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_review(platform: Platform = Platform.GOOGLE, rating: int = 5, **overrides) -> Review:
    fields = {
        "author_name": "Jane Doe",
        "content": "Great coffee and friendly staff.",
        "rating": rating,
        "time": 1_700_000_000_000,
        "platform": platform,
    }
    fields.update(overrides)
    return Review(**fields)


def make_result(
    place_id: str,
    platform: Platform = Platform.GOOGLE,
    rating: float | None = 4.5,
    review_count: int = 1,
    name: str | None = None,
) -> SearchResult:
    return SearchResult(
        place_id=place_id,
        name=name or f"Place {place_id}",
        address="1 Main St, Springfield",
        platform=platform,
        rating=rating,
        reviews=tuple(make_review(platform) for _ in range(review_count)),
    )


class FakePlatformClient(BasePlatformClient):
    """
    Fake platform client for testing purposes.

    Returns canned results or raises the given error on every search.
    """

    def __init__(self, platform: Platform, results=None, error: Exception | None = None):
        # don't call BasePlatformClient.__init__ (no key or HTTP needed)
        self.platform = platform
        self.results = list(results or [])
        self.error = error
        self.queries: list[str] = []

    async def search_businesses(self, query: str):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)

    async def _search_places(self, client, query):
        raise NotImplementedError

    async def _fetch_reviews(self, client, place):
        raise NotImplementedError

    def _normalize_review(self, raw, place):
        raise NotImplementedError


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()
