"""
Review and SearchResult - the normalized, platform-agnostic shapes.

Every platform adapter maps its own payloads onto these immutable
dataclasses. Review.time is always Unix epoch milliseconds.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class Platform(str, Enum):
    GOOGLE = "google"
    YELP = "yelp"
    TRIPADVISOR = "tripadvisor"


MIN_RATING = 1
MAX_RATING = 5

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Last millisecond a datetime can represent (9999-12-31T23:59:59.999Z)
MAX_TIME_MS = (datetime.max.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(milliseconds=1)


def to_epoch_ms(value: datetime) -> int:
    """Epoch milliseconds for a datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int) -> datetime:
    return EPOCH + timedelta(milliseconds=value)


@dataclass(frozen=True)
class Review:
    author_name: str
    content: str
    rating: int
    time: int  # epoch milliseconds
    platform: Platform
    profile_url: str | None = None
    profile_photo_url: str | None = None
    review_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "author_name": self.author_name,
            "content": self.content,
            "rating": self.rating,
            "time": self.time,
            "platform": self.platform.value,
            "profile_url": self.profile_url,
            "profile_photo_url": self.profile_photo_url,
            "review_url": self.review_url,
        }


@dataclass(frozen=True)
class SearchResult:
    """
    One place/business found on one platform.

    Attributes:
        place_id: Platform-scoped opaque identifier
        name: Display name of the place
        address: Formatted address ("" when the platform gave none)
        platform: Platform the place was found on
        rating: Platform's aggregate rating, not a single review's
        reviews: Normalized reviews in platform order
        url: Platform's canonical page for the place
    """

    place_id: str
    name: str
    address: str
    platform: Platform
    rating: float | None = None
    reviews: tuple[Review, ...] = field(default_factory=tuple)
    url: str | None = None

    @property
    def review_count(self) -> int:
        return len(self.reviews)

    @property
    def has_reviews(self) -> bool:
        return bool(self.reviews)

    def to_dict(self) -> dict[str, Any]:
        return {
            "place_id": self.place_id,
            "name": self.name,
            "address": self.address,
            "rating": self.rating,
            "platform": self.platform.value,
            "reviews": [r.to_dict() for r in self.reviews],
            "url": self.url,
        }
