from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, Field

from models.review import Platform, Review, to_epoch_ms

from .base_client import BasePlatformClient, PlaceStub, join_address


class YelpLocation(BaseModel):
    address1: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class YelpBusiness(BaseModel):
    id: str
    name: str
    location: YelpLocation = Field(default_factory=YelpLocation)
    rating: float | None = None
    url: str | None = None


class YelpSearchResponse(BaseModel):
    businesses: list[YelpBusiness] = Field(default_factory=list)


class YelpUser(BaseModel):
    name: str = Field(..., min_length=1)
    profile_url: str | None = None
    image_url: str | None = None


class YelpReview(BaseModel):
    user: YelpUser
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    time_created: datetime
    url: str | None = None


class YelpReviewsResponse(BaseModel):
    reviews: list[dict[str, Any]] = Field(default_factory=list)


class YelpClient(BasePlatformClient):
    """Yelp Fusion client. Authenticates with a bearer token."""

    platform = Platform.YELP
    base_url = "https://api.yelp.com/v3"
    credential_name = "Yelp API key"

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _search_places(self, client: httpx.AsyncClient, query: str) -> list[PlaceStub]:
        data = await self._get_json(
            client, "/businesses/search", params={"term": query, "limit": self.max_places}
        )
        parsed = YelpSearchResponse.model_validate(data)

        return [
            PlaceStub(
                place_id=b.id,
                name=b.name,
                address=join_address(
                    b.location.address1, b.location.city, b.location.state, b.location.zip_code
                ),
                rating=b.rating,
                url=b.url,
            )
            for b in parsed.businesses
        ]

    async def _fetch_reviews(self, client: httpx.AsyncClient, place: PlaceStub):
        data = await self._get_json(client, f"/businesses/{place.place_id}/reviews")
        return YelpReviewsResponse.model_validate(data).reviews, None

    def _normalize_review(self, raw: Any, place: PlaceStub) -> Review:
        review = YelpReview.model_validate(raw)
        return Review(
            author_name=review.user.name,
            content=review.text,
            rating=review.rating,
            time=to_epoch_ms(review.time_created),
            platform=self.platform,
            profile_url=review.user.profile_url,
            profile_photo_url=review.user.image_url,
            review_url=review.url,
        )
