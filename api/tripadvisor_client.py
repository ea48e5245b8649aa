from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, Field

from models.review import Platform, Review, to_epoch_ms

from .base_client import BasePlatformClient, PlaceStub, join_address

TRIPADVISOR_PROFILE_URL = "https://www.tripadvisor.com/Profile/{user_id}"


class TripAdvisorAddress(BaseModel):
    street1: str | None = None
    city: str | None = None
    state: str | None = None
    postalcode: str | None = None
    country: str | None = None


class TripAdvisorLocation(BaseModel):
    location_id: str
    name: str
    address_obj: TripAdvisorAddress = Field(default_factory=TripAdvisorAddress)
    rating: float | None = None
    web_url: str | None = None


class TripAdvisorSearchResponse(BaseModel):
    data: list[TripAdvisorLocation] = Field(default_factory=list)


class TripAdvisorAvatarSize(BaseModel):
    url: str | None = None


class TripAdvisorAvatar(BaseModel):
    small: TripAdvisorAvatarSize | None = None


class TripAdvisorUser(BaseModel):
    username: str = Field(..., min_length=1)
    user_id: str | None = None
    avatar: TripAdvisorAvatar | None = None


class TripAdvisorReview(BaseModel):
    user: TripAdvisorUser
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    published_date: datetime
    url: str | None = None


class TripAdvisorReviewsResponse(BaseModel):
    data: list[dict[str, Any]] = Field(default_factory=list)


class TripAdvisorClient(BasePlatformClient):
    """TripAdvisor Content API client. The key travels in the X-TripAdvisor-API-Key header."""

    platform = Platform.TRIPADVISOR
    base_url = "https://api.content.tripadvisor.com/api/v1"
    credential_name = "TripAdvisor API key"

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        headers["X-TripAdvisor-API-Key"] = self.api_key
        return headers

    async def _search_places(self, client: httpx.AsyncClient, query: str) -> list[PlaceStub]:
        data = await self._get_json(
            client, "/location/search", params={"searchQuery": query, "language": "en"}
        )
        parsed = TripAdvisorSearchResponse.model_validate(data)

        return [
            PlaceStub(
                place_id=loc.location_id,
                name=loc.name,
                address=join_address(
                    loc.address_obj.street1,
                    loc.address_obj.city,
                    loc.address_obj.state,
                    loc.address_obj.postalcode,
                    loc.address_obj.country,
                ),
                rating=loc.rating,
                url=loc.web_url,
            )
            for loc in parsed.data
        ]

    async def _fetch_reviews(self, client: httpx.AsyncClient, place: PlaceStub):
        data = await self._get_json(
            client,
            f"/location/{place.place_id}/reviews",
            params={"language": "en", "limit": 5},
        )
        return TripAdvisorReviewsResponse.model_validate(data).data, None

    def _normalize_review(self, raw: Any, place: PlaceStub) -> Review:
        review = TripAdvisorReview.model_validate(raw)
        user = review.user
        avatar = user.avatar.small.url if user.avatar and user.avatar.small else None
        return Review(
            author_name=user.username,
            content=review.text,
            rating=review.rating,
            time=to_epoch_ms(review.published_date),
            platform=self.platform,
            profile_url=(
                TRIPADVISOR_PROFILE_URL.format(user_id=user.user_id) if user.user_id else None
            ),
            profile_photo_url=avatar,
            review_url=review.url,
        )
