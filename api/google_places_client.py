from typing import Any

import httpx
from pydantic import BaseModel, Field

from models.errors import api_error
from models.review import Platform, Review

from .base_client import BasePlatformClient, PlaceStub

GOOGLE_REVIEWS_URL = "https://search.google.com/local/reviews?placeid={place_id}"

# Statuses Google reports with HTTP 200 that still mean the call failed
FAILED_STATUSES = {"REQUEST_DENIED", "INVALID_REQUEST", "OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}


class GoogleCandidate(BaseModel):
    place_id: str
    name: str
    formatted_address: str = ""
    rating: float | None = None


class GoogleFindPlaceResponse(BaseModel):
    candidates: list[GoogleCandidate] = Field(default_factory=list)
    status: str | None = None
    error_message: str | None = None


class GoogleReview(BaseModel):
    author_name: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    time: int  # epoch seconds
    author_url: str | None = None
    profile_photo_url: str | None = None


class GooglePlaceDetails(BaseModel):
    reviews: list[dict[str, Any]] = Field(default_factory=list)
    url: str | None = None


class GoogleDetailsResponse(BaseModel):
    result: GooglePlaceDetails = Field(default_factory=GooglePlaceDetails)
    status: str | None = None
    error_message: str | None = None


class GooglePlacesClient(BasePlatformClient):
    """
    Google Places client.

    Search uses Find Place from Text; reviews come from Place Details. The key
    travels as the ``key`` query parameter.
    """

    platform = Platform.GOOGLE
    base_url = "https://maps.googleapis.com/maps/api/place"
    credential_name = "Google Places API key"

    def _check_status(self, status: str | None, error_message: str | None):
        if status in FAILED_STATUSES:
            raise api_error(
                f"Google Places API error: {status}"
                + (f" ({error_message})" if error_message else ""),
                platform=self.provider_name,
                retryable=status == "OVER_QUERY_LIMIT",
                google_status=status,
            )

    async def _search_places(self, client: httpx.AsyncClient, query: str) -> list[PlaceStub]:
        data = await self._get_json(
            client,
            "/findplacefromtext/json",
            params={
                "input": query,
                "inputtype": "textquery",
                "fields": "place_id,name,formatted_address,rating",
                "key": self.api_key,
            },
        )
        parsed = GoogleFindPlaceResponse.model_validate(data)
        self._check_status(parsed.status, parsed.error_message)

        return [
            PlaceStub(
                place_id=c.place_id,
                name=c.name,
                address=c.formatted_address,
                rating=c.rating,
            )
            for c in parsed.candidates
        ]

    async def _fetch_reviews(self, client: httpx.AsyncClient, place: PlaceStub):
        data = await self._get_json(
            client,
            "/details/json",
            params={"place_id": place.place_id, "fields": "reviews,url", "key": self.api_key},
        )
        parsed = GoogleDetailsResponse.model_validate(data)
        self._check_status(parsed.status, parsed.error_message)
        return parsed.result.reviews, parsed.result.url

    def _normalize_review(self, raw: Any, place: PlaceStub) -> Review:
        review = GoogleReview.model_validate(raw)
        return Review(
            author_name=review.author_name,
            content=review.text,
            rating=review.rating,
            time=review.time * 1000,
            platform=self.platform,
            profile_url=review.author_url,
            profile_photo_url=review.profile_photo_url,
            review_url=GOOGLE_REVIEWS_URL.format(place_id=place.place_id),
        )
