"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ReviewDTO(BaseModel):
    author_name: str
    content: str
    rating: int
    time: int
    platform: str
    profile_url: str | None = None
    profile_photo_url: str | None = None
    review_url: str | None = None

    @classmethod
    def from_review(cls, review):
        return cls(**review.to_dict())


class SearchResultDTO(BaseModel):
    place_id: str
    name: str
    address: str
    rating: float | None = None
    platform: str
    reviews: list[ReviewDTO] = Field(default_factory=list)
    url: str | None = None

    @classmethod
    def from_search_result(cls, result):
        """Convert SearchResult to DTO."""
        return cls(
            place_id=result.place_id,
            name=result.name,
            address=result.address,
            rating=result.rating,
            platform=result.platform.value,
            reviews=[ReviewDTO.from_review(r) for r in result.reviews],
            url=result.url,
        )


class SearchBusinessesResponseDTO(BaseModel):
    success: bool = True
    data: list[SearchResultDTO] = Field(default_factory=list)


class ImportedTestimonialDTO(BaseModel):
    author_name: str
    content: str
    rating: int
    created_at: str
    source: str
    source_url: str | None = None
    source_metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_draft(cls, draft):
        return cls(**draft.to_dict())


class ImportReviewResponseDTO(BaseModel):
    success: bool = True
    data: ImportedTestimonialDTO


class ErrorResponseDTO(BaseModel):
    success: bool = False
    error: str
    kind: str | None = None


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str
    platforms: list[str] = Field(default_factory=list)
