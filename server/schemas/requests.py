"""Pydantic request models for FastAPI endpoints."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class SearchBusinessesRequest(BaseModel):
    # Length is checked in the route so the error body matches the documented message
    query: Any = None


class ImportReviewRequest(BaseModel):
    place_id: str | None = Field(None, validation_alias=AliasChoices("place_id", "placeId"))
    review: dict[str, Any] | None = None
