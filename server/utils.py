"""Shared utilities for FastAPI routes."""

from typing import Any

from models.review import MAX_RATING, MIN_RATING

MIN_QUERY_LENGTH = 3


def is_valid_query(query: Any) -> bool:
    return isinstance(query, str) and len(query.strip()) >= MIN_QUERY_LENGTH


def clamp_review_rating(review: dict[str, Any]) -> dict[str, Any]:
    """Clamp a numeric rating into 1..5. Non-numeric ratings are left for the validator."""
    rating = review.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return review
    clamped = dict(review)
    clamped["rating"] = min(MAX_RATING, max(MIN_RATING, rating))
    return clamped
