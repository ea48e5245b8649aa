"""Schema gate for externally supplied reviews before they can be imported."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.errors import ErrorKind, ReviewImportError
from models.review import MAX_RATING, MAX_TIME_MS, MIN_RATING, Platform, Review


class ReviewPayload(BaseModel):
    """Accepts snake_case and the camelCase keys older callers send."""

    model_config = ConfigDict(extra="ignore")

    author_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("author_name", "authorName")
    )
    content: str = Field(..., min_length=1)
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    time: int = Field(..., ge=0, le=MAX_TIME_MS)
    platform: Platform
    profile_url: str | None = Field(
        None, validation_alias=AliasChoices("profile_url", "profileUrl")
    )
    profile_photo_url: str | None = Field(
        None, validation_alias=AliasChoices("profile_photo_url", "profilePhotoUrl")
    )
    review_url: str | None = Field(None, validation_alias=AliasChoices("review_url", "reviewUrl"))

    @field_validator("author_name", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("rating", "time", mode="before")
    @classmethod
    def not_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        return value


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "review"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)


def validate_review(raw: Any) -> Review:
    """
    Validate one review record and return it as a Review.

    Types are coerced where unambiguous ("4" -> 4, "google" -> Platform.GOOGLE)
    but nothing out of range is ever adjusted.

    Raises:
        ReviewImportError: INVALID_REVIEW on any schema violation
    """
    if isinstance(raw, Review):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        raise ReviewImportError(
            kind=ErrorKind.INVALID_REVIEW,
            message="Invalid review data: expected an object",
            details={"received_type": type(raw).__name__},
        )

    try:
        payload = ReviewPayload.model_validate(raw)
    except ValidationError as e:
        raise ReviewImportError(
            kind=ErrorKind.INVALID_REVIEW,
            message=f"Invalid review data: {_describe(e)}",
            details={"errors": [{"loc": list(i["loc"]), "msg": i["msg"]} for i in e.errors()]},
        ) from e

    return Review(
        author_name=payload.author_name,
        content=payload.content,
        rating=payload.rating,
        time=payload.time,
        platform=payload.platform,
        profile_url=payload.profile_url,
        profile_photo_url=payload.profile_photo_url,
        review_url=payload.review_url,
    )
