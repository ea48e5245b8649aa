"""Hand-off from a validated review to the testimonial persistence collaborator."""

import threading
from typing import Any, Protocol

from models.errors import ErrorKind, ReviewImportError
from models.review import Review, from_epoch_ms
from models.testimonial import TestimonialDraft
from orchestrator.review_validator import validate_review
from utils.logger import get_logger

logger = get_logger(__name__)


class TestimonialSink(Protocol):
    def create_testimonial(self, draft: TestimonialDraft) -> Any:
        """Persist the draft and return whatever the store returns."""


class InMemoryTestimonialSink:
    """Keeps drafts in a list. Used by the default server wiring and tests."""

    def __init__(self):
        self._items: list[TestimonialDraft] = []
        self._lock = threading.Lock()

    def create_testimonial(self, draft: TestimonialDraft) -> TestimonialDraft:
        with self._lock:
            self._items.append(draft)
        return draft

    @property
    def items(self) -> list[TestimonialDraft]:
        with self._lock:
            return list(self._items)


def build_testimonial(review: Review, place_id: str) -> TestimonialDraft:
    return TestimonialDraft(
        author_name=review.author_name,
        content=review.content,
        rating=review.rating,
        created_at=from_epoch_ms(review.time),
        source=review.platform.value,
        source_url=review.review_url,
        source_metadata={
            "place_id": place_id,
            "profile_url": review.profile_url,
            "profile_photo_url": review.profile_photo_url,
        },
    )


def import_review(raw_review: Any, place_id: str, sink: TestimonialSink) -> TestimonialDraft:
    """
    Validate a selected review and hand it to the persistence collaborator.

    Returns:
        The draft passed to the sink

    Raises:
        ReviewImportError: INVALID_REVIEW if the review or place id is unusable
    """
    if not place_id or not str(place_id).strip():
        raise ReviewImportError(
            kind=ErrorKind.INVALID_REVIEW, message="Place ID and review are required"
        )

    review = validate_review(raw_review)
    draft = build_testimonial(review, str(place_id))
    sink.create_testimonial(draft)

    logger.info(
        "Review imported as testimonial",
        extra={"extra_fields": {"platform": draft.source, "place_id": str(place_id)}},
    )
    return draft
