"""
TestimonialDraft - the hand-off shape for the persistence collaborator.

Built from one validated Review plus the place it was selected from.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class TestimonialDraft:
    __test__ = False  # keep pytest from collecting this as a test class

    author_name: str
    content: str
    rating: int
    created_at: datetime
    source: str
    source_url: str | None = None
    source_metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "author_name": self.author_name,
            "content": self.content,
            "rating": self.rating,
            "created_at": self.created_at.isoformat(),
            "source": self.source,
            "source_url": self.source_url,
            "source_metadata": dict(self.source_metadata),
        }
