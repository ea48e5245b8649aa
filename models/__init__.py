"""
Models package for normalized review import objects.
"""

from .errors import ErrorKind, ReviewImportError
from .review import Platform, Review, SearchResult
from .testimonial import TestimonialDraft

__all__ = [
    "ErrorKind",
    "Platform",
    "Review",
    "ReviewImportError",
    "SearchResult",
    "TestimonialDraft",
]
