"""
ReviewImportError - the one exception type raised by the review import core.

Callers branch on ``kind`` instead of matching message text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    API_ERROR = "API_ERROR"
    SEARCH_ERROR = "SEARCH_ERROR"
    INVALID_REVIEW = "INVALID_REVIEW"


@dataclass(eq=False)
class ReviewImportError(Exception):
    """
    Typed failure for configuration, platform, aggregation and validation errors.

    Attributes:
        kind: One of ErrorKind
        message: Human-readable description
        platform: Platform the error originated from (if any)
        status_code: Upstream HTTP status for API_ERROR (if any)
        retryable: Whether repeating the same call may succeed
        details: Extra structured context for logs/API responses
    """

    kind: ErrorKind
    message: str
    platform: str | None = None
    status_code: int | None = None
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.kind, ErrorKind):
            self.kind = ErrorKind(self.kind)
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "platform": self.platform,
            "status_code": self.status_code,
            "retryable": self.retryable,
            "details": self.details,
        }


def config_error(message: str, platform: str | None = None) -> ReviewImportError:
    return ReviewImportError(kind=ErrorKind.CONFIG_ERROR, message=message, platform=platform)


def api_error(
    message: str,
    platform: str | None = None,
    status_code: int | None = None,
    retryable: bool = False,
    **details: Any,
) -> ReviewImportError:
    return ReviewImportError(
        kind=ErrorKind.API_ERROR,
        message=message,
        platform=platform,
        status_code=status_code,
        retryable=retryable,
        details=details,
    )
