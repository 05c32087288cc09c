"""Exception types raised by the review client."""

from typing import Any


class ReviewError(Exception):
    """Base class for review client errors."""


class ValidationError(ReviewError, ValueError):
    """Submission input is empty or whitespace only."""


class AnalyzerError(ReviewError):
    """The analyzer failed or timed out."""


class MalformedFindingError(ReviewError, ValueError):
    """A single record in an analyzer response is not a valid finding."""

    def __init__(self, index: int, record: Any, reason: Exception | str):
        self.index = index
        self.record = record
        self.reason = reason
        super().__init__(f"Finding #{index} rejected: {reason}")
