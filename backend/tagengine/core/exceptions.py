"""Engine exceptions."""
from typing import Optional


class TagEngineError(Exception):
    """Base class for tag engine errors."""


class ValueTooLongError(TagEngineError):
    """Raised when a raw label value exceeds the configured length cap.

    Extractors reject oversized values instead of truncating them so the
    caller can decide whether to shorten or drop the input.
    """

    def __init__(self, value: str, limit: int, field: Optional[str] = None):
        self.value = value
        self.limit = limit
        self.field = field
        where = f" in '{field}'" if field else ""
        super().__init__(
            f"Value{where} is {len(value)} characters long (limit {limit})"
        )


class PatternTableError(TagEngineError):
    """Raised when a curated pattern table file cannot be parsed."""
