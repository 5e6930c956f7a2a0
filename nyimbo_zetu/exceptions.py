"""Exception types raised by the hymn data layer."""

from typing import Iterable, List


class NyimboError(Exception):
    """Base class for all hymn data errors."""


class NotFoundError(NyimboError):
    """A referenced hymn, file, or index has no backing data."""


class ValidationError(NyimboError):
    """
    Structural or cross-referential mismatch.

    Carries every defect found in one pass rather than stopping at the first,
    so callers can report the whole list at once.
    """

    def __init__(self, errors: Iterable[str], message: str = "") -> None:
        self.errors: List[str] = list(errors)
        if not message:
            message = "; ".join(self.errors) if self.errors else "Validation failed"
        super().__init__(message)
