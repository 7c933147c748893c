"""
Exception types raised while compiling a document plan.
"""


class TypesettingError(Exception):
    """Base class for typesetting failures."""


class LayoutConfigError(TypesettingError, ValueError):
    """Raised when book or canvas geometry cannot produce a page grid."""


class MissingChapterError(TypesettingError, LookupError):
    """Raised when a requested chapter ordinal has no text."""

    def __init__(self, ordinal: int | None, message: str | None = None) -> None:
        self.ordinal = ordinal
        super().__init__(message or f"text entry {ordinal} not available")


class GridIndexError(TypesettingError, IndexError):
    """Raised when a slot index falls outside the precomputed grid."""


class PlanValidationError(TypesettingError, ValueError):
    """Raised when a document plan breaks its page/outline invariants."""
