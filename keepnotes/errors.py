from __future__ import annotations
from enum import Enum
from typing import Optional


class Rule(str, Enum):
    """Business rules a note mutation can violate, with their user-facing text."""

    EMPTY_NOTE = "Either title or content is required"
    TITLE_TOO_LONG = "Title cannot exceed 200 characters"
    TITLE_BLANK = "Title cannot be only whitespace"
    CONTENT_TOO_LONG = "Content cannot exceed 10,000 characters"
    COLOR_REQUIRED = "Color is required"
    INVALID_COLOR_FORMAT = "Invalid color format. Use hex format (e.g., #FFFFFF)"
    COLOR_NOT_ALLOWED = "Color must be one of the predefined colors"
    EMPTY_QUERY = "Search query cannot be empty"
    QUERY_TOO_LONG = "Search query cannot exceed 200 characters"
    QUERY_TOO_SHORT = "Search query must be at least 2 characters long"
    NO_IDS_PROVIDED = "At least one note ID is required"
    TOO_MANY_IDS = "Cannot delete more than 100 notes at once"
    DUPLICATE_IDS = "Duplicate note IDs are not allowed"
    INVALID_ID = "Invalid note ID detected"


class NoteError(Exception):
    """Base class for everything keepnotes raises on purpose."""


class ValidationError(NoteError, ValueError):
    """User input broke a rule. Safe to show `message` to the user as is."""

    def __init__(self, rule: Rule, message: Optional[str] = None) -> None:
        self.rule = rule
        self.message = message or rule.value
        super().__init__(self.message)


class ReconcileError(NoteError):
    """A move request does not fit the snapshot it was computed against."""


class IndexOutOfRange(ReconcileError, IndexError):
    def __init__(self, index: int, length: int, *, inclusive: bool = False) -> None:
        self.index = index
        self.length = length
        upper = f"{length}]" if inclusive else f"{length})"
        super().__init__(f"Index {index} is outside [0, {upper}")


class StateInconsistency(ReconcileError):
    pass


class StoreError(NoteError):
    """Persistence failed; nothing from the failing call was committed."""


class NoteNotFound(StoreError, LookupError):
    def __init__(self, identifier: int | str) -> None:
        self.identifier = identifier
        super().__init__(f"Note '{identifier}' not found")
