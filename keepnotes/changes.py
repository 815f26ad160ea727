"""
Tri-state field edits for note updates.

- UNCHANGED: the field was not sent, leave it alone
- Clear(raw): the field was sent blank, wipe it (raw keeps what was sent)
- Set(value): the field was sent with text, store it
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union


class _Unchanged:
    _instance: Optional["_Unchanged"] = None

    def __new__(cls) -> "_Unchanged":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


UNCHANGED = _Unchanged()


@dataclass(frozen=True)
class Clear:
    raw: str = ""


@dataclass(frozen=True)
class Set:
    value: str


FieldChange = Union[_Unchanged, Clear, Set]


def field_change(value: Optional[str], *, present: bool = True) -> FieldChange:
    """Turn a raw input into a FieldChange.

    `present` says whether the caller sent the field at all; an explicit
    None that was sent counts as a request to clear it.
    """
    if not present:
        return UNCHANGED
    if value is None:
        return Clear()
    if not value.strip():
        return Clear(value)
    return Set(value)


def coerce_change(value: "FieldChange | str | None") -> FieldChange:
    """Accept a ready FieldChange, or a plain string where None means "not sent"."""
    if isinstance(value, (_Unchanged, Clear, Set)):
        return value
    return field_change(value, present=value is not None)


def supplied_text(change: FieldChange) -> Optional[str]:
    """The text that was actually sent for this field, if any."""
    if isinstance(change, Set):
        return change.value
    if isinstance(change, Clear):
        return change.raw
    return None


def apply_change(current: Optional[str], change: FieldChange) -> Optional[str]:
    if isinstance(change, Set):
        return change.value
    if isinstance(change, Clear):
        return None
    return current
