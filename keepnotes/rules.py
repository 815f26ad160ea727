"""
Validation rules for note mutations.

Every check is a pure function: it either returns (possibly a normalized
value) or raises ValidationError for the first rule that fails.
"""
from __future__ import annotations
import re
from typing import Iterable, Optional

from .changes import Clear, supplied_text
from .errors import Rule, ValidationError
from .models import NoteCreate, NoteUpdate

TITLE_MAX = 200
CONTENT_MAX = 10_000
QUERY_MIN = 2
QUERY_MAX = 200
BULK_DELETE_MAX = 100

DEFAULT_COLOR = "#FFFFFF"

MODERN_COLORS: tuple[tuple[str, str], ...] = (
    ("#FFFFFF", "Default"),
    ("#FAAFA8", "Coral"),
    ("#F39F76", "Peach"),
    ("#FFF8B8", "Sand"),
    ("#E2F6D3", "Mint"),
    ("#B4DDD3", "Sage"),
    ("#D4E4ED", "Fog"),
    ("#AECCDC", "Storm"),
    ("#D3BFDB", "Dusk"),
    ("#F6E2DD", "Blossom"),
    ("#E9E3D4", "Clay"),
    ("#EFEFF1", "Chalk"),
)

# kept so notes saved with the old palette still validate
LEGACY_COLORS: tuple[tuple[str, str], ...] = (
    ("#F28B82", "Red"),
    ("#FBBC04", "Orange"),
    ("#FFF475", "Yellow"),
    ("#CCFF90", "Green"),
    ("#A7FFEB", "Teal"),
    ("#CBF0F8", "Cyan"),
    ("#AECBFA", "Blue"),
    ("#D7AEFB", "Purple"),
    ("#FDCFE8", "Pink"),
    ("#E6C9A8", "Brown"),
    ("#E8EAED", "Gray"),
)

PALETTE: tuple[str, ...] = tuple(hex_ for hex_, _ in MODERN_COLORS + LEGACY_COLORS)
_ALLOWED = frozenset(PALETTE)

HEX_COLOR_RE = re.compile(r"^#[A-Fa-f0-9]{6}$")


def _blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


def validate_create(candidate: NoteCreate) -> None:
    title, content = candidate.title, candidate.content

    if _blank(title) and _blank(content):
        raise ValidationError(Rule.EMPTY_NOTE)

    if title:
        if len(title) > TITLE_MAX:
            raise ValidationError(Rule.TITLE_TOO_LONG)
        if not title.strip():
            raise ValidationError(Rule.TITLE_BLANK)

    if content and len(content) > CONTENT_MAX:
        raise ValidationError(Rule.CONTENT_TOO_LONG)

    if candidate.color is not None and candidate.color.strip():
        validate_color(candidate.color)


def validate_update(candidate: NoteUpdate) -> None:
    if isinstance(candidate.title, Clear) and isinstance(candidate.content, Clear):
        raise ValidationError(Rule.EMPTY_NOTE, "Either title or content must have a value")

    title = supplied_text(candidate.title)
    if title is not None and len(title) > TITLE_MAX:
        raise ValidationError(Rule.TITLE_TOO_LONG)

    content = supplied_text(candidate.content)
    if content is not None and len(content) > CONTENT_MAX:
        raise ValidationError(Rule.CONTENT_TOO_LONG)


def validate_color(color: Optional[str]) -> str:
    """Return the color as uppercase #RRGGBB if it is a palette entry."""
    if _blank(color):
        raise ValidationError(Rule.COLOR_REQUIRED)

    normalized = color.strip().upper()
    if not HEX_COLOR_RE.match(normalized):
        raise ValidationError(Rule.INVALID_COLOR_FORMAT)
    if normalized not in _ALLOWED:
        raise ValidationError(
            Rule.COLOR_NOT_ALLOWED,
            f"{Rule.COLOR_NOT_ALLOWED.value}: {', '.join(PALETTE)}",
        )
    return normalized


def validate_search_query(query: Optional[str]) -> str:
    """Return the trimmed query."""
    if _blank(query):
        raise ValidationError(Rule.EMPTY_QUERY)

    trimmed = query.strip()
    if len(trimmed) > QUERY_MAX:
        raise ValidationError(Rule.QUERY_TOO_LONG)
    if len(trimmed) < QUERY_MIN:
        raise ValidationError(Rule.QUERY_TOO_SHORT)
    return trimmed


def validate_bulk_delete(ids: Optional[Iterable[int]]) -> list[int]:
    ids = list(ids or [])

    if not ids:
        raise ValidationError(Rule.NO_IDS_PROVIDED)
    if len(ids) > BULK_DELETE_MAX:
        raise ValidationError(Rule.TOO_MANY_IDS)
    if len(set(ids)) != len(ids):
        raise ValidationError(Rule.DUPLICATE_IDS)
    if any(i <= 0 for i in ids):
        raise ValidationError(Rule.INVALID_ID)
    return ids
