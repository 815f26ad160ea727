"""
Persistence boundary for note ordering.

Services talk to a NoteStore; SqlNoteStore is the SQLModel-backed one.
Every method is its own transaction, and apply_move commits a transfer's
pin flag together with its order batch so a move is never half-written.
"""
from __future__ import annotations
from typing import Iterable, Protocol
from sqlmodel import Session, col, select

from .db import session_scope
from .errors import NoteNotFound
from .logging import get_logger
from .models import Note, NoteOrderItem
from .ordering import Reconciliation

logger = get_logger("store")


class NoteStore(Protocol):
    def load_active_notes(self) -> list[Note]: ...

    def apply_order_batch(self, items: Iterable[NoteOrderItem]) -> None: ...

    def set_pinned(self, note_id: int, value: bool) -> None: ...

    def soft_delete(self, ids: Iterable[int]) -> None: ...

    def apply_move(self, result: Reconciliation) -> None: ...


def _load(s: Session, note_id: int) -> Note:
    note = s.get(Note, note_id)
    if note is None:
        raise NoteNotFound(note_id)
    return note


def _write_batch(s: Session, items: Iterable[NoteOrderItem]) -> int:
    count = 0
    for item in items:
        note = _load(s, item.note_id)
        note.display_order = item.display_order
        s.add(note)
        count += 1
    return count


def _write_pinned(s: Session, note_id: int, value: bool) -> None:
    note = _load(s, note_id)
    note.is_pinned = value
    note.touch()
    s.add(note)


class SqlNoteStore:
    def load_active_notes(self) -> list[Note]:
        """Active notes, pinned first, each sequence by display order."""
        with session_scope() as s:
            stmt = (
                select(Note)
                .where(Note.is_archived == False)  # noqa: E712
                .where(Note.is_deleted == False)  # noqa: E712
                .order_by(col(Note.is_pinned).desc(), col(Note.display_order), col(Note.id))
            )
            return list(s.exec(stmt))

    def apply_order_batch(self, items: Iterable[NoteOrderItem]) -> None:
        with session_scope() as s:
            count = _write_batch(s, items)
        logger.debug("Wrote display order for %d notes", count)

    def set_pinned(self, note_id: int, value: bool) -> None:
        with session_scope() as s:
            _write_pinned(s, note_id, value)

    def soft_delete(self, ids: Iterable[int]) -> None:
        with session_scope() as s:
            for note_id in ids:
                note = _load(s, note_id)
                note.is_deleted = True
                note.touch()
                s.add(note)

    def apply_move(self, result: Reconciliation) -> None:
        with session_scope() as s:
            if result.pin_change is not None:
                _write_pinned(s, result.pin_change.note_id, result.pin_change.pinned)
            count = _write_batch(s, result.batch)
        logger.debug("Committed move: %d order rows, pin change %s", count, result.pin_change)
