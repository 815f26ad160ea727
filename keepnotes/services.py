from __future__ import annotations
from typing import Iterable, Optional
from sqlmodel import Session, col, select

from .changes import UNCHANGED, FieldChange, apply_change, coerce_change
from .db import session_scope
from .errors import NoteNotFound, Rule, ValidationError
from .logging import get_logger
from .models import Note, NoteCreate, NoteUpdate, normal_labels
from .ordering import (
    Reconciliation,
    Sequence,
    Snapshot,
    index_of,
    next_display_order,
    renumber,
    reorder_within,
    transfer_between,
)
from .rules import (
    DEFAULT_COLOR,
    LEGACY_COLORS,
    MODERN_COLORS,
    validate_bulk_delete,
    validate_color,
    validate_create,
    validate_search_query,
    validate_update,
)
from .store import NoteStore, SqlNoteStore

logger = get_logger("services")


def _store(store: Optional[NoteStore]) -> NoteStore:
    return store if store is not None else SqlNoteStore()


def _append_slot(s: Session, pinned: bool, exclude: Optional[int] = None) -> int:
    stmt = select(Note).where(Note.is_pinned == pinned)
    return next_display_order(s.exec(stmt), pinned, exclude=exclude)


def _fetch(s: Session, identifier: int | str) -> Note:
    note = _lookup(s, identifier)
    if note is None:
        raise NoteNotFound(identifier)
    return note


def _lookup(s: Session, identifier: int | str) -> Optional[Note]:
    if isinstance(identifier, int) or str(identifier).isdigit():
        obj = s.get(Note, int(identifier))
        if obj:
            return obj
    stmt = select(Note).where(Note.title == str(identifier))
    return s.exec(stmt).first()


def create_note(
    title: Optional[str] = None,
    content: Optional[str] = None,
    color: Optional[str] = None,
    labels: Optional[Iterable[str]] = None,
    pinned: bool = False,
) -> Note:
    """Validate and store a new note at the end of its sequence."""
    candidate = NoteCreate(title=title, content=content, color=color, labels=normal_labels(labels))
    validate_create(candidate)
    color = validate_color(color) if color and color.strip() else DEFAULT_COLOR

    with session_scope() as s:
        note = Note(
            title=title or None,
            content=content or None,
            color=color,
            is_pinned=pinned,
            display_order=_append_slot(s, pinned),
        )
        note.set_labels(candidate.labels)
        s.add(note)
        s.flush()  # get the ID assigned
        s.refresh(note)
    logger.info("Created note #%s (%s, order %s)", note.id, Sequence.of(pinned).value, note.display_order)
    return note


def get_note(identifier: int | str) -> Optional[Note]:
    """Fetch by id (int/str digits) or exact title."""
    with session_scope() as s:
        return _lookup(s, identifier)


def list_notes(
    label: Optional[str] = None,
    search: Optional[str] = None,
    include_archived: bool = False,
    include_deleted: bool = False,
) -> list[Note]:
    """
    Return notes the way the board shows them: pinned first, then by display order.
    - label: exact (normalized) label name
    - search: validated query, substring of title, content or a label name
    - include_archived / include_deleted: widen beyond active notes
    """
    with session_scope() as s:
        stmt = select(Note)
        if not include_archived:
            stmt = stmt.where(Note.is_archived == False)  # noqa: E712
        if not include_deleted:
            stmt = stmt.where(Note.is_deleted == False)  # noqa: E712
        query = None
        if label:
            label = label.strip().lower()
            stmt = stmt.where(col(Note.labels_csv).contains(label, autoescape=True))
        if search is not None:
            query = validate_search_query(search)
        stmt = stmt.order_by(col(Note.is_pinned).desc(), col(Note.display_order), col(Note.id))
        notes = list(s.exec(stmt))
    if label:
        notes = [n for n in notes if label in n.labels]
    if query is not None:
        notes = [n for n in notes if _matches(n, query)]
    return notes


def _matches(note: Note, query: str) -> bool:
    """Literal, case-insensitive substring of the title, the content or one label name."""
    q = query.lower()
    return (
        q in (note.title or "").lower()
        or q in (note.content or "").lower()
        or any(q in name for name in note.labels)
    )


def edit_note(
    identifier: int | str,
    *,
    title: FieldChange | str | None = UNCHANGED,
    content: FieldChange | str | None = UNCHANGED,
    labels: Optional[Iterable[str]] = None,
) -> Note:
    """
    Update title/content/labels and bump updated_at.

    Plain strings are taken as sent (blank clears); None leaves the field alone.
    """
    update = NoteUpdate(
        title=coerce_change(title),
        content=coerce_change(content),
        labels=None if labels is None else normal_labels(labels),
    )
    validate_update(update)

    with session_scope() as s:
        note = _fetch(s, identifier)
        note.title = apply_change(note.title, update.title)
        note.content = apply_change(note.content, update.content)
        if not (note.title or "").strip() and not (note.content or "").strip():
            raise ValidationError(Rule.EMPTY_NOTE, "Either title or content must have a value")
        if update.labels is not None:
            note.set_labels(update.labels)
        note.touch()
        s.add(note)
        s.flush()
        s.refresh(note)
    logger.info("Updated note #%s", note.id)
    return note


def set_color(identifier: int | str, color: str) -> Note:
    color = validate_color(color)
    with session_scope() as s:
        note = _fetch(s, identifier)
        note.color = color
        note.touch()
        s.add(note)
        s.flush()
        s.refresh(note)
    return note


def pin_note(identifier: int | str, value: bool = True, store: Optional[NoteStore] = None) -> Note:
    """Pin or unpin; an active note moves to the end of the other sequence."""
    note = get_note(identifier)
    if note is None:
        raise NoteNotFound(identifier)
    if note.is_pinned == value:
        return note

    if note.is_active:
        snapshot = load_board(store)
        source, index = index_of(snapshot, note.id)
        dest = Sequence.of(value)
        transfer_note(source, dest, index, len(snapshot.get(dest)), store=store)
    else:
        _store(store).set_pinned(note.id, value)
    return get_note(note.id)


def _set_flag(identifier: int | str, flag: str, value: bool) -> Note:
    with session_scope() as s:
        note = _fetch(s, identifier)
        if getattr(note, flag) != value:
            setattr(note, flag, value)
            # back on the board: its old slot may be taken, so go to the end
            if note.is_active:
                note.display_order = _append_slot(s, note.is_pinned, exclude=note.id)
            note.touch()
            s.add(note)
            s.flush()
            s.refresh(note)
    logger.info("Note #%s %s=%s", note.id, flag, value)
    return note


def archive_note(identifier: int | str, value: bool = True) -> Note:
    return _set_flag(identifier, "is_archived", value)


def unarchive_note(identifier: int | str) -> Note:
    return archive_note(identifier, value=False)


def restore_note(identifier: int | str) -> Note:
    """Undo a soft delete."""
    return _set_flag(identifier, "is_deleted", False)


def delete_notes(ids: Optional[Iterable[int]], store: Optional[NoteStore] = None) -> list[int]:
    """Soft delete up to 100 notes at once; all or nothing."""
    ids = validate_bulk_delete(ids)
    _store(store).soft_delete(ids)
    logger.info("Soft deleted %d notes", len(ids))
    return ids


def delete_note(identifier: int | str, store: Optional[NoteStore] = None) -> None:
    note = get_note(identifier)
    if note is None:
        raise NoteNotFound(identifier)
    delete_notes([note.id], store=store)


def load_board(store: Optional[NoteStore] = None, normalize: bool = False) -> Snapshot:
    """
    Snapshot of the active notes.

    With normalize=True, sequences that are not exactly 0..n-1 (e.g. rows
    that all defaulted to 0 after the display_order column was added) are
    renumbered and written back first.
    """
    store = _store(store)
    snapshot = Snapshot.from_notes(store.load_active_notes())
    if normalize:
        result = renumber(snapshot)
        if result.batch:
            store.apply_order_batch(result.batch)
            logger.info("Renumbered %d notes", len(result.batch))
            snapshot = result.as_snapshot()
    return snapshot


def _commit(result: Reconciliation, store: NoteStore) -> Reconciliation:
    if result.is_noop:
        logger.debug("Move is a no-op, nothing written")
        return result
    store.apply_move(result)
    logger.debug("Move wrote %d rows, pin change %s", len(result.batch), result.pin_change)
    return result


def reorder_notes(
    sequence: Sequence | str,
    from_index: int,
    to_index: int,
    store: Optional[NoteStore] = None,
) -> Reconciliation:
    store = _store(store)
    result = reorder_within(load_board(store), Sequence(sequence), from_index, to_index)
    return _commit(result, store)


def transfer_note(
    source: Sequence | str,
    dest: Sequence | str,
    from_index: int,
    to_index: int,
    store: Optional[NoteStore] = None,
) -> Reconciliation:
    store = _store(store)
    result = transfer_between(load_board(store), Sequence(source), Sequence(dest), from_index, to_index)
    return _commit(result, store)


def move_note(
    sequence: Sequence | str,
    from_index: int,
    to_index: int,
    target_sequence: Sequence | str | None = None,
    store: Optional[NoteStore] = None,
) -> Reconciliation:
    """Apply a drag-and-drop intent from the presentation layer."""
    if target_sequence is None or Sequence(target_sequence) is Sequence(sequence):
        return reorder_notes(sequence, from_index, to_index, store=store)
    return transfer_note(sequence, target_sequence, from_index, to_index, store=store)


def palette() -> list[tuple[str, str, bool]]:
    """(hex, name, legacy) for every allowed color, in palette order."""
    return [(h, n, False) for h, n in MODERN_COLORS] + [(h, n, True) for h, n in LEGACY_COLORS]
