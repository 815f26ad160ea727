"""
Order reconciliation for the pinned and unpinned note sequences.

A Snapshot is the caller's view of the active notes, split into two ordered
sequences. Moves never touch the snapshot; they return a Reconciliation with
the new sequences, the batch of NoteOrderItem rows that must be written, and
(for transfers) the pin flag change that has to be committed with them.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .errors import IndexOutOfRange, StateInconsistency
from .models import Note, NoteOrderItem


class Sequence(str, Enum):
    PINNED = "pinned"
    UNPINNED = "unpinned"

    @property
    def is_pinned(self) -> bool:
        return self is Sequence.PINNED

    @classmethod
    def of(cls, pinned: bool) -> "Sequence":
        return cls.PINNED if pinned else cls.UNPINNED


Items = tuple[NoteOrderItem, ...]


@dataclass(frozen=True)
class Snapshot:
    pinned: Items = ()
    unpinned: Items = ()

    def __post_init__(self) -> None:
        ids = [i.note_id for i in self.pinned + self.unpinned]
        if len(set(ids)) != len(ids):
            raise StateInconsistency("Snapshot lists the same note more than once")

    @classmethod
    def from_notes(cls, notes: Iterable[Note]) -> "Snapshot":
        """Build from loaded notes; inactive notes are left out."""
        active = [n for n in notes if n.is_active]

        def seq(pinned: bool) -> Items:
            part = sorted(
                (n for n in active if n.is_pinned == pinned),
                key=lambda n: (n.display_order, n.id),
            )
            return tuple(NoteOrderItem(note_id=n.id, display_order=n.display_order) for n in part)

        return cls(pinned=seq(True), unpinned=seq(False))

    def get(self, sequence: Sequence) -> Items:
        return self.pinned if sequence is Sequence.PINNED else self.unpinned

    def ids(self, sequence: Sequence) -> list[int]:
        return [i.note_id for i in self.get(sequence)]


@dataclass(frozen=True)
class PinChange:
    note_id: int
    pinned: bool


@dataclass(frozen=True)
class Reconciliation:
    pinned: Items
    unpinned: Items
    batch: tuple[NoteOrderItem, ...] = ()
    pin_change: Optional[PinChange] = None

    @property
    def is_noop(self) -> bool:
        return not self.batch and self.pin_change is None

    def as_snapshot(self) -> Snapshot:
        return Snapshot(pinned=self.pinned, unpinned=self.unpinned)


def _check(index: int, length: int, *, inclusive: bool = False) -> None:
    upper = length + 1 if inclusive else length
    if not 0 <= index < upper:
        raise IndexOutOfRange(index, length, inclusive=inclusive)


def _numbered(ids: list[int]) -> Items:
    return tuple(NoteOrderItem(note_id=nid, display_order=pos) for pos, nid in enumerate(ids))


def _changed(before: Items, after: Items) -> list[NoteOrderItem]:
    old = {i.note_id: i.display_order for i in before}
    return [i for i in after if old.get(i.note_id) != i.display_order]


def _result(snapshot: Snapshot, pinned: Items, unpinned: Items,
            pin_change: Optional[PinChange] = None) -> Reconciliation:
    batch = _changed(snapshot.pinned, pinned) + _changed(snapshot.unpinned, unpinned)
    return Reconciliation(pinned=pinned, unpinned=unpinned, batch=tuple(batch), pin_change=pin_change)


def reorder_within(snapshot: Snapshot, sequence: Sequence, from_index: int, to_index: int) -> Reconciliation:
    """Move one note inside its sequence and renumber that sequence 0..n-1."""
    sequence = Sequence(sequence)
    ids = snapshot.ids(sequence)
    _check(from_index, len(ids))
    _check(to_index, len(ids))

    if from_index == to_index:
        return Reconciliation(pinned=snapshot.pinned, unpinned=snapshot.unpinned)

    ids.insert(to_index, ids.pop(from_index))
    renumbered = _numbered(ids)
    if sequence is Sequence.PINNED:
        return _result(snapshot, renumbered, snapshot.unpinned)
    return _result(snapshot, snapshot.pinned, renumbered)


def transfer_between(snapshot: Snapshot, source: Sequence, dest: Sequence,
                     from_index: int, to_index: int) -> Reconciliation:
    """Move a note across sequences, flipping its pin flag.

    `to_index` may equal the destination length to append at the end.
    Both sequences are renumbered 0..n-1.
    """
    source, dest = Sequence(source), Sequence(dest)
    if source is dest:
        return reorder_within(snapshot, source, from_index, to_index)

    src_ids, dst_ids = snapshot.ids(source), snapshot.ids(dest)
    _check(from_index, len(src_ids))
    _check(to_index, len(dst_ids), inclusive=True)

    moved = src_ids.pop(from_index)
    dst_ids.insert(to_index, moved)

    by_seq = {source: _numbered(src_ids), dest: _numbered(dst_ids)}
    pin_change = PinChange(note_id=moved, pinned=dest.is_pinned)
    # the moved note is absent from the old destination map, so it always lands in the batch
    return _result(snapshot, by_seq[Sequence.PINNED], by_seq[Sequence.UNPINNED], pin_change)


def renumber(snapshot: Snapshot) -> Reconciliation:
    """Normalize both sequences to 0..n-1 keeping their current order."""
    return _result(
        snapshot,
        _numbered(snapshot.ids(Sequence.PINNED)),
        _numbered(snapshot.ids(Sequence.UNPINNED)),
    )


def index_of(snapshot: Snapshot, note_id: int) -> tuple[Sequence, int]:
    for sequence in Sequence:
        ids = snapshot.ids(sequence)
        if note_id in ids:
            return sequence, ids.index(note_id)
    raise StateInconsistency(f"Note {note_id} is not in the active snapshot")


def next_display_order(notes: Iterable[Note], pinned: bool, *, exclude: Optional[int] = None) -> int:
    """Slot after the last active note of the given sequence."""
    orders = [
        n.display_order for n in notes
        if n.is_active and n.is_pinned == pinned and n.id != exclude
    ]
    return max(orders) + 1 if orders else 0
