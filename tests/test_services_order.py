import pytest

from keepnotes.errors import IndexOutOfRange
from keepnotes.models import Note
from keepnotes.ordering import PinChange, Sequence
from keepnotes.services import create_note, list_notes, load_board, move_note, reorder_notes, transfer_note


class RecordingStore:
    """In-memory NoteStore that remembers what it was asked to write."""

    def __init__(self, notes):
        self.notes = notes
        self.moves = []
        self.batches = []

    def load_active_notes(self):
        return [n for n in self.notes if n.is_active]

    def apply_order_batch(self, items):
        self.batches.append(list(items))

    def set_pinned(self, note_id, value):
        raise AssertionError("pin changes must go through apply_move")

    def soft_delete(self, ids):
        raise AssertionError("not used")

    def apply_move(self, result):
        self.moves.append(result)


@pytest.fixture
def store():
    return RecordingStore([
        Note(id=1, title="A", is_pinned=True, display_order=0),
        Note(id=2, title="B", is_pinned=True, display_order=1),
        Note(id=3, title="C", is_pinned=True, display_order=2),
        Note(id=4, title="D", display_order=0),
        Note(id=5, title="E", display_order=1),
        Note(id=6, title="gone", display_order=2, is_deleted=True),
    ])


def test_reorder_commits_one_move(store):
    r = reorder_notes(Sequence.PINNED, 0, 2, store=store)
    assert store.moves == [r]
    assert [i.note_id for i in r.pinned] == [2, 3, 1]
    assert len(r.batch) == 3
    assert all(i.note_id in (1, 2, 3) for i in r.batch)


def test_transfer_commits_pin_and_orders_together(store):
    r = move_note("unpinned", 0, 0, target_sequence="pinned", store=store)
    assert store.moves == [r]
    assert r.pin_change == PinChange(note_id=4, pinned=True)
    assert [i.note_id for i in r.pinned] == [4, 1, 2, 3]
    assert len(r.batch) == 5


def test_noop_move_writes_nothing(store):
    r = move_note(Sequence.UNPINNED, 1, 1, store=store)
    assert r.is_noop
    assert store.moves == []


def test_bad_index_writes_nothing(store):
    with pytest.raises(IndexOutOfRange):
        transfer_note(Sequence.PINNED, Sequence.UNPINNED, 5, 0, store=store)
    assert store.moves == []


def test_normalize_writes_batch_for_tied_orders():
    store = RecordingStore([Note(id=i, title=str(i), display_order=0) for i in (3, 1, 2)])
    snap = load_board(store, normalize=True)
    assert [(i.note_id, i.display_order) for i in snap.unpinned] == [(1, 0), (2, 1), (3, 2)]
    assert [[(i.note_id, i.display_order) for i in b] for b in store.batches] == [[(2, 1), (3, 2)]]
    store.batches.clear()
    load_board(store, normalize=False)
    assert store.batches == []


def test_drag_round_trip_through_database(db):
    a, b, c = (create_note(t) for t in ("a", "b", "c"))
    p = create_note("p", pinned=True)

    reorder_notes("unpinned", 0, 2)
    assert [n.id for n in list_notes()] == [p.id, b.id, c.id, a.id]

    move_note("unpinned", 1, 0, target_sequence="pinned")
    assert [n.id for n in list_notes()] == [c.id, p.id, b.id, a.id]
    assert [n.display_order for n in list_notes()] == [0, 1, 0, 1]
    assert [n.is_pinned for n in list_notes()] == [True, True, False, False]

    board = load_board()
    assert board.ids(Sequence.PINNED) == [c.id, p.id]
