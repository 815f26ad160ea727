import pytest

from keepnotes.db import init_db, reset_engine
from keepnotes.errors import Rule, ValidationError
from keepnotes.services import create_note, get_note

def test_create_note_service_and_return_id(tmp_path, monkeypatch):
    test_db = tmp_path / "test.db"
    monkeypatch.setenv("KEEPNOTES_DB_PATH", str(test_db))
    reset_engine()
    init_db()

    note = create_note("hello", "world", labels=["Work", "ideas", "work"])
    assert note.id is not None
    assert note.title == "hello"
    assert note.content == "world"
    assert note.labels == ["ideas", "work"]
    assert note.color == "#FFFFFF"
    assert note.display_order == 0

def test_create_appends_to_its_sequence(db):
    a = create_note("a")
    b = create_note(content="only content")
    p = create_note("pinned", pinned=True)
    q = create_note("pinned too", pinned=True)
    assert (a.display_order, b.display_order) == (0, 1)
    assert (p.display_order, q.display_order) == (0, 1)
    assert b.title is None

def test_create_normalizes_color(db):
    n = create_note("tinted", color=" #faafa8 ")
    assert get_note(n.id).color == "#FAAFA8"

@pytest.mark.parametrize("kwargs,rule", [
    ({}, Rule.EMPTY_NOTE),
    ({"title": "  ", "content": ""}, Rule.EMPTY_NOTE),
    ({"title": "   ", "content": "body"}, Rule.TITLE_BLANK),
    ({"title": "t" * 201}, Rule.TITLE_TOO_LONG),
    ({"content": "c" * 10_001}, Rule.CONTENT_TOO_LONG),
    ({"title": "t", "color": "#000000"}, Rule.COLOR_NOT_ALLOWED),
])
def test_create_rejects_invalid(db, kwargs, rule):
    with pytest.raises(ValidationError) as exc:
        create_note(**kwargs)
    assert exc.value.rule is rule
