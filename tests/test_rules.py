import pytest

from keepnotes.changes import UNCHANGED, Clear, Set, field_change
from keepnotes.errors import Rule, ValidationError
from keepnotes.models import NoteCreate, NoteUpdate
from keepnotes.rules import (
    PALETTE,
    validate_bulk_delete,
    validate_color,
    validate_create,
    validate_search_query,
    validate_update,
)


def rule_of(fn, *args):
    with pytest.raises(ValidationError) as exc:
        fn(*args)
    return exc.value.rule


@pytest.mark.parametrize("title,content", [(None, None), ("", ""), ("   ", None), (None, "\n\t"), ("  ", "  ")])
def test_create_rejects_empty_note(title, content):
    assert rule_of(validate_create, NoteCreate(title=title, content=content)) is Rule.EMPTY_NOTE


def test_create_title_rules():
    assert rule_of(validate_create, NoteCreate(title="x" * 201)) is Rule.TITLE_TOO_LONG
    assert rule_of(validate_create, NoteCreate(title="   ", content="body")) is Rule.TITLE_BLANK
    # length is checked before blankness
    assert rule_of(validate_create, NoteCreate(title=" " * 201, content="body")) is Rule.TITLE_TOO_LONG
    validate_create(NoteCreate(title="x" * 200))


def test_create_content_and_color():
    assert rule_of(validate_create, NoteCreate(content="x" * 10_001)) is Rule.CONTENT_TOO_LONG
    validate_create(NoteCreate(content="x" * 10_000))
    assert rule_of(validate_create, NoteCreate(title="t", color="red")) is Rule.INVALID_COLOR_FORMAT
    validate_create(NoteCreate(title="t", color=" #faafa8 "))
    # a blank color means "use the default"
    validate_create(NoteCreate(title="t", color=""))


def test_update_tri_state():
    validate_update(NoteUpdate())
    validate_update(NoteUpdate(title=Clear(""), content=UNCHANGED))
    validate_update(NoteUpdate(title=Clear(" "), content=Set("still here")))

    both_cleared = NoteUpdate(title=Clear(), content=Clear("  "))
    err = pytest.raises(ValidationError, validate_update, both_cleared).value
    assert err.rule is Rule.EMPTY_NOTE
    assert err.message == "Either title or content must have a value"


def test_update_length_applies_to_blank_fields_too():
    assert rule_of(validate_update, NoteUpdate(title=Clear(" " * 201))) is Rule.TITLE_TOO_LONG
    assert rule_of(validate_update, NoteUpdate(content=Set("x" * 10_001))) is Rule.CONTENT_TOO_LONG


def test_field_change():
    assert field_change("x", present=False) is UNCHANGED
    assert field_change(None) == Clear()
    assert field_change("  ") == Clear("  ")
    assert field_change("hi") == Set("hi")


def test_color_rules():
    assert rule_of(validate_color, None) is Rule.COLOR_REQUIRED
    assert rule_of(validate_color, "   ") is Rule.COLOR_REQUIRED
    for bad in ("FFFFFF", "#FFF", "#FFFFFFF", "#GGGGGG", "# FFFFFF"):
        assert rule_of(validate_color, bad) is Rule.INVALID_COLOR_FORMAT, bad
    assert rule_of(validate_color, "#123456") is Rule.COLOR_NOT_ALLOWED
    assert validate_color(" #f28b82") == "#F28B82"


def test_color_not_allowed_lists_palette():
    err = pytest.raises(ValidationError, validate_color, "#000000").value
    assert "#FFFFFF" in err.message and "#E8EAED" in err.message
    assert err.message != Rule.INVALID_COLOR_FORMAT.value


def test_palette_is_closed_and_normalized_colors_revalidate():
    assert len(PALETTE) == 23
    assert len(set(PALETTE)) == 23
    assert PALETTE[0] == "#FFFFFF"
    for c in PALETTE:
        assert validate_color(validate_color(c.lower())) == c


def test_search_query():
    assert rule_of(validate_search_query, "") is Rule.EMPTY_QUERY
    assert rule_of(validate_search_query, "   ") is Rule.EMPTY_QUERY
    assert rule_of(validate_search_query, "a") is Rule.QUERY_TOO_SHORT
    assert rule_of(validate_search_query, "  a ") is Rule.QUERY_TOO_SHORT
    assert rule_of(validate_search_query, "q" * 201) is Rule.QUERY_TOO_LONG
    assert validate_search_query("ab") == "ab"
    assert validate_search_query("  " + "q" * 200 + "  ") == "q" * 200


def test_bulk_delete():
    assert rule_of(validate_bulk_delete, []) is Rule.NO_IDS_PROVIDED
    assert rule_of(validate_bulk_delete, None) is Rule.NO_IDS_PROVIDED
    assert rule_of(validate_bulk_delete, list(range(1, 102))) is Rule.TOO_MANY_IDS
    assert rule_of(validate_bulk_delete, [1, 2, 2]) is Rule.DUPLICATE_IDS
    assert rule_of(validate_bulk_delete, [-1]) is Rule.INVALID_ID
    assert rule_of(validate_bulk_delete, [3, 0]) is Rule.INVALID_ID
    assert validate_bulk_delete(range(1, 101)) == list(range(1, 101))


def test_bulk_delete_reports_first_failed_check():
    # too many and duplicated: the count check wins
    assert rule_of(validate_bulk_delete, [1] * 101) is Rule.TOO_MANY_IDS
    # duplicated and non-positive: duplicates are checked first
    assert rule_of(validate_bulk_delete, [0, 0]) is Rule.DUPLICATE_IDS


def test_every_rule_has_its_own_message():
    messages = [r.value for r in Rule]
    assert len(messages) == len(set(messages))
    assert isinstance(ValidationError(Rule.INVALID_ID), ValueError)
