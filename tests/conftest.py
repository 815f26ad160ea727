import pytest

from keepnotes.db import init_db, reset_engine


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setenv("KEEPNOTES_DB_PATH", str(tmp_path / "notes.sqlite"))
    reset_engine()
    init_db()
    yield tmp_path / "notes.sqlite"
    reset_engine()
