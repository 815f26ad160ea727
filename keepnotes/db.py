from pathlib import Path
import os
from sqlalchemy import Engine, inspect, text
from sqlmodel import SQLModel, Session, create_engine
from contextlib import contextmanager

from .logging import get_logger

logger = get_logger("db")

DEFAULT_DB_PATH = Path.home() / ".keepnotes" / "keepnotes.db"

# (url, engine) for the database KEEPNOTES_DB_PATH pointed at last time
_current: tuple[str, Engine] | None = None

def database_path() -> Path:
    """SQLite file holding the notes; KEEPNOTES_DB_PATH wins over the default."""
    raw = os.getenv("KEEPNOTES_DB_PATH")
    path = Path(raw) if raw else DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path

def get_engine() -> Engine:
    global _current
    url = f"sqlite:///{database_path()}"
    if _current is not None and _current[0] == url:
        return _current[1]
    reset_engine()
    logger.debug("Opening %s", url)
    _current = (url, create_engine(url, echo=False))
    return _current[1]

def reset_engine() -> None:
    """Dispose the open engine; the next get_engine() re-reads KEEPNOTES_DB_PATH."""
    global _current
    if _current is not None:
        _current[1].dispose()
    _current = None

def _add_display_order(engine) -> None:
    """Databases created before ordering existed get the column, defaulting to 0."""
    insp = inspect(engine)
    if not insp.has_table("note"):
        return
    columns = {c["name"] for c in insp.get_columns("note")}
    if "display_order" in columns:
        return
    with engine.begin() as conn:
        conn.execute(text("ALTER TABLE note ADD COLUMN display_order INTEGER NOT NULL DEFAULT 0"))
    logger.info("Added note.display_order column")

def init_db():
    engine = get_engine()
    _add_display_order(engine)
    SQLModel.metadata.create_all(engine)

def get_session():
    # services hand notes back after the session closes, so nothing may expire
    return Session(get_engine(), expire_on_commit=False)


@contextmanager
def session_scope():
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
