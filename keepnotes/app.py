# keepnotes/app.py
from __future__ import annotations
from typing import Optional
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .changes import field_change
from .db import init_db
from .errors import NoteNotFound, ReconcileError, ValidationError
from .logging import get_logger, setup_logging
from .models import NoteOrderItem
from .ordering import Reconciliation, Sequence
from .services import (
    list_notes,
    create_note,
    get_note,
    edit_note,
    set_color,
    delete_note,
    delete_notes,
    pin_note,
    archive_note,
    restore_note,
    load_board,
    move_note,
    palette,
)

# --- bootstrap ---
setup_logging()
init_db()
logger = get_logger("app")

app = FastAPI(title="keepnotes API")


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"detail": exc.message, "rule": exc.rule.name})


@app.exception_handler(NoteNotFound)
async def _not_found(request: Request, exc: NoteNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ReconcileError)
async def _reconcile_error(request: Request, exc: ReconcileError):
    logger.warning("Move rejected: %s", exc)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ---------- Schemas ----------
class NoteIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    pinned: bool = False

class NoteEdit(BaseModel):
    # fields left out of the body stay as they are; null or blank clears them
    title: Optional[str] = None
    content: Optional[str] = None
    labels: Optional[list[str]] = None

class ColorIn(BaseModel):
    color: str

class BulkDeleteIn(BaseModel):
    ids: list[int] = Field(default_factory=list)

class MoveIn(BaseModel):
    sequence: Sequence
    from_index: int
    to_index: int
    target_sequence: Optional[Sequence] = None

class NoteOut(BaseModel):
    id: int
    title: Optional[str]
    content: Optional[str]
    color: str
    labels: list[str]
    is_pinned: bool
    is_archived: bool
    is_deleted: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

class BoardOut(BaseModel):
    pinned: list[NoteOrderItem]
    unpinned: list[NoteOrderItem]

class MoveOut(BoardOut):
    batch: list[NoteOrderItem]
    pinned_note: Optional[int] = None
    unpinned_note: Optional[int] = None

class ColorOut(BaseModel):
    hex: str
    name: str
    legacy: bool

def _to_out(n) -> NoteOut:
    return NoteOut(
        id=n.id, title=n.title, content=n.content, color=n.color,
        labels=list(n.labels), is_pinned=n.is_pinned, is_archived=n.is_archived,
        is_deleted=n.is_deleted, display_order=n.display_order,
        created_at=n.created_at, updated_at=n.updated_at,
    )

def _move_out(r: Reconciliation) -> MoveOut:
    change = r.pin_change
    return MoveOut(
        pinned=list(r.pinned), unpinned=list(r.unpinned), batch=list(r.batch),
        pinned_note=change.note_id if change and change.pinned else None,
        unpinned_note=change.note_id if change and not change.pinned else None,
    )

def _found(identifier: str):
    n = get_note(identifier)
    if not n:
        raise HTTPException(status_code=404, detail="Not found")
    return n

# ---------- API ----------
@app.get("/api/notes", response_model=list[NoteOut])
def api_list_notes(
    label: Optional[str] = None,
    search: Optional[str] = None,
    include_archived: bool = Query(False, alias="archived"),
    include_deleted: bool = Query(False, alias="deleted"),
):
    notes = list_notes(label=label, search=search,
                       include_archived=include_archived, include_deleted=include_deleted)
    return [_to_out(n) for n in notes]

@app.post("/api/notes", response_model=NoteOut, status_code=201)
def api_create_note(payload: NoteIn):
    n = create_note(payload.title, payload.content, payload.color, payload.labels, pinned=payload.pinned)
    return _to_out(n)

@app.get("/api/notes/board", response_model=BoardOut)
def api_board(normalize: bool = False):
    snap = load_board(normalize=normalize)
    return BoardOut(pinned=list(snap.pinned), unpinned=list(snap.unpinned))

@app.get("/api/notes/palette", response_model=list[ColorOut])
def api_palette():
    return [ColorOut(hex=h, name=n, legacy=legacy) for h, n, legacy in palette()]

@app.post("/api/notes/move", response_model=MoveOut)
def api_move(payload: MoveIn):
    r = move_note(payload.sequence, payload.from_index, payload.to_index,
                  target_sequence=payload.target_sequence)
    return _move_out(r)

@app.post("/api/notes/bulk-delete")
def api_bulk_delete(payload: BulkDeleteIn):
    ids = delete_notes(payload.ids)
    return {"ok": True, "deleted": ids}

@app.get("/api/notes/{identifier}", response_model=NoteOut)
def api_get_note(identifier: str):
    return _to_out(_found(identifier))

@app.patch("/api/notes/{identifier}", response_model=NoteOut)
def api_edit_note(identifier: str, payload: NoteEdit):
    sent = payload.model_fields_set
    n = edit_note(
        identifier,
        title=field_change(payload.title, present="title" in sent),
        content=field_change(payload.content, present="content" in sent),
        labels=payload.labels,
    )
    return _to_out(n)

@app.put("/api/notes/{identifier}/color", response_model=NoteOut)
def api_color(identifier: str, payload: ColorIn):
    return _to_out(set_color(identifier, payload.color))

@app.delete("/api/notes/{identifier}")
def api_delete_note(identifier: str):
    delete_note(identifier)
    return {"ok": True}

@app.post("/api/notes/{identifier}/pin", response_model=NoteOut)
def api_pin(identifier: str, value: bool = True):
    n = pin_note(identifier, value)
    return _to_out(n)

@app.post("/api/notes/{identifier}/archive", response_model=NoteOut)
def api_archive(identifier: str, value: bool = True):
    n = archive_note(identifier, value)
    return _to_out(n)

@app.post("/api/notes/{identifier}/restore", response_model=NoteOut)
def api_restore(identifier: str):
    n = restore_note(identifier)
    return _to_out(n)
