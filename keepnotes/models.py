from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional
from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel

from .changes import UNCHANGED, FieldChange


class Note(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: Optional[str] = None
    content: Optional[str] = None
    color: str = "#FFFFFF"
    # label names as CSV; search matches on it
    labels_csv: str = Field(default="", index=True)

    is_pinned: bool = Field(default=False, index=True)
    is_archived: bool = Field(default=False, index=True)
    is_deleted: bool = Field(default=False, index=True)
    # independent 0..n-1 spaces for the pinned and unpinned sequences
    display_order: int = Field(default=0, index=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def labels(self) -> list[str]:
        if not self.labels_csv:
            return []
        return [t for t in self.labels_csv.split(",") if t]

    def set_labels(self, labels: list[str] | None) -> None:
        if not labels:
            self.labels_csv = ""
            return
        self.labels_csv = ",".join(normal_labels(labels))

    @property
    def is_active(self) -> bool:
        return not self.is_archived and not self.is_deleted

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)


def normal_labels(labels) -> list[str]:
    if not labels:
        return []
    return sorted({t.strip().lower() for t in labels if t and t.strip()})


class NoteOrderItem(BaseModel):
    """One (note, position) pair of a reorder batch."""

    model_config = ConfigDict(frozen=True)

    note_id: int
    display_order: int


class NoteCreate(SQLModel):
    title: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None
    labels: list[str] = Field(default_factory=list)


@dataclass
class NoteUpdate:
    title: FieldChange = UNCHANGED
    content: FieldChange = UNCHANGED
    labels: Optional[list[str]] = None
