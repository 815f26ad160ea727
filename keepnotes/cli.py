from __future__ import annotations
from contextlib import contextmanager
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.markdown import Markdown
from rich.markup import escape

from .db import init_db
from .errors import NoteError
from .logging import get_logger, setup_logging
from .models import Note
from .ordering import Sequence
from .services import (
    create_note, list_notes, get_note, edit_note, set_color,
    delete_notes, pin_note, archive_note, restore_note,
    load_board, move_note, palette,
)

app = typer.Typer(help="keepnotes: pinned, colored and ordered notes")
console = Console()
logger = get_logger("cli")

@app.callback()
def _boot():
    setup_logging()
    init_db()

@contextmanager
def _reported():
    try:
        yield
    except NoteError as e:
        logger.warning("Rejected: %s", e)
        console.print(f"[red]Error[/]: {escape(str(e))}")
        raise typer.Exit(1)

def _label(n: Note) -> str:
    return n.title or (n.content or "")[:40] or "(empty)"

def _labels(raw: Optional[str]) -> Optional[list[str]]:
    return None if raw is None else raw.split(",")

@app.command()
def add(
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    color: Optional[str] = typer.Option(None, "--color"),
    labels: Optional[str] = typer.Option(None, "--labels", "-l", help="comma separated"),
    pinned: bool = typer.Option(False, "--pinned"),
):
    with _reported():
        n = create_note(title, content, color, _labels(labels), pinned=pinned)
    console.print(f"[green]Created[/] #{n.id}: {_label(n)}")

def _table(title: str, notes: list[Note]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Color")
    table.add_column("Labels", style="magenta")
    table.add_column("Archived")
    table.add_column("Updated")
    for pos, n in enumerate(notes):
        table.add_row(
            str(pos), str(n.id), _label(n), f"[on {n.color}]  [/] {n.color}",
            ", ".join(n.labels), "✓" if n.is_archived else "",
            n.updated_at.isoformat(timespec="minutes"),
        )
    return table

@app.command("list")
def _list(
    label: Optional[str] = typer.Option(None, "--label"),
    search: Optional[str] = typer.Option(None, "--search"),
    archived: bool = typer.Option(False, "--archived"),
):
    with _reported():
        notes = list_notes(label=label, search=search, include_archived=archived)
    pinned = [n for n in notes if n.is_pinned]
    others = [n for n in notes if not n.is_pinned]
    if pinned:
        console.print(_table("Pinned", pinned))
    console.print(_table("Others", others))

@app.command()
def show(identifier: str):
    n = get_note(identifier)
    if not n:
        console.print(f"[red]Not found[/]: {identifier}")
        raise typer.Exit(1)
    console.rule(f"#{n.id} {n.title or ''}")
    console.print(f"[dim]color:[/] {n.color}  [dim]order:[/] {n.display_order}"
                  f"{'  [dim]pinned[/]' if n.is_pinned else ''}")
    if n.labels:
        console.print(f"[dim]labels:[/] {', '.join(n.labels)}")
    console.print(Markdown(n.content or "_<empty>_"))

@app.command()
def edit(
    identifier: str,
    title: Optional[str] = typer.Option(None, "--title", "-t", help="empty string clears"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="empty string clears"),
    labels: Optional[str] = typer.Option(None, "--labels", "-l"),
):
    with _reported():
        n = edit_note(identifier, title=title, content=content, labels=_labels(labels))
    console.print(f"[green]Updated[/] #{n.id}: {_label(n)}")

@app.command()
def color(identifier: str, value: str):
    with _reported():
        n = set_color(identifier, value)
    console.print(f"[green]Colored[/] #{n.id}: {n.color}")

@app.command("palette")
def _palette():
    table = Table(title="Colors")
    table.add_column("Swatch")
    table.add_column("Hex", style="cyan")
    table.add_column("Name")
    table.add_column("Legacy")
    for hex_, name, legacy in palette():
        table.add_row(f"[on {hex_}]    [/]", hex_, name, "✓" if legacy else "")
    console.print(table)

@app.command()
def delete(ids: list[int] = typer.Argument(..., help="note ids")):
    with _reported():
        done = delete_notes(ids)
    console.print(f"[yellow]Deleted[/] {len(done)} note(s)")

@app.command()
def restore(identifier: str):
    with _reported():
        n = restore_note(identifier)
    console.print(f"[green]Restored[/] #{n.id}: {_label(n)}")

@app.command()
def pin(identifier: str):
    with _reported():
        n = pin_note(identifier, True)
    console.print(f"[green]Pinned[/] #{n.id}: {_label(n)}")

@app.command()
def unpin(identifier: str):
    with _reported():
        n = pin_note(identifier, False)
    console.print(f"[yellow]Unpinned[/] #{n.id}: {_label(n)}")

@app.command()
def archive(identifier: str):
    with _reported():
        n = archive_note(identifier, True)
    console.print(f"[yellow]Archived[/] #{n.id}: {_label(n)}")

@app.command()
def unarchive(identifier: str):
    with _reported():
        n = archive_note(identifier, False)
    console.print(f"[green]Unarchived[/] #{n.id}: {_label(n)}")

@app.command()
def move(
    sequence: Sequence = typer.Argument(..., help="list the note is in"),
    from_index: int = typer.Argument(...),
    to_index: int = typer.Argument(...),
    to: Optional[Sequence] = typer.Option(None, "--to", help="drop into the other list"),
):
    with _reported():
        result = move_note(sequence, from_index, to_index, target_sequence=to)
    if result.is_noop:
        console.print("[dim]Nothing to move[/]")
        return
    console.print(f"[green]Moved[/]: {len(result.batch)} position(s) updated")

@app.command()
def renumber():
    with _reported():
        snap = load_board(normalize=True)
    console.print(f"[green]Ordered[/] {len(snap.pinned)} pinned, {len(snap.unpinned)} other")

def main():
    app()

if __name__ == "__main__":
    main()
