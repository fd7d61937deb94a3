from __future__ import annotations
from pathlib import Path
from typing import Optional
import locale
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from .errors import NotesError, ValidationFailed
from .lifecycle import format_date, format_tags_for_display, parse_tags, truncate_text
from .models import CATEGORY_LABELS, PRIORITY_LABELS, Category, Priority, SearchFilters, SortOption
from .services import NotesController

app = typer.Typer(help="Progress Notes: personal notes in your terminal")
console = Console()

PRIORITY_STYLE = {Priority.HIGH: "red", Priority.MEDIUM: "yellow", Priority.LOW: "green"}


def _fail(message: str) -> None:
    console.print(f"[red]Error[/]: {message}")
    raise typer.Exit(1)


def _ctl(ctx: typer.Context) -> NotesController:
    return ctx.obj


@app.callback()
def _boot(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    try:
        # title sorting collates with the user's locale
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logging.getLogger(__name__).debug("Locale not supported, using default collation")
    ctl = NotesController()
    for warning in ctl.load():
        console.print(f"[yellow]Warning[/]: {warning}")
    ctx.obj = ctl


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t"),
    content: str = typer.Option(..., "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="comma or space separated"),
    priority: Priority = typer.Option(Priority.MEDIUM, "--priority", "-p"),
    category: Category = typer.Option(Category.TASK, "--category", "-k"),
    favorite: bool = typer.Option(False, "--favorite"),
):
    try:
        n = _ctl(ctx).create(title, content, parse_tags(tags), priority, category, favorite)
    except ValidationFailed as exc:
        for message in exc.messages:
            console.print(f"[red]{message}[/]")
        raise typer.Exit(1)
    except NotesError as exc:
        _fail(str(exc))
    console.print(f"[green]Created[/] {n.id}: {n.title}")


@app.command("list")
def _list(
    ctx: typer.Context,
    query: Optional[str] = typer.Option(None, "--query", "-q"),
    priority: Optional[Priority] = typer.Option(None, "--priority", "-p"),
    category: Optional[Category] = typer.Option(None, "--category", "-k"),
    favorite: Optional[bool] = typer.Option(None, "--favorite/--not-favorite"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", help="repeatable, substring match"),
    sort: SortOption = typer.Option(SortOption.NEWEST, "--sort"),
):
    ctl = _ctl(ctx)
    ctl.set_filters(
        SearchFilters(query=query, priority=priority, category=category, is_favorite=favorite, tags=tag)
    )
    notes = ctl.set_sort(sort)

    table = Table(title=f"Progress Notes ({len(notes)} of {len(ctl.notes)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Tags", style="magenta")
    table.add_column("★")
    table.add_column("Created")
    for n in notes:
        table.add_row(
            n.id,
            truncate_text(n.title, 60),
            f"[{PRIORITY_STYLE[n.priority]}]{n.priority.value}[/]",
            CATEGORY_LABELS[n.category],
            ", ".join(n.tags),
            "★" if n.is_favorite else "",
            format_date(n.created_at),
        )
    console.print(table)


@app.command()
def show(ctx: typer.Context, note_id: str):
    try:
        n = _ctl(ctx).find(note_id)
    except NotesError as exc:
        _fail(str(exc))
    star = " ★" if n.is_favorite else ""
    console.rule(f"{n.title}{star}")
    console.print(
        f"[dim]{PRIORITY_LABELS[n.priority]} · {CATEGORY_LABELS[n.category]} · "
        f"updated {format_date(n.updated_at)}[/]"
    )
    if n.tags:
        console.print(f"[dim]tags:[/] {', '.join(format_tags_for_display(n.tags))}")
    console.print(Markdown(n.content or "_<empty>_"))


@app.command()
def edit(
    ctx: typer.Context,
    note_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g"),
    priority: Optional[Priority] = typer.Option(None, "--priority", "-p"),
    category: Optional[Category] = typer.Option(None, "--category", "-k"),
):
    try:
        n = _ctl(ctx).edit(
            note_id,
            title=title,
            content=content,
            tags=None if tags is None else parse_tags(tags),
            priority=priority,
            category=category,
        )
    except ValidationFailed as exc:
        for message in exc.messages:
            console.print(f"[red]{message}[/]")
        raise typer.Exit(1)
    except NotesError as exc:
        _fail(str(exc))
    console.print(f"[green]Updated[/] {n.id}: {n.title}")


@app.command()
def delete(ctx: typer.Context, note_id: str, yes: bool = typer.Option(False, "--yes", "-y")):
    ctl = _ctl(ctx)
    try:
        n = ctl.find(note_id)
        if not yes and (n.priority is Priority.HIGH or n.is_favorite):
            marked = "high priority" if n.priority is Priority.HIGH else "favorite"
            typer.confirm(f'Delete "{n.title}"? This note is marked as {marked}.', abort=True)
        ctl.delete(note_id)
    except NotesError as exc:
        _fail(str(exc))
    console.print(f'[yellow]Deleted[/] "{n.title}"')


@app.command()
def favorite(ctx: typer.Context, note_id: str):
    try:
        n = _ctl(ctx).toggle_favorite(note_id)
    except NotesError as exc:
        _fail(str(exc))
    state = "Favorited" if n.is_favorite else "Unfavorited"
    console.print(f"[green]{state}[/] {n.id}: {n.title}")


@app.command()
def tags(ctx: typer.Context):
    for t in _ctl(ctx).tags():
        console.print(f"[magenta]{t}[/]")


@app.command()
def stats(
    ctx: typer.Context,
    storage: bool = typer.Option(False, "--storage", help="include stored data usage"),
):
    s = _ctl(ctx).stats()
    table = Table(title="Stats", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(s.total))
    table.add_row("Favorites", str(s.favorites))
    table.add_row("Last 7 days", str(s.recent_notes))
    table.add_row("Tags", str(s.tags))
    for p, count in s.priorities.items():
        table.add_row(PRIORITY_LABELS[p], str(count))
    for c, count in s.categories.items():
        table.add_row(CATEGORY_LABELS[c], str(count))
    if storage:
        st = _ctl(ctx).storage_stats()
        table.add_section()
        table.add_row("Stored notes", str(st.total_notes))
        table.add_row("Stored favorites", str(st.favorite_notes))
        table.add_row("Storage size", st.storage_size)
    console.print(table)


@app.command()
def categories(ctx: typer.Context):
    for c in _ctl(ctx).categories():
        console.print(f"[cyan]{c.value}[/] {CATEGORY_LABELS[c]}")


@app.command()
def reset(ctx: typer.Context, yes: bool = typer.Option(False, "--yes", "-y")):
    """Delete every stored note."""
    if not yes:
        typer.confirm("Delete ALL notes? This cannot be undone.", abort=True)
    try:
        _ctl(ctx).clear()
    except NotesError as exc:
        _fail(str(exc))
    console.print("[yellow]All notes deleted[/]")


@app.command()
def export(ctx: typer.Context, to: Path = typer.Option(Path("."), "--to", file_okay=False)):
    ctl = _ctl(ctx)
    try:
        path = ctl.export(to)
    except OSError as exc:
        _fail(f"Export failed: {exc}")
    console.print(f"[green]Exported[/] {len(ctl.notes)} notes → {path}")


@app.command("import")
def import_(ctx: typer.Context, from_: Path = typer.Option(..., "--from", exists=True, dir_okay=False)):
    try:
        notes = _ctl(ctx).import_file(from_)
    except NotesError as exc:
        _fail(str(exc))
    console.print(f"[green]Imported[/] {len(notes)} notes")


def main():
    app()


if __name__ == "__main__":
    main()
