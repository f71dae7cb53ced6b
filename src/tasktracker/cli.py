"""Typer CLI for the task tracker."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tasktracker import config
from tasktracker.errors import ParseError, TaskTrackerError
from tasktracker.logging_setup import setup_logging
from tasktracker.models import TaskStatus
from tasktracker.persistence import JsonFileStore

app = typer.Typer(
    name="task-tracker",
    help="Track short tasks from the command line.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

STATUS_STYLE = {
    TaskStatus.TODO: "yellow",
    TaskStatus.IN_PROGRESS: "cyan",
    TaskStatus.DONE: "green",
}

TaskIdArg = Annotated[str, typer.Argument(help="Task ID", show_default=False)]
RFC1123 = "%a, %d %b %Y %H:%M:%S %Z"


def parse_task_id(raw: str) -> int:
    """Turn a user-supplied id into a positive integer or raise ParseError."""
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise ParseError(raw)
    task_id = int(text)
    if task_id < 1:
        raise ParseError(raw)
    return task_id


def format_timestamp(ts: int, fmt: str = "%Y-%m-%d %H:%M") -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime(fmt)


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Print tracker errors in red and exit 1 instead of dumping a traceback."""
    try:
        yield
    except TaskTrackerError as exc:
        logging.getLogger(__name__).debug("command failed: %s", exc.kind)
        err_console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(1) from None


def _get_file_store(ctx: typer.Context) -> JsonFileStore:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Task file (default: $TASK_TRACKER_FILE or the XDG data dir)"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
) -> None:
    """Add, update, delete, mark and list tasks."""
    setup_logging(logging.DEBUG if verbose else config.log_level())
    ctx.obj = JsonFileStore(file or config.default_data_file())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    description: Annotated[str, typer.Argument(help="What needs doing")],
) -> None:
    """Add a new task and print its ID."""
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        store = file_store.load()
        task_id = store.add_task(description)
        file_store.save(store)
    console.print(f"[green]Task added successfully (ID: {task_id})[/green]")


@app.command()
def update(
    ctx: typer.Context,
    task_id: TaskIdArg,
    description: Annotated[str, typer.Argument(help="New description")],
) -> None:
    """Replace the description of a task."""
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        tid = parse_task_id(task_id)
        store = file_store.load()
        store.update_task(tid, description)
        file_store.save(store)
    console.print(f"[green]Updated task {tid}.[/green]")


@app.command()
def delete(ctx: typer.Context, task_id: TaskIdArg) -> None:
    """Delete a task permanently."""
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        tid = parse_task_id(task_id)
        store = file_store.load()
        removed = store.delete_task(tid)
        file_store.save(store)
    console.print(f"[green]Deleted task {tid}: {escape(removed.description)}[/green]")


def _mark(ctx: typer.Context, task_id: str, status: str) -> None:
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        tid = parse_task_id(task_id)
        store = file_store.load()
        task = store.mark_task(tid, status)
        file_store.save(store)
    console.print(f"[green]Marked task {tid} as {task.status.value}.[/green]")


@app.command()
def mark(
    ctx: typer.Context,
    task_id: TaskIdArg,
    status: Annotated[str, typer.Argument(help="todo, in-progress or done")],
) -> None:
    """Set the status of a task."""
    _mark(ctx, task_id, status)


@app.command("mark-todo")
def mark_todo(ctx: typer.Context, task_id: TaskIdArg) -> None:
    """Move a task back to todo."""
    _mark(ctx, task_id, TaskStatus.TODO)


@app.command("mark-in-progress")
def mark_in_progress(ctx: typer.Context, task_id: TaskIdArg) -> None:
    """Mark a task as in-progress."""
    _mark(ctx, task_id, TaskStatus.IN_PROGRESS)


@app.command("mark-done")
def mark_done(ctx: typer.Context, task_id: TaskIdArg) -> None:
    """Mark a task as done."""
    _mark(ctx, task_id, TaskStatus.DONE)


@app.command("list")
def list_tasks(
    ctx: typer.Context,
    status_filter: Annotated[
        Optional[str],
        typer.Argument(help="Only show tasks with this status (todo, in-progress, done)", show_default=False),
    ] = None,
) -> None:
    """List all tasks, or only those with one status."""
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        store = file_store.load()
        tasks = store.list_tasks(status_filter)

    if not tasks:
        console.print("No tasks match the filter.")
        return

    table = Table(title="Tasks")
    table.add_column("ID", justify="right")
    table.add_column("Description")
    table.add_column("Status")
    table.add_column("Created")
    table.add_column("Updated")

    for t in tasks:
        tid, description, status, created_at, updated_at = t.row()
        table.add_row(
            str(tid),
            escape(description),
            f"[{STATUS_STYLE[status]}]{status.value}[/]",
            format_timestamp(created_at),
            format_timestamp(updated_at),
        )

    console.print(table)
    if status_filter and status_filter.strip():
        console.print(f"[dim]Showing {len(tasks)} of {len(store)} tasks[/dim]")


@app.command()
def show(ctx: typer.Context, task_id: TaskIdArg) -> None:
    """Show all details for a single task."""
    file_store = _get_file_store(ctx)
    with _reporting_errors():
        tid = parse_task_id(task_id)
        store = file_store.load()
        t = store.get_task(tid)

    style = STATUS_STYLE[t.status]
    console.print(f"\n[bold]{t.id}[/bold]  {escape(t.description)}")
    console.print(f"  Status:   [{style}]{t.status.value}[/]")
    console.print(f"  Created:  {format_timestamp(t.created_at, RFC1123)}")
    console.print(f"  Updated:  {format_timestamp(t.updated_at, RFC1123)}")
    console.print()
