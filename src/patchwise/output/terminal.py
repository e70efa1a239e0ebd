"""Rich terminal reporter — change table, summary and verdict."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from patchwise.engine import PatchResult
from patchwise.patch.models import ActionType, Commit

_ACTION_STYLE = {
    ActionType.ADD: "bold black on green",
    ActionType.UPDATE: "bold black on yellow",
    ActionType.DELETE: "bold white on red",
}


def _action_pill(action: ActionType) -> Text:
    return Text(f" {action.value.upper()} ", style=_ACTION_STYLE.get(action, ""))


def _line_count(content: Optional[str]) -> str:
    return "-" if content is None else str(len(content.split("\n")))


def _changes_table(commit: Commit, title: str) -> Table:
    table = Table(
        title=title,
        show_lines=False,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Action", justify="center", width=10)
    table.add_column("Path", style="cyan", min_width=20)
    table.add_column("Move to", style="magenta")
    table.add_column("Old lines", justify="right", style="red")
    table.add_column("New lines", justify="right", style="green")

    for path, change in commit.changes.items():
        table.add_row(
            _action_pill(change.type),
            Text(path),
            Text(change.move_path or ""),
            _line_count(change.old_content),
            _line_count(change.new_content),
        )
    return table


def render(result: PatchResult, *, show_summary: bool = True) -> None:
    """Print a patch result to the terminal using Rich."""
    console = Console(stderr=True)

    console.print()
    if not result.commit.changes:
        console.print("[dim]Patch contains no changes.[/dim]")
    else:
        title = "Patch Preview" if result.dry_run else "Patch Applied"
        console.print(_changes_table(result.commit, title))

    if show_summary:
        _print_summary(console, result)

    console.print()
    if result.fuzz_exceeded:
        console.print(
            f"[bold yellow]⚠️  Context matched with fuzz {result.fuzz} "
            f"(threshold {result.fuzz_threshold}). Review the result.[/bold yellow]"
        )
    if result.dry_run:
        console.print("[bold]Dry run — no files were written.[/bold]")
    else:
        console.print("[bold green]✅ Patch applied successfully.[/bold green]")


def render_commit(commit: Commit) -> None:
    """Print a bare commit (snapshot diff)."""
    console = Console(stderr=True)
    console.print()
    if not commit.changes:
        console.print("[bold green]✅ Snapshots are identical.[/bold green]")
        return
    console.print(_changes_table(commit, "Snapshot Diff"))


def _print_summary(console: Console, result: PatchResult) -> None:
    console.print()
    console.print(f"[dim]Files read:[/dim]     {len(result.files_read)}")
    console.print(f"[dim]Added:[/dim]          {len(result.added)}")
    console.print(f"[dim]Updated:[/dim]        {len(result.updated)}")
    console.print(f"[dim]Moved:[/dim]          {len(result.moved)}")
    console.print(f"[dim]Deleted:[/dim]        {len(result.deleted)}")
    console.print(f"[dim]Fuzz:[/dim]           {result.fuzz}")
    console.print(f"[dim]Duration:[/dim]       {result.duration_ms:.0f}ms")
