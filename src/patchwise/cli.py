"""patchwise CLI — Typer application with apply, files, diff, and init commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from patchwise import __version__

app = typer.Typer(
    name="patchwise",
    help="Apply *** Begin Patch / *** End Patch text patches to files.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Route library logging through Rich on stderr."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    root = logging.getLogger("patchwise")
    root.handlers.clear()
    root.addHandler(
        RichHandler(console=console, show_time=debug, show_path=debug, markup=False)
    )
    root.setLevel(level)


def _read_patch_input(patch: str) -> str:
    """Read patch text from a file, or stdin when *patch* is '-'."""
    try:
        if patch == "-":
            return sys.stdin.read()
        path = Path(patch)
        if not path.is_file():
            console.print(f"[bold red]Error:[/bold red] patch file not found: {escape(patch)}")
            raise typer.Exit(code=2)
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        console.print(f"[bold red]Error:[/bold red] patch is not valid UTF-8: {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


def _resolve_root(root: Optional[str]) -> Path:
    from patchwise.fs.adapter import default_root

    resolved = default_root(root)
    if not resolved.is_dir():
        console.print(f"[bold red]Error:[/bold red] not a directory: {escape(str(resolved))}")
        raise typer.Exit(code=2)
    return resolved


# ── apply ─────────────────────────────────────────────────────────────────────


@app.command()
def apply(
    patch: str = typer.Argument("-", help="Patch file, or '-' to read stdin"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Directory patch paths are relative to"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .patchwise.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Parse and resolve the patch without writing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output with match details"),
) -> None:
    """Apply a patch to files under the root directory."""
    from patchwise.config.loader import ConfigError, load_config
    from patchwise.engine import FuzzExceededError, process_patch
    from patchwise.fs.adapter import FileSystemOps, PathError
    from patchwise.output import json_report, terminal
    from patchwise.patch.models import DiffError

    _configure_logging(verbose, debug)
    root_dir = _resolve_root(root)

    # --- Load config ---
    try:
        cfg = load_config(root_dir, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    # --- CLI overrides ---
    if format:
        if format not in ("terminal", "json"):
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    text = _read_patch_input(patch)
    if not text.strip():
        console.print("[bold red]Error:[/bold red] empty patch; pass patch text through stdin or a file")
        raise typer.Exit(code=2)

    ops = FileSystemOps(
        root_dir,
        encoding=cfg.apply.encoding,
        allow_absolute=cfg.apply.allow_absolute_paths,
    )

    # --- Run ---
    try:
        result = process_patch(
            text,
            ops.read,
            ops.write,
            ops.delete,
            fuzz_threshold=cfg.apply.fuzz_threshold,
            fail_on_fuzz=cfg.apply.fail_on_fuzz,
            dry_run=dry_run,
            check_path=ops.resolve,
        )
    except DiffError as exc:
        console.print(f"[bold red]Patch error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except FuzzExceededError as exc:
        console.print(f"[bold red]Rejected:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except PathError as exc:
        console.print(f"[bold red]Path error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    except OSError as exc:
        console.print(f"[bold red]I/O error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    # --- Output ---
    if cfg.output.format == "json":
        print(json_report.render(result))
    else:
        terminal.render(result, show_summary=cfg.output.show_summary)

    raise typer.Exit(code=0)


# ── files ─────────────────────────────────────────────────────────────────────


@app.command()
def files(
    patch: str = typer.Argument("-", help="Patch file, or '-' to read stdin"),
) -> None:
    """List the existing files a patch needs to read."""
    from patchwise.patch.parser import extract_patch_text, identify_files_needed

    text = extract_patch_text(_read_patch_input(patch))
    for path in sorted(identify_files_needed(text)):
        print(path)


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    old_dir: str = typer.Argument(..., help="Directory holding the original snapshot"),
    new_dir: str = typer.Argument(..., help="Directory holding the target snapshot"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
) -> None:
    """Compare two directory snapshots file by file."""
    from patchwise.fs.adapter import PathError, snapshot_directory
    from patchwise.output import json_report, terminal
    from patchwise.patch.commit import assemble_changes

    if format not in ("terminal", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {format}")
        raise typer.Exit(code=2)

    try:
        orig = snapshot_directory(Path(old_dir))
        dest = snapshot_directory(Path(new_dir))
    except PathError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    commit = assemble_changes(orig, dest)
    if format == "json":
        print(json_report.render_commit(commit))
    else:
        terminal.render_commit(commit)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Directory to write the config into"),
) -> None:
    """Generate a starter .patchwise.toml."""
    from patchwise.config.defaults import DEFAULT_TOML
    from patchwise.config.loader import CONFIG_FILE_NAME

    config_path = _resolve_root(root) / CONFIG_FILE_NAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILE_NAME} already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"patchwise {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """patchwise — apply text patches with fuzzy context matching."""
