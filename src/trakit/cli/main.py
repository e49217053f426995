"""Main CLI entry point for Trakit."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from trakit.constants import (
    ENV_REPO_ROOT,
    EXIT_DATA_ERROR,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    SHORT_HASH_LENGTH,
)
from trakit.core import Repository
from trakit.errors import (
    AmbiguousRevisionError,
    CommitNotFoundError,
    DataCorruptionError,
    NotARepositoryError,
    StorageError,
    TrakitError,
)


class LogFormat(str, Enum):
    DEFAULT = "default"
    ONELINE = "oneline"
    JSON = "json"


console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="trakit",
    help="Trakit - A lightweight version control system",
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _workspace(ctx: typer.Context) -> Path:
    if ctx.obj and ctx.obj.get("repo"):
        return Path(ctx.obj["repo"])
    return Path.cwd()


def _short(digest: str) -> str:
    return digest[:SHORT_HASH_LENGTH]


def _report(error: Exception) -> typer.Exit:
    """Print an error in its category's style and return the matching exit."""
    if isinstance(error, NotARepositoryError):
        console.print("[bold red]Error:[/bold red] Not a trakit repository", style="red")
        console.print(f"  {error}", style="dim")
        console.print("\nRun [bold]trakit init[/bold] first.", style="yellow")
        return typer.Exit(EXIT_USER_ERROR)

    if isinstance(error, AmbiguousRevisionError):
        console.print(f"[bold red]Error:[/bold red] {error}", style="red")
        for match in error.matches:
            console.print(f"  [yellow]{match}[/yellow]")
        console.print("\nProvide a longer hash prefix.", style="yellow")
        return typer.Exit(EXIT_USER_ERROR)

    if isinstance(error, CommitNotFoundError):
        console.print(f"[bold red]Error:[/bold red] {error}", style="red")
        console.print("\nUse [bold]trakit log[/bold] to list commits.", style="yellow")
        return typer.Exit(EXIT_USER_ERROR)

    if isinstance(error, DataCorruptionError):
        console.print(f"[bold red]Error:[/bold red] Repository data is corrupted: {error}", style="red")
        return typer.Exit(EXIT_DATA_ERROR)

    if isinstance(error, (StorageError, OSError)):
        console.print(f"[bold red]Error:[/bold red] Storage failure: {error}", style="red")
        return typer.Exit(EXIT_SYSTEM_ERROR)

    console.print(f"[bold red]Error:[/bold red] {error}", style="red")
    return typer.Exit(EXIT_USER_ERROR)


@app.callback()
def main_callback(
    ctx: typer.Context,
    repo: Optional[Path] = typer.Option(
        None,
        "--repo",
        "-C",
        envvar=ENV_REPO_ROOT,
        help="Workspace root (default: current directory)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Trakit - A lightweight version control system."""
    _configure_logging(verbose)
    ctx.obj = {"repo": repo}


@app.command()
def version() -> None:
    """Show Trakit version."""
    from trakit import __version__
    typer.echo(f"Trakit version {__version__}")


@app.command()
def init(
    ctx: typer.Context,
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Initialize a new repository."""
    workspace_root = _workspace(ctx)

    try:
        existed = Repository(workspace_root).is_initialized()
        repo = Repository.init(workspace_root)
    except (TrakitError, OSError) as e:
        raise _report(e) from e

    if quiet:
        return

    if existed:
        console.print("Reinitialized existing trakit repository.")
        return

    console.print(
        Panel(
            f"[bold green]✓[/bold green] Initialized empty trakit repository\n\n"
            f"[dim]Storage location:[/dim] {repo.trakit_dir}\n\n"
            f"[bold]Next steps:[/bold]\n"
            f"  1. Stage files: [cyan]trakit add .[/cyan]\n"
            f"  2. Commit them: [cyan]trakit commit \"first\"[/cyan]",
            border_style="green",
            title="Trakit Initialized",
        )
    )


@app.command()
def add(
    ctx: typer.Context,
    paths: Optional[List[str]] = typer.Argument(
        None, help="Files or directories to stage (default: everything)"
    ),
) -> None:
    """Stage files for commit."""
    try:
        repo = Repository.open(_workspace(ctx))
        selected = [p for p in (paths or []) if p != "."] or None
        result = repo.add(selected)
    except (TrakitError, OSError) as e:
        raise _report(e) from e

    if result.new:
        console.print("[bold green]New:[/bold green]")
        for path in result.new:
            console.print(f"  [green]+[/green] {path}")

    if result.modified:
        console.print("[bold yellow]Modified:[/bold yellow]")
        for path in result.modified:
            console.print(f"  [yellow]*[/yellow] {path}")

    counts = result.counts()
    if result.entries:
        console.print(
            f"\n[bold green]>[/bold green] {len(result.entries)} file(s) staged "
            f"[dim]({counts['new']} new, {counts['modified']} modified, "
            f"{counts['unchanged']} unchanged)[/dim]"
        )
    else:
        console.print("[yellow]No files found to add[/yellow]")


@app.command()
def commit(
    ctx: typer.Context,
    words: Optional[List[str]] = typer.Argument(None, help="Commit message"),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message (default: 'no message')",
    ),
) -> None:
    """Create a commit from the staged files."""
    text = message if message is not None else " ".join(words or [])

    try:
        repo = Repository.open(_workspace(ctx))
        created = repo.commit(text)
    except (TrakitError, OSError) as e:
        raise _report(e) from e

    console.print(f"[bold green]>[/bold green] Commit created: [bold cyan]{created.digest}[/bold cyan]")
    console.print(f"  [dim]Files:[/dim] {len(created.files)}")
    console.print(f"\n  {created.message}")


@app.command()
def log(
    ctx: typer.Context,
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
    format: LogFormat = typer.Option(  # noqa: A002
        LogFormat.DEFAULT,
        "--format",
        help="Output format: default, oneline, json",
    ),
) -> None:
    """Show commit history."""
    try:
        repo = Repository.open(_workspace(ctx))
        commits = repo.log(max_count=max_count)
        head = repo.head.read()
    except (TrakitError, OSError) as e:
        raise _report(e) from e

    if format is LogFormat.JSON:
        typer.echo(json.dumps([c.to_dict() for c in commits], indent=2, ensure_ascii=False))
        return

    if not commits:
        console.print("[dim]No commits yet.[/dim]")
        return

    if oneline or format is LogFormat.ONELINE:
        for entry in commits:
            first_line = entry.message.split("\n")[0]
            console.print(f"[yellow]{_short(entry.digest)}[/yellow] {first_line}")
        return

    for i, entry in enumerate(commits):
        marker = " [bold cyan](HEAD)[/bold cyan]" if entry.digest == head else ""
        console.print(f"[bold yellow]Commit: {entry.digest}[/bold yellow]{marker}")
        console.print(f"[bold]Message:[/bold] {entry.message}")
        console.print(f"[bold]Time:[/bold]    {entry.timestamp}")
        if i < len(commits) - 1:
            console.print("[dim]-------------------------[/dim]")


@app.command()
def revert(
    ctx: typer.Context,
    revision: Optional[str] = typer.Argument(None, help="Full or abbreviated commit hash"),
) -> None:
    """Restore files from a commit."""
    if not revision:
        console.print("[bold red]Error:[/bold red] Please provide commit hash.", style="red")
        console.print("  Usage: [bold]trakit revert <hash>[/bold]", style="yellow")
        raise typer.Exit(EXIT_USER_ERROR)

    try:
        repo = Repository.open(_workspace(ctx))
        result = repo.revert(revision)
    except (TrakitError, OSError) as e:
        raise _report(e) from e

    for path in result.restored:
        console.print(f"  [green]✓[/green] {path}")
    for skipped in result.skipped:
        console.print(
            f"  [yellow]![/yellow] {skipped.path}  [yellow]Warning: {skipped.reason}[/yellow] "
            f"[dim]({_short(skipped.digest)})[/dim]"
        )

    console.print(f"\n[bold green]>[/bold green] Reverted to commit: [bold cyan]{result.digest}[/bold cyan]")
    if not result.complete:
        console.print(
            f"[yellow]{len(result.skipped)} file(s) could not be restored.[/yellow]"
        )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
