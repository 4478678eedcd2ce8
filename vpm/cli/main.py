"""Main CLI application for vpm."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vpm import __version__
from vpm.core.builder import BuildError, BuildSummary, get_builder
from vpm.core.layout import Layout, encode_repos_path
from vpm.core.transaction import TransactionError, TransactionLock

# Create the main Typer app
app = typer.Typer(
    name="vpm",
    help="Build Vim's plugin tree from pinned repositories",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

# Set up logger for the vpm package
logger = logging.getLogger("vpm")


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger.setLevel(level)

    # Only add handler if not already configured
    if not logger.handlers:
        handler = RichHandler(
            console=error_console,
            show_time=verbosity >= 2,
            show_path=verbosity >= 3,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        logger.addHandler(handler)
    else:
        for h in logger.handlers:
            h.setLevel(level)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_summary(summary: BuildSummary) -> None:
    """Print the installed repositories as a table."""
    if not summary.build_info.repos:
        console.print("No repositories in the current profile")
        return

    table = Table(title=f"Installed into {summary.target_dir}")
    table.add_column("Type", style="cyan")
    table.add_column("Repository", style="green")
    table.add_column("Directory")
    table.add_column("Version", style="dim")
    for repos in summary.build_info.repos:
        table.add_row(repos.type, repos.path, encode_repos_path(repos.path), repos.version[:12])
    console.print(table)


def run_build(full: bool, quiet: bool) -> None:
    """Run a build under the transaction lock and report the outcome."""
    layout = Layout.from_env()
    try:
        with TransactionLock(layout.trx_lock_file) as lock:
            builder = get_builder(layout, lock, full=full)
            summary = builder.build()
    except TransactionError as e:
        print_error(f"Failed to begin transaction: {e}")
        raise typer.Exit(10) from e
    except BuildError as e:
        print_error(f"Failed to build: {e}")
        raise typer.Exit(11) from e

    print_success(
        f"Built {len(summary.build_info.repos)} repositories ({summary.strategy} strategy)"
    )
    if not quiet:
        print_summary(summary)


@app.callback()
def callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v info, -vv debug)",
        ),
    ] = 0,
) -> None:
    """vpm - Vim plugin manager."""
    setup_logging(verbose)


@app.command()
def version() -> None:
    """Show the vpm version."""
    console.print(f"vpm {__version__}")


@app.command()
def build(
    full: Annotated[
        bool,
        typer.Option(
            "--full",
            "-f",
            help="Rebuild everything from pinned commits instead of linking working copies",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Don't print the installed repositories"),
    ] = False,
) -> None:
    """Install the current profile's repositories into Vim's plugin tree."""
    run_build(full=full, quiet=quiet)


@app.command()
def rebuild(
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Don't print the installed repositories"),
    ] = False,
) -> None:
    """Replace the plugin tree with a full copy of every pinned repository."""
    run_build(full=True, quiet=quiet)


if __name__ == "__main__":
    app()
