"""Console output helpers shared by the CLI tools."""

import functools
import sys
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✔[/green] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[bold red]✖[/bold red] {message}")


def create_table(title: Optional[str] = None) -> Table:
    """
    Create a table with the common tool styling.

    Args:
        title: Optional table title

    Returns:
        Empty rich Table ready for columns
    """
    return Table(title=title, show_header=True, header_style="bold", show_lines=False)


def print_table(table: Table) -> None:
    """Render a table to the console."""
    console.print(table)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Report unexpected errors from a CLI entry point and exit non-zero.

    Click's own exceptions and explicit sys.exit() calls pass through.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.ClickException, click.exceptions.Exit, click.exceptions.Abort):
            raise
        except KeyboardInterrupt:
            error("Interrupted")
            sys.exit(130)
        except Exception as e:
            error(f"{type(e).__name__}: {e}")
            sys.exit(1)

    return wrapper
