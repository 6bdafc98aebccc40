"""Decorators for vtree CLI commands."""

import functools
import logging
from typing import Any, Callable

import typer
from rich.console import Console
from rich.markup import escape

from vtree.tree import TreeError

logger = logging.getLogger(__name__)
console = Console()


def handle_tree_errors(func: Callable) -> Callable:
    """
    Decorator to handle common workspace and tree errors.

    Centralizes error handling for:
    - FileNotFoundError: Workspace or document doesn't exist
    - FileExistsError: Document already exists
    - PermissionError: No access to files
    - TreeError / ValueError: Invalid names or paths
    - General exceptions: Unexpected errors
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except FileNotFoundError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        except FileExistsError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        except PermissionError as e:
            console.print(f"[bold red]Error:[/bold red] Permission denied: {escape(str(e))}")
            console.print("[yellow]Tip: Check file permissions or run with appropriate privileges[/yellow]")
            raise typer.Exit(code=1)
        except (TreeError, ValueError) as e:
            console.print(f"[bold red]Error:[/bold red] Invalid input: {escape(str(e))}")
            raise typer.Exit(code=1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(code=130)
        except typer.Exit:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

    return wrapper
