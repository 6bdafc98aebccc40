import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table
from rich.traceback import install

from .config import load_config, update_config, get_config_path
from .decorators import handle_tree_errors
from .storage import StorageLayout

# Initialize Rich Traceback for better error messages
install(show_locals=False)

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger("vtree")

# Main app
app = typer.Typer(help="Virtual file tree manager")


def get_layout() -> StorageLayout:
    """Storage layout for the configured (or current) directory."""
    config = load_config()
    return StorageLayout(config.storage.base_dir)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
):
    """
    vtree - organize real files into virtual directory trees.

    Files stay where they are; a tree of names pointing at them is kept
    in .vtree/trees/<name>.json and browsed with cd, ls, cat, ...
    """
    if verbose or load_config().cli.verbose:
        logger.setLevel(logging.DEBUG)


@app.command()
@handle_tree_errors
def init():
    """
    Initialize the current directory for vtree.

    Creates .vtree/ with trees/ and virtual-files/ inside it.
    """
    root = get_layout().init()
    console.print(f"[green]✓ Initialized vtree at {escape(str(root))}[/green]")


@app.command()
@handle_tree_errors
def new(
    name: str = typer.Argument("default", help="Name of the new virtual root"),
    desc: Optional[str] = typer.Option(None, "--desc", "-d", help="Description of the root"),
):
    """
    Create a new virtual root.

    Example:
        vtree new papers --desc "Reading list"
    """
    path = get_layout().new_tree(name, desc=desc)
    console.print(f"[green]✓ Created virtual root '{escape(name)}'[/green]")
    console.print(f"  Document: {escape(str(path))}")


@app.command(name="list")
@handle_tree_errors
def list_trees():
    """List all virtual roots."""
    roots = get_layout().list_trees()
    if not roots:
        console.print("[yellow]No virtual roots yet. Use 'vtree new <name>'.[/yellow]")
        return

    table = Table(title="Virtual roots")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Items", style="dim", justify="right")
    for root in roots:
        table.add_row(escape(root.name), escape(root.desc or ""), str(len(root.children)))
    console.print(table)


@app.command()
@handle_tree_errors
def remove(
    name: str = typer.Argument(..., help="Name of the virtual root"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    keep_files: bool = typer.Option(False, "--keep-files", help="Keep files created with touch"),
):
    """
    Delete a virtual root.

    Aliased files are never touched; files created inside the tree with
    touch are deleted unless --keep-files is given.
    """
    layout = get_layout()
    if not layout.tree_path(name).exists():
        raise FileNotFoundError(f"Virtual directory {name} does not exist.")
    if not yes and not Confirm.ask(f"Delete virtual root '{name}'?"):
        console.print("[red]Operation cancelled[/red]")
        raise typer.Exit(code=0)

    deleted = layout.remove_tree(name, purge=not keep_files)
    console.print(f"[green]✓ Removed virtual root '{escape(name)}'[/green]")
    if deleted:
        console.print(f"  Deleted {len(deleted)} backing file(s)")


@app.command()
@handle_tree_errors
def tree(
    name: str = typer.Argument(..., help="Name of the virtual root"),
):
    """Print a virtual root as an outline."""
    model = get_layout().load_tree(name)
    console.print(escape(model.root.format()))


@app.command()
@handle_tree_errors
def enter(
    name: str = typer.Argument(..., help="Name of the virtual root"),
):
    """
    Enter a virtual root in an interactive shell.

    Commands:
        cd, pwd, ls, tree      - Navigate
        cat, open              - Read or open files
        touch, cp, mkdir, rm   - Change the tree
        desc                   - Show or set descriptions
        call <prog> [args]     - Run a program on virtual paths
        exit [--discard]       - Save and leave (or drop changes)

    Example:
        vtree enter papers
    """
    from .repl import Session, VTreeShell

    config = load_config()
    session = Session.open(StorageLayout(config.storage.base_dir), name)
    VTreeShell(session, config=config.shell).run()


@app.command()
@handle_tree_errors
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    base_dir: Optional[str] = typer.Option(None, "--base-dir", help="Directory containing .vtree"),
    history: Optional[bool] = typer.Option(None, "--history/--no-history", help="Persist shell history"),
    color: Optional[bool] = typer.Option(None, "--color/--no-color", help="Colored shell output"),
    verbose: Optional[bool] = typer.Option(None, "--verbose/--no-verbose", help="Verbose by default"),
):
    """
    Show or update configuration.

    Examples:
        vtree config --show
        vtree config --base-dir ~/notes --no-history
    """
    if any(value is not None for value in (base_dir, history, color, verbose)):
        update_config(
            shell_history=history,
            shell_color=color,
            storage_base_dir=base_dir,
            cli_verbose=verbose,
        )
        console.print(f"[green]✓ Configuration saved to {escape(str(get_config_path()))}[/green]")
        if not show:
            return

    settings = load_config().to_dict()
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for section, values in settings.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", escape(str(value)))
    console.print(table)
