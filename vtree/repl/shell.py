"""Interactive REPL shell for a virtual tree."""

import os
import shlex
import subprocess
from typing import Callable, Dict, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vtree.config import ShellConfig
from vtree.repl.session import Session
from vtree.tree import InvalidNameError, TreeError, TreeModel


class PathCompleter(Completer):
    """Tab completion for virtual paths."""

    def __init__(self, tree: TreeModel):
        self.tree = tree

    def get_completions(self, document, complete_event):
        """Get path completion candidates."""
        text = document.text_before_cursor
        words = text.split()

        # Complete the argument under the cursor, not the command
        if len(words) > 1 and not text.endswith(" "):
            partial = words[-1]
        elif words and text.endswith(" "):
            partial = ""
        else:
            return

        for candidate in self.tree.complete(partial):
            yield Completion(candidate, start_position=-len(partial))


class VTreeShell:
    """Interactive shell over one open virtual root.

    Commands:
    - cd, pwd, ls, tree: Navigate the tree
    - cat, open: Read or open aliased files
    - touch, cp, mkdir, rm, desc: Change the tree
    - call: Run a program with virtual paths replaced by real ones
    - help, exit, quit
    """

    def __init__(
        self,
        session: Session,
        console: Optional[Console] = None,
        config: Optional[ShellConfig] = None,
    ):
        """Initialize the REPL shell.

        Args:
            session: The open root to operate on
            console: Output console (a new one by default)
            config: Shell settings (defaults if omitted)
        """
        self.session = session
        self.config = config or ShellConfig()
        self.console = console or Console(no_color=not self.config.color)
        self.running = True
        self._prompt_session: Optional[PromptSession] = None

        # Command registry
        self.commands: Dict[str, Callable[[List[str]], Optional[str]]] = {
            "cd": self.cmd_cd,
            "pwd": self.cmd_pwd,
            "ls": self.cmd_ls,
            "tree": self.cmd_tree,
            "cat": self.cmd_cat,
            "touch": self.cmd_touch,
            "open": self.cmd_open,
            "cp": self.cmd_cp,
            "mkdir": self.cmd_mkdir,
            "rm": self.cmd_rm,
            "desc": self.cmd_desc,
            "call": self.cmd_call,
            "help": self.cmd_help,
            "?": self.cmd_help,
            "exit": self.cmd_exit,
            "quit": self.cmd_quit,
        }

    @property
    def tree(self) -> TreeModel:
        return self.session.tree

    def get_prompt(self) -> str:
        """Generate prompt showing the root and current path.

        Returns:
            Prompt string like "/[papers]/reading > "
        """
        return self.tree.as_prefix()

    def _get_prompt_session(self) -> PromptSession:
        if self._prompt_session is None:
            if self.config.history:
                history = FileHistory(str(self.session.layout.history_file))
            else:
                history = InMemoryHistory()
            self._prompt_session = PromptSession(
                history=history,
                completer=PathCompleter(self.tree),
                style=Style.from_dict({"prompt": self.config.prompt_style}),
            )
        return self._prompt_session

    def run(self):
        """Run the shell main loop, then save (or discard) the tree."""
        self.console.print(
            f"[bold cyan]vtree[/bold cyan] - {escape(self.session.name)}", style="bold"
        )
        self.console.print("Type 'help' for available commands, 'exit' to quit.\n")

        prompt_session = self._get_prompt_session()
        while self.running:
            try:
                line = prompt_session.prompt(self.get_prompt()).strip()
                if not line:
                    continue
                self.execute(line)

            except KeyboardInterrupt:
                self.console.print("\nUse 'exit' or 'quit' to exit the shell.")
                continue
            except EOFError:
                break
            except Exception as e:
                self.console.print(f"[red]Error:[/red] {escape(str(e))}", style="bold")

        self.cleanup()

    def execute(self, line: str) -> Optional[str]:
        """Parse and execute a command line.

        Args:
            line: Command line to execute

        Returns:
            The command's output, or None
        """
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]Parse error:[/red] {escape(str(e))}")
            return None

        if not parts:
            return None

        return self.execute_command(parts[0], parts[1:])

    def execute_command(self, cmd: str, args: List[str]) -> Optional[str]:
        """Run one command, printing any tree or I/O error it raises."""
        if cmd not in self.commands:
            self.console.print(
                f"[red]Unknown command:[/red] {escape(cmd)}. Type 'help' for available commands."
            )
            return None

        try:
            return self.commands[cmd](args)
        except (TreeError, OSError, ValueError, subprocess.CalledProcessError) as e:
            self.console.print(f"[red]{cmd}: {escape(str(e))}[/red]")
            return None

    def _print(self, text: str) -> str:
        if text:
            self.console.print(escape(text))
        return text

    # Command implementations

    def cmd_cd(self, args: List[str]) -> Optional[str]:
        """Change directory.

        Usage: cd [path]

        With no path, or "~", go to the root. "~/a/b" walks from the root.
        """
        path = args[0] if args else "~"
        saved = self.tree.path
        if path.startswith("~"):
            self.tree.move_to_home()
            path = path[1:]
        try:
            self.tree.move_by_string(path)
        except TreeError:
            self.tree.path = saved
            raise
        return None

    def cmd_pwd(self, args: List[str]) -> Optional[str]:
        """Print working directory.

        Usage: pwd
        """
        return self._print(f"./{self.tree.root.name}/{self.tree.pwd()}")

    def cmd_ls(self, args: List[str]) -> Optional[str]:
        """List directory contents.

        Usage: ls [path] [--desc]
        """
        with_desc = False
        paths = []
        for arg in args:
            if arg in ("--desc", "-d"):
                with_desc = True
            else:
                paths.append(arg)
        path = paths[0] if paths else None

        if with_desc:
            return self._print(self.tree.ls_with_desc(path))
        return self._print(self.tree.ls_simple(path))

    def cmd_tree(self, args: List[str]) -> Optional[str]:
        """Show a directory as an outline.

        Usage: tree [path]

        The path is relative to the current directory.
        """
        return self._print(self.tree.tree_string(args[0] if args else None))

    def cmd_cat(self, args: List[str]) -> Optional[str]:
        """Print the content of a file.

        Usage: cat <path>
        """
        if not args:
            self.console.print("[red]Usage:[/red] cat <path>")
            return None
        content = self.tree.read_file(args[0]).decode("utf-8", errors="replace")
        self.console.print(escape(content), end="" if content.endswith("\n") else "\n")
        return content

    def cmd_touch(self, args: List[str]) -> Optional[str]:
        """Create a new empty file in vtree's private storage.

        Usage: touch <path>
        """
        if not args:
            self.console.print("[red]Usage:[/red] touch <path>")
            return None
        segments = self.tree.resolve_virtual_path(args[0])
        if not segments:
            raise InvalidNameError(f"{args[0]!r} does not name a file")
        candidate = self.session.layout.virtual_file_candidate(segments[-1])
        self.tree.create_new_file(args[0], candidate)
        return None

    def cmd_open(self, args: List[str]) -> Optional[str]:
        """Open a file with the default application.

        Usage: open <path>
        """
        if not args:
            self.console.print("[red]Usage:[/red] open <path>")
            return None
        real = self.tree.open_file(args[0])
        self.console.print(f"[dim]Opened {escape(real)}[/dim]")
        return real

    def cmd_cp(self, args: List[str]) -> Optional[str]:
        """Alias a real file into the tree (the file is not copied).

        Usage: cp <real-path> [virtual-path]

        Examples:
            cp ~/Downloads/paper.pdf              - alias as ./paper.pdf
            cp ~/Downloads/paper.pdf reading/     - alias into reading/
            cp ~/Downloads/paper.pdf attention    - alias named "attention"
        """
        if not args:
            self.console.print("[red]Usage:[/red] cp <real-path> [virtual-path]")
            return None
        dst = args[1] if len(args) > 1 else None
        self.tree.add_alias(dst, os.path.expanduser(args[0]))
        return None

    def cmd_mkdir(self, args: List[str]) -> Optional[str]:
        """Create a directory.

        Usage: mkdir <path>
        """
        if not args:
            self.console.print("[red]Usage:[/red] mkdir <path>")
            return None
        self.tree.make_directory(args[0])
        return None

    def cmd_rm(self, args: List[str]) -> Optional[str]:
        """Remove a file or directory from the tree.

        Usage: rm <path>

        Use name#n to pick one of several same-named items; a plain name
        removes the first. Files created with touch are deleted from disk
        when the session is saved (not with exit --discard); aliased files
        are left untouched.
        """
        if not args:
            self.console.print("[red]Usage:[/red] rm <path>")
            return None
        removed = self.tree.remove_child(args[0])
        owned = [removed] if removed.entity is not None else removed.entities()
        self.session.pending_deletions.extend(owned)
        return None

    def cmd_desc(self, args: List[str]) -> Optional[str]:
        """Show or set a description.

        Usage: desc [path] [--desc text]
        """
        path = None
        text = None
        i = 0
        while i < len(args):
            if args[i] in ("--desc", "-d"):
                if i + 1 >= len(args):
                    self.console.print("[red]Usage:[/red] desc [path] [--desc text]")
                    return None
                text = args[i + 1]
                i += 2
                continue
            if path is None:
                path = args[i]
            i += 1

        desc = self.tree.describe(path, text)
        if text is None:
            if desc:
                self._print(desc)
            else:
                self.console.print("[dim](no description)[/dim]")
        return desc

    def cmd_call(self, args: List[str]) -> Optional[str]:
        """Run a program; virtual paths in its arguments become real paths.

        Usage: call <program> [args...]

        Only the arguments are looked up as virtual paths; the program name
        is run as typed (found on PATH), even if an item has that name.

        Example:
            call vim notes.txt
        """
        if not args:
            self.console.print("[red]Usage:[/red] call <program> [args...]")
            return None
        code = self.tree.call_command(args)
        if code != 0:
            self.console.print(f"[red]Command exited with code {code}[/red]")
        return None

    def cmd_help(self, args: List[str]) -> Optional[str]:
        """Show help information.

        Usage: help [command]
        """
        if args:
            cmd = args[0]
            if cmd in self.commands:
                func = self.commands[cmd]
                self.console.print(f"[bold]{cmd}[/bold]")
                self.console.print(func.__doc__ or "No documentation available.")
            else:
                self.console.print(f"[red]Unknown command:[/red] {escape(cmd)}")
            return None

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Command", style="cyan")
        table.add_column("Description", style="white")

        table.add_row("cd [path]", "Change directory (~ is the root)")
        table.add_row("pwd", "Print working directory")
        table.add_row("ls [path] [--desc]", "List directory contents")
        table.add_row("tree [path]", "Show directory outline")
        table.add_row("cat <path>", "Print file content")
        table.add_row("touch <path>", "Create a new empty file")
        table.add_row("open <path>", "Open file with the default application")
        table.add_row("cp <real> [path]", "Alias a real file into the tree")
        table.add_row("mkdir <path>", "Create a directory")
        table.add_row("rm <path>", "Remove a file or directory")
        table.add_row("desc [path] [--desc text]", "Show or set a description")
        table.add_row("call <prog> [args]", "Run a program; its arguments may be virtual paths")
        table.add_row("help [cmd]", "Show help")
        table.add_row("exit [--discard], quit", "Save and exit (or discard changes)")

        self.console.print("[bold cyan]Available Commands:[/bold cyan]\n")
        self.console.print(table)
        self.console.print("\nUse name#n to select the n-th of several items with the same name.")
        return None

    def cmd_exit(self, args: List[str]) -> Optional[str]:
        """Exit the shell, saving the tree.

        Usage: exit [--discard]
        """
        if "--discard" in args:
            self.session.discard = True
        self.running = False
        return None

    def cmd_quit(self, args: List[str]) -> Optional[str]:
        """Quit the shell.

        Usage: quit
        """
        return self.cmd_exit(args)

    def cleanup(self):
        """Save the tree unless the session was discarded."""
        if self.session.close():
            self.console.print(f"[cyan]Saved {escape(str(self.session.document))}[/cyan]")
        else:
            self.console.print("[yellow]Changes discarded[/yellow]")
