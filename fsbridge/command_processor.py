"""
Command processor module for the fsbridge CLI.
Handles parsing and executing workspace commands.
"""

import shlex
from typing import Callable, Dict

from fsbridge import __version__
from fsbridge.common.exceptions import WorkspaceError
from fsbridge.workspace.session import WorkspaceSession


class CommandProcessor:
    """
    Processes commands entered by the user and runs them against a session.
    """

    def __init__(self, session: WorkspaceSession) -> None:
        self.session = session
        self.commands: Dict[str, Callable[[list[str]], str]] = {
            "/help": self.show_help,
            "/version": self.show_version,
            "/open": self.open_workspace,
            "/expand": self.expand,
            "/ls": self.list_directory,
            "/cat": self.read_file,
            "/write": self.write_file,
            "/mkdir": self.make_directory,
            "/rm": self.remove_file,
            "/rmdir": self.remove_directory,
            "/mv": self.rename,
            "/stat": self.stat,
            "/exists": self.exists,
            "/watches": self.show_watches,
            "/recent": self.show_recent,
            "/close": self.close_workspace,
        }

    def process_command(self, command_text: str) -> str:
        """
        Process a command string and execute the appropriate action.

        Args:
            command_text (str): The command entered by the user

        Returns:
            str: The result of the command execution
        """
        try:
            command_parts = shlex.split(command_text.strip())
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not command_parts:
            return ""

        command_name = command_parts[0].lower()
        args = command_parts[1:]

        if command_name not in self.commands:
            return (
                f"Command not found: {command_name}. Type '/help' for available commands."
            )

        try:
            return self.commands[command_name](args)
        except WorkspaceError as e:
            return f"Error: {e}"
        except OSError as e:
            return f"Error: {e.strerror or e} ({e.filename or ''})"

    def show_help(self, args: list[str]) -> str:
        """Display help information about available commands"""
        help_text = """
Available Commands:
------------------
/open <dir>            - Open an absolute directory as the workspace root
/expand [dir ...]      - Set the expanded directories (no arguments collapses all)
/ls [dir]              - List a workspace directory
/cat <file>            - Print a workspace file
/write <file> <text>   - Write text to a workspace file
/mkdir <dir>           - Create a directory
/rm <file>             - Remove a file
/rmdir <dir>           - Remove a directory tree
/mv <old> <new>        - Rename a file or directory
/stat <path>           - Show file information
/exists <path>         - Check whether a path exists
/watches               - List the watched directories
/recent                - List recently opened folders
/recent remove <dir>    - Forget a recently opened folder
/close                 - Close the workspace
/help                  - Show this help message
/version               - Show the current version
/exit                  - Exit the CLI application

Paths are relative to the workspace root and use forward slashes.
        """
        return help_text.strip()

    def show_version(self, args: list[str]) -> str:
        """Display the current version of the CLI"""
        return f"fsbridge v{__version__}"

    def open_workspace(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /open <dir>"
        self.session.set_working_directory(args[0])
        return f"Watching {self.session.root}"

    def expand(self, args: list[str]) -> str:
        self.session.set_expanded_paths(args)
        return "Expanded: " + ", ".join(self.session.expanded_paths)

    def list_directory(self, args: list[str]) -> str:
        entries = self.session.list_directory(args[0] if args else ".")
        if not entries:
            return "(empty)"
        lines = [
            f"{entry.name}/" if entry.is_directory else entry.name
            for entry in sorted(entries, key=lambda e: (not e.is_directory, e.name))
        ]
        return "\n".join(lines)

    def read_file(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /cat <file>"
        content = self.session.read_file(args[0])
        return str(content)

    def write_file(self, args: list[str]) -> str:
        if len(args) < 2:
            return "Usage: /write <file> <text>"
        content = " ".join(args[1:])
        self.session.write_file(args[0], content)
        return f"Wrote {len(content)} character(s) to {args[0]}"

    def make_directory(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /mkdir <dir>"
        self.session.make_directory(args[0])
        return f"Created {args[0]}"

    def remove_file(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /rm <file>"
        self.session.remove_file(args[0])
        return f"Removed {args[0]}"

    def remove_directory(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /rmdir <dir>"
        self.session.remove_directory(args[0])
        return f"Removed {args[0]}"

    def rename(self, args: list[str]) -> str:
        if len(args) != 2:
            return "Usage: /mv <old> <new>"
        self.session.rename(args[0], args[1])
        return f"Renamed {args[0]} -> {args[1]}"

    def stat(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /stat <path>"
        result = self.session.stat(args[0])
        if result is None:
            return f"No such file or directory: {args[0]}"
        return result.model_dump_json(indent=2)

    def exists(self, args: list[str]) -> str:
        if len(args) != 1:
            return "Usage: /exists <path>"
        return "yes" if self.session.path_exists(args[0]) else "no"

    def show_watches(self, args: list[str]) -> str:
        watched = sorted(self.session.watched_paths())
        if not watched:
            return "No active watchers"
        return "\n".join(watched)

    def show_recent(self, args: list[str]) -> str:
        store = self.session.folders_store
        if args:
            if len(args) != 2 or args[0] != "remove":
                return "Usage: /recent [remove <dir>]"
            if store is None:
                return "No recent folders"
            store.remove_recent(args[1])
            return f"Removed {args[1]} from recent folders"

        folders = store.recent() if store is not None else []
        if not folders:
            return "No recent folders"
        return "\n".join(reversed(folders))

    def close_workspace(self, args: list[str]) -> str:
        self.session.close()
        return "Workspace closed"
