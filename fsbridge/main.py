#!/usr/bin/env python3
import argparse
import os
import shlex
from typing import Sequence

from prompt_toolkit import prompt
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.panel import Panel

from fsbridge.command_processor import CommandProcessor
from fsbridge.common.containers import container
from fsbridge.common.models import ChangeNotification, WatchErrorNotification
from fsbridge.common.utils import configure_logging, console, logger

NOTIFICATION_STYLES = {
    "created": "green",
    "dirCreated": "bold green",
    "removed": "red",
    "dirRemoved": "bold red",
    "changed": "yellow",
    "renamed": "cyan",
}


def display_banner() -> None:
    """Display the welcome banner using Rich"""
    console = Console()

    welcome_panel = Panel(
        "\n[bold cyan]FSBRIDGE[/bold cyan]\n\n"
        + "[italic green]Workspace file change notifications[/italic green]\n",
        border_style="bright_blue",
        title="Welcome",
        title_align="center",
        width=80,
    )

    console.print(welcome_panel, justify="center")
    console.print(
        "\nType your commands below. Commands start with '/'. Type '/exit' to quit.\n"
    )


def print_notification(notification: ChangeNotification) -> None:
    style = NOTIFICATION_STYLES.get(notification.kind, "white")
    if notification.old_path:
        console.print(
            f"[{style}]{notification.kind}[/{style}] {notification.old_path} -> {notification.path}"
        )
    else:
        console.print(f"[{style}]{notification.kind}[/{style}] {notification.path}")


def print_watch_error(notification: WatchErrorNotification) -> None:
    console.print(
        f"[bold red]Watcher error ({notification.code}):[/bold red] {notification.message}\n"
        "The system ran out of file watchers. Collapse some folders or raise the OS limit."
    )


def print_working_dir(root: str) -> None:
    console.print(f"[bold blue]Working directory:[/bold blue] {root}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fsbridge",
        description="Open a folder as a workspace and print file change notifications.",
    )
    parser.add_argument("folder", nargs="?", help="Folder to open as the workspace root")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Main function"""
    args = parse_args(argv)
    configure_logging(container.config.config_dir())
    display_banner()

    session = container.workspace_session()
    session.emitter.subscribe(print_notification)
    session.emitter.subscribe_errors(print_watch_error)
    session.emitter.subscribe_working_dir(print_working_dir)
    if session.folders_store is not None:
        still_open = session.folders_store.prune_missing()
        logger.info(f"{len(still_open)} previously opened folder(s) still exist")
    processor = CommandProcessor(session)
    history = InMemoryHistory()

    if args.folder:
        console.print(processor.process_command(f"/open {shlex.quote(os.path.abspath(args.folder))}"))

    try:
        while True:
            try:
                with patch_stdout():
                    user_input = prompt(
                        HTML('<ansicyan><b>fsbridge></b></ansicyan> '),
                        history=history,
                    )

                user_input = user_input.strip()
                if not user_input:
                    continue

                if user_input == "/exit":
                    console.print("Goodbye!", style="bold green")
                    break

                console.print(processor.process_command(user_input))

            except KeyboardInterrupt:
                console.print("\n\nGoodbye!", style="bold green")
                break
            except EOFError:
                console.print("\n\nGoodbye!", style="bold green")
                break
            except Exception as e:
                logger.exception("Unhandled error in command loop")
                console.print(f"\n[red]Error: {str(e)}[/red]\n")
    finally:
        session.close()


if __name__ == "__main__":
    main()
