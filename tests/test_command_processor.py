import shlex
from pathlib import Path
from typing import List

import pytest

from fsbridge.command_processor import CommandProcessor
from fsbridge.common.models import ChangeNotification
from fsbridge.workspace.recent_folders import RecentFoldersStore
from fsbridge.workspace.session import WorkspaceSession
from tests.conftest import FakeWatchFactory


@pytest.fixture
def processor(session: WorkspaceSession) -> CommandProcessor:
    return CommandProcessor(session)


@pytest.fixture
def opened_processor(processor: CommandProcessor, workspace: Path) -> CommandProcessor:
    processor.process_command(f"/open {shlex.quote(str(workspace))}")
    return processor


class TestCommandProcessor:
    """Test cases for the slash commands of the CLI."""

    def test_help_lists_commands(self, processor: CommandProcessor) -> None:
        result = processor.process_command("/help")

        for command in ("/open", "/expand", "/ls", "/write", "/watches", "/exit"):
            assert command in result

    def test_version(self, processor: CommandProcessor) -> None:
        assert processor.process_command("/version") == "fsbridge v0.1.0"

    def test_unknown_command(self, processor: CommandProcessor) -> None:
        result = processor.process_command("/frobnicate now")

        assert result == "Command not found: /frobnicate. Type '/help' for available commands."

    def test_empty_and_unparsable_input(self, processor: CommandProcessor) -> None:
        assert processor.process_command("   ") == ""
        assert processor.process_command('/cat "unterminated').startswith("Could not parse command")

    def test_commands_before_open_report_error(self, processor: CommandProcessor) -> None:
        assert processor.process_command("/ls") == "Error: workingDir is not set"

    def test_open_and_watches(self, opened_processor: CommandProcessor, workspace: Path) -> None:
        assert opened_processor.process_command("/watches") == str(workspace)

        opened_processor.process_command("/expand src")

        assert opened_processor.process_command("/watches").splitlines() == sorted(
            [str(workspace), str(workspace / "src")]
        )

    def test_expand_reports_expanded_paths(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/expand src docs") == "Expanded: ., src, docs"
        assert opened_processor.process_command("/expand") == "Expanded: ."

    def test_ls_puts_directories_first(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/ls").splitlines() == ["docs/", "src/", "a.txt"]
        assert opened_processor.process_command("/ls docs") == "(empty)"

    def test_write_then_cat(self, opened_processor: CommandProcessor, workspace: Path) -> None:
        result = opened_processor.process_command("/write notes.txt hello world")

        assert result == "Wrote 11 character(s) to notes.txt"
        assert opened_processor.process_command("/cat notes.txt") == "hello world"

    def test_file_management(
        self, opened_processor: CommandProcessor, workspace: Path, notifications: List[ChangeNotification]
    ) -> None:
        assert opened_processor.process_command("/mkdir build") == "Created build"
        assert opened_processor.process_command("/mv a.txt build/a.txt") == "Renamed a.txt -> build/a.txt"
        assert opened_processor.process_command("/exists build/a.txt") == "yes"
        assert opened_processor.process_command("/rm build/a.txt") == "Removed build/a.txt"
        assert opened_processor.process_command("/rmdir build") == "Removed build"
        assert opened_processor.process_command("/exists build") == "no"
        assert [(n.kind, n.path) for n in notifications] == [("dirRemoved", "build")]

    def test_stat(self, opened_processor: CommandProcessor) -> None:
        assert '"is_directory": true' in opened_processor.process_command("/stat src")
        assert opened_processor.process_command("/stat missing") == "No such file or directory: missing"

    def test_os_errors_are_reported(self, opened_processor: CommandProcessor) -> None:
        result = opened_processor.process_command("/cat missing.txt")

        assert result.startswith("Error: No such file or directory")

    def test_usage_messages(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/write only-path") == "Usage: /write <file> <text>"
        assert opened_processor.process_command("/mv a.txt") == "Usage: /mv <old> <new>"
        assert opened_processor.process_command("/open") == "Usage: /open <dir>"

    def test_recent_without_store(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/recent") == "No recent folders"

    def test_close(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/close") == "Workspace closed"
        assert opened_processor.process_command("/watches") == "No active watchers"

    def test_recent_remove(self, fake_factory: FakeWatchFactory, workspace: Path, tmp_path: Path) -> None:
        # Given: a workspace opened through a session with a folders store
        store = RecentFoldersStore(tmp_path / "config")
        processor = CommandProcessor(WorkspaceSession(watch_factory=fake_factory, folders_store=store))
        processor.process_command(f"/open {shlex.quote(str(workspace))}")
        assert processor.process_command("/recent") == str(workspace)

        # When:
        result = processor.process_command(f"/recent remove {shlex.quote(str(workspace))}")

        # Then:
        assert result == f"Removed {workspace} from recent folders"
        assert processor.process_command("/recent") == "No recent folders"
        assert store.opened() == [str(workspace)]
        processor.process_command("/close")

    def test_recent_usage(self, opened_processor: CommandProcessor) -> None:
        assert opened_processor.process_command("/recent forget x") == "Usage: /recent [remove <dir>]"
        assert opened_processor.process_command("/recent remove /nowhere") == "No recent folders"
