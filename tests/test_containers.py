from pathlib import Path

import pytest
from dependency_injector import providers

from fsbridge.common.containers import DEFAULT_CONFIG, WorkspaceContainer, load_config
from fsbridge.common.file_watcher import WatchdogWatchFactory
from fsbridge.workspace.recent_folders import RecentFoldersStore
from fsbridge.workspace.session import WorkspaceSession
from tests.conftest import FakeWatchFactory


class TestWorkspaceContainer:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("FSBRIDGE_HOME", "FSBRIDGE_QUEUE_SIZE", "FSBRIDGE_ENQUEUE_TIMEOUT", "FSBRIDGE_JOIN_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        container = load_config(WorkspaceContainer())

        assert container.config.queue_size() == DEFAULT_CONFIG["queue_size"]
        assert container.config.ignore_patterns() == [".git/index.lock"]
        assert isinstance(container.watch_factory(), WatchdogWatchFactory)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("FSBRIDGE_HOME", str(tmp_path))
        monkeypatch.setenv("FSBRIDGE_QUEUE_SIZE", "16")

        container = load_config(WorkspaceContainer())

        assert container.config.queue_size() == 16
        store = container.folders_store()
        assert isinstance(store, RecentFoldersStore)
        assert store.file == tmp_path / "folders.json"

    def test_sessions_share_the_factory_and_store(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, workspace: Path
    ) -> None:
        monkeypatch.setenv("FSBRIDGE_HOME", str(tmp_path / "config"))
        container = load_config(WorkspaceContainer())
        container.watch_factory.override(providers.Object(FakeWatchFactory()))

        first = container.workspace_session()
        second = container.workspace_session()

        assert isinstance(first, WorkspaceSession)
        assert first is not second
        assert first.folders_store is second.folders_store

        with first:
            first.set_working_directory(str(workspace))
            assert first.folders_store is not None
            assert first.folders_store.opened() == [str(workspace)]
        assert first.folders_store.opened() == []
