"""Pytest configuration and shared fixtures for fsbridge tests."""

import errno
import itertools
import time
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

import pytest

from fsbridge.common.file_watcher import BaseWatchFactory, BaseWatchHandle, RawEventCallback, WatchMetadata
from fsbridge.common.exceptions import WatchSetupError
from fsbridge.common.models import ChangeNotification, RawFileEvent, WatchErrorNotification
from fsbridge.workspace.session import WorkspaceSession


_watch_ids = itertools.count(1)


class FakeWatchHandle(BaseWatchHandle):
    """In-memory watch handle that records whether it was closed."""

    def __init__(self, path: str, callback: RawEventCallback) -> None:
        self.metadata = WatchMetadata(watch_id=f"fake-{next(_watch_ids)}", path=path, is_active=True)
        self.callback = callback
        self.closed = False

    def close(self) -> None:
        self.closed = True
        self.metadata.is_active = False

    @property
    def is_running(self) -> bool:
        return not self.closed


class FakeWatchFactory(BaseWatchFactory):
    """Watch factory that never touches the OS.

    ``failures`` maps an absolute path to the errno its watch should fail with.
    """

    def __init__(self) -> None:
        self.handles: List[FakeWatchHandle] = []
        self.failures: Dict[str, int] = {}
        self.open_delay = 0.0

    def open_watch(
        self,
        path: str,
        callback: RawEventCallback,
        ignore_patterns: Optional[List[str]] = None,
    ) -> FakeWatchHandle:
        if self.open_delay:
            time.sleep(self.open_delay)
        if path in self.failures:
            code = self.failures[path]
            raise WatchSetupError(path, OSError(code, f"simulated {errno.errorcode[code]}"))
        handle = FakeWatchHandle(path, callback)
        self.handles.append(handle)
        return handle

    @property
    def opened_paths(self) -> List[str]:
        return [handle.path for handle in self.handles]

    def active(self, path: str) -> FakeWatchHandle:
        for handle in self.handles:
            if handle.path == path and not handle.closed:
                return handle
        raise KeyError(path)

    def fire(self, watched_path: str, raw_event: RawFileEvent) -> None:
        """Deliver a raw event the way a watch thread would."""
        handle = self.active(watched_path)
        handle.callback(
            raw_event.model_copy(update={"watch_path": handle.path, "watch_id": handle.metadata.watch_id})
        )


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


@pytest.fixture
def fake_factory() -> FakeWatchFactory:
    return FakeWatchFactory()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small workspace tree: a.txt, src/main.py, src/lib/util.py, docs/."""
    root = tmp_path.resolve() / "ws"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "a.txt").write_text("v1", encoding="utf-8")
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "src" / "lib" / "util.py").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def notifications() -> List[ChangeNotification]:
    return []


@pytest.fixture
def watch_errors() -> List[WatchErrorNotification]:
    return []


@pytest.fixture
def session(
    fake_factory: FakeWatchFactory,
    notifications: List[ChangeNotification],
    watch_errors: List[WatchErrorNotification],
) -> Generator[WorkspaceSession, None, None]:
    """A session on the fake factory, subscribed to the notification lists."""
    workspace_session = WorkspaceSession(watch_factory=fake_factory)
    workspace_session.emitter.subscribe(notifications.append)
    workspace_session.emitter.subscribe_errors(watch_errors.append)
    yield workspace_session
    workspace_session.close()


@pytest.fixture
def opened_session(session: WorkspaceSession, workspace: Path) -> WorkspaceSession:
    session.set_working_directory(str(workspace))
    return session
