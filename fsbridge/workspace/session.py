"""The per-window workspace session.

A session owns one workspace root, the directory watches reconciled against
the UI's expanded tree, the record of local writes used for echo
suppression, and a single dispatch thread that turns raw watch events into
UI notifications.

Example:
    session = WorkspaceSession(watch_factory=WatchdogWatchFactory())
    session.emitter.subscribe(lambda n: print(n.kind, n.path))
    session.set_working_directory("/home/me/project")
    session.set_expanded_paths(["src"])
"""

import errno
import os
import queue
import shutil
import stat
import time
from collections.abc import Iterable
from threading import Event, RLock, Thread, current_thread
from typing import List, Optional

from loguru import logger

from fsbridge.common.exceptions import NotConfiguredError
from fsbridge.common.file_watcher import BaseWatchFactory
from fsbridge.common.models import ChangeKind, DirectoryEntry, FileStat, RawFileEvent
from .change_emitter import ChangeEmitter
from .echo_suppressor import EchoSuppressor
from .path_resolver import PathResolver, normalize
from .recent_folders import RecentFoldersStore
from .visibility_filter import VisibilityFilter
from .watcher_registry import WatcherRegistry

DEFAULT_QUEUE_SIZE = 1024
DEFAULT_ENQUEUE_TIMEOUT = 5.0


def _classify(raw_event: RawFileEvent) -> Optional[ChangeKind]:
    """Map a raw watch event kind onto the notification kinds."""
    if raw_event.kind == "created":
        return "dirCreated" if raw_event.is_directory else "created"
    if raw_event.kind == "deleted":
        return "dirRemoved" if raw_event.is_directory else "removed"
    if raw_event.kind == "moved":
        return "renamed"
    if raw_event.kind == "modified" and not raw_event.is_directory:
        return "changed"
    # Directory mtime updates only echo changes to their children
    return None


def _to_file_stat(result: os.stat_result) -> FileStat:
    return FileStat(
        size=result.st_size,
        mode=result.st_mode,
        mtime=result.st_mtime,
        atime=result.st_atime,
        ctime=result.st_ctime,
        is_directory=stat.S_ISDIR(result.st_mode),
        is_file=stat.S_ISREG(result.st_mode),
        is_symlink=stat.S_ISLNK(result.st_mode),
    )


class WorkspaceSession:
    """Workspace-scoped file access plus filtered change notifications."""

    def __init__(
        self,
        watch_factory: BaseWatchFactory,
        folders_store: Optional[RecentFoldersStore] = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        enqueue_timeout: float = DEFAULT_ENQUEUE_TIMEOUT,
        ignore_patterns: Optional[List[str]] = None,
    ) -> None:
        self.resolver = PathResolver()
        self.emitter = ChangeEmitter()
        self.visibility = VisibilityFilter()
        self.echo = EchoSuppressor(self._read_bytes)
        self.registry = WatcherRegistry(
            resolver=self.resolver,
            watch_factory=watch_factory,
            on_event=self._enqueue,
            on_fatal_error=self.emitter.emit_error,
            ignore_patterns=ignore_patterns,
        )
        self.folders_store = folders_store

        self._queue_size = max(1, queue_size)
        self._enqueue_timeout = enqueue_timeout
        self._events: queue.Queue[Optional[RawFileEvent]] = queue.Queue(maxsize=self._queue_size)
        self._dispatcher: Optional[Thread] = None
        self._stop_requested = Event()
        # Serializes opening and closing workspaces
        self._state_lock = RLock()

    def __enter__(self) -> "WorkspaceSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Workspace lifecycle
    # ------------------------------------------------------------------

    @property
    def root(self) -> str:
        return self.resolver.root

    @property
    def expanded_paths(self) -> tuple[str, ...]:
        return self.visibility.expanded_paths

    def watched_paths(self) -> set[str]:
        return self.registry.watched_paths()

    def set_working_directory(self, path: str) -> None:
        """Open ``path`` as the workspace root and start watching it.

        Any previously opened workspace is torn down first, so two root
        watches never coexist.

        Raises:
            ValueError: If ``path`` is not absolute
            NotADirectoryError: If ``path`` is not an existing directory
        """
        if not os.path.isabs(path):
            raise ValueError(f"Workspace root must be an absolute path: {path}")
        if not os.path.isdir(path):
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)

        with self._state_lock:
            self._teardown()
            self.resolver.configure(path)
            self.visibility.reset()
            self.echo.clear()
            self._start_dispatcher()
            self.registry.open_root()
            logger.info(f"added root watcher {self.resolver.root}")

            if self.folders_store is not None:
                self.folders_store.add(self.resolver.root)
            self.emitter.emit_working_dir(self.resolver.root)

    def set_expanded_paths(self, relative_paths: Iterable[str]) -> None:
        """Replace the expanded tree and reconcile the watches against it."""
        if not self.resolver.is_configured:
            raise NotConfiguredError()
        with self.registry.lock:
            expanded = self.visibility.update(relative_paths)
            self.registry.reconcile(expanded)

    def close_watching(self) -> None:
        count = self.registry.close_all()
        logger.info(f"closed {count} watcher(s)")

    def close(self) -> None:
        """Tear down the workspace and forget the root."""
        with self._state_lock:
            if not self.resolver.is_configured:
                return
            root = self.resolver.root
            self._teardown()
            self.resolver.reset()
            self.visibility.reset()
            self.echo.clear()
            if self.folders_store is not None:
                self.folders_store.remove_opened(root)
            logger.info(f"closed workspace {root}")

    def current_path(self) -> str:
        if self.resolver.is_configured:
            return self.resolver.root
        return os.getcwd()

    def _teardown(self) -> None:
        self.registry.close_all()
        self._stop_dispatcher()

    # ------------------------------------------------------------------
    # Event pipeline
    # ------------------------------------------------------------------

    def _start_dispatcher(self) -> None:
        self._events = queue.Queue(maxsize=self._queue_size)
        self._stop_requested = Event()
        self._dispatcher = Thread(
            target=self._dispatch_loop,
            args=(self._events, self._stop_requested),
            name="fsbridge-dispatch",
            daemon=True,
        )
        self._dispatcher.start()

    def _stop_dispatcher(self) -> None:
        if self._dispatcher is None:
            return
        if self._dispatcher is current_thread():
            # A consumer closed the session from the dispatch thread. Nothing
            # else drains the queue, so a sentinel could block forever.
            self._stop_requested.set()
        else:
            self._events.put(None)
            self._dispatcher.join()
        self._dispatcher = None

    def _enqueue(self, raw_event: RawFileEvent) -> None:
        """Called from the watch threads."""
        try:
            self._events.put(raw_event, timeout=self._enqueue_timeout)
        except queue.Full:
            logger.warning(f"Event queue full, dropped {raw_event.kind} {raw_event.src_path}")

    def _dispatch_loop(
        self, events: "queue.Queue[Optional[RawFileEvent]]", stop_requested: Event
    ) -> None:
        while not stop_requested.is_set():
            raw_event = events.get()
            try:
                if raw_event is None:
                    return
                self.process_event(raw_event)
            except Exception as e:
                logger.error(f"error processing {raw_event}: {e}")
            finally:
                events.task_done()

    def flush(self, timeout: float = 5.0) -> bool:
        """Wait until every queued event has been processed.

        Returns:
            False if the timeout expired first
        """
        deadline = time.monotonic() + timeout
        while self._events.unfinished_tasks:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True

    def process_event(self, raw_event: RawFileEvent) -> None:
        """Filter one raw event and emit it if the UI should hear about it."""
        if self._is_self_event(raw_event):
            # The parent directory's watch reports the entry itself
            if raw_event.kind in ("deleted", "moved") and self.registry.discard(
                raw_event.src_path, raw_event.watch_id
            ):
                logger.info(f"watched directory {raw_event.src_path} went away, dropped its watcher")
            return

        kind = _classify(raw_event)
        if kind is None:
            return

        try:
            path = self.resolver.to_relative(raw_event.src_path)
        except ValueError:
            logger.debug(f"Ignoring event outside the workspace: {raw_event.src_path}")
            return

        old_path: Optional[str] = None
        if kind == "renamed":
            try:
                new_path = self.resolver.to_relative(raw_event.dest_path or "")
            except ValueError:
                # Moved out of the workspace: from here it looks like a removal
                kind = "dirRemoved" if raw_event.is_directory else "removed"
            else:
                old_path, path = path, new_path

        if kind == "changed" and self.echo.should_suppress(path, kind):
            logger.debug(f"Suppressed echo of local write to {path}")
            return

        visible = self.visibility.is_visible(path)
        if not visible and old_path is not None:
            visible = self.visibility.is_visible(old_path)
        if not visible:
            logger.debug(f"check emitting {kind} {path}: not visible in {self.visibility.expanded_paths}")
            return

        self.emitter.emit(kind, path, old_path)

    def _is_self_event(self, raw_event: RawFileEvent) -> bool:
        """True for an event a non-root watch reports about its own directory."""
        watch_path = raw_event.watch_path
        return (
            watch_path is not None
            and raw_event.src_path == watch_path
            and watch_path != self.resolver.root
        )

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def _read_bytes(self, relative_path: str) -> bytes:
        with open(self.resolver.to_absolute(relative_path), "rb") as f:
            return f.read()

    def list_directory(self, relative_path: str) -> List[DirectoryEntry]:
        """Non-recursive listing of a workspace directory."""
        if not self.resolver.is_configured:
            raise NotConfiguredError()
        if not relative_path:
            return []

        with os.scandir(self.resolver.to_absolute(relative_path)) as entries:
            return [
                DirectoryEntry(name=entry.name, is_directory=entry.is_dir(follow_symlinks=False))
                for entry in entries
            ]

    def read_file(self, relative_path: str, encoding: Optional[str] = "utf-8") -> str | bytes | None:
        """Read a workspace file.

        Args:
            relative_path: Workspace-relative file path
            encoding: Text encoding, or None to get the raw bytes

        Returns:
            The file content, or None for an empty path
        """
        if not relative_path:
            return None
        if encoding is None:
            return self._read_bytes(relative_path)
        with open(self.resolver.to_absolute(relative_path), "r", encoding=encoding, newline="") as f:
            return f.read()

    def write_file(self, relative_path: str, content: str | bytes, encoding: str = "utf-8") -> None:
        """Write a workspace file and remember the content for echo suppression."""
        data = content.encode(encoding) if isinstance(content, str) else content
        absolute_path = self.resolver.to_absolute(relative_path)
        self.echo.record_local_write(normalize(relative_path), data)
        with open(absolute_path, "wb") as f:
            f.write(data)

    def make_directory(self, relative_path: str) -> None:
        os.mkdir(self.resolver.to_absolute(relative_path))

    def remove_directory(self, relative_path: str) -> None:
        """Remove a directory tree.

        A watched parent reports the removal. Otherwise it is announced
        directly, if the UI can see it.
        """
        absolute_path = self.resolver.to_absolute(relative_path)
        shutil.rmtree(absolute_path)

        path = normalize(relative_path)
        if os.path.dirname(absolute_path) in self.registry.watched_paths():
            return
        if self.visibility.is_visible(path):
            self.emitter.emit("dirRemoved", path)

    def remove_file(self, relative_path: str) -> None:
        os.unlink(self.resolver.to_absolute(relative_path))

    def rename(self, old_path: str, new_path: str) -> None:
        os.rename(self.resolver.to_absolute(old_path), self.resolver.to_absolute(new_path))

    def stat(self, relative_path: str) -> Optional[FileStat]:
        absolute_path = self.resolver.to_absolute(relative_path)
        try:
            return _to_file_stat(os.stat(absolute_path))
        except OSError:
            return None

    def lstat(self, relative_path: str) -> Optional[FileStat]:
        absolute_path = self.resolver.to_absolute(relative_path)
        try:
            return _to_file_stat(os.lstat(absolute_path))
        except OSError:
            return None

    def path_exists(self, relative_path: str) -> bool:
        return os.path.exists(self.resolver.to_absolute(relative_path))
