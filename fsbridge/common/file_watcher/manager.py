"""Concrete directory watches built on watchdog."""

import fnmatch
import os
import uuid
from typing import Any, List, Optional

from loguru import logger
from watchdog.events import FileSystemEventHandler, FileSystemEvent
from watchdog.observers import Observer

from fsbridge.common.exceptions import WatchSetupError
from fsbridge.common.models import RawEventKind, RawFileEvent
from fsbridge.common.utils import decode_path, to_posix
from .base import BaseWatchFactory, BaseWatchHandle, RawEventCallback
from .metadata import WatchMetadata


class DirectoryEventHandler(FileSystemEventHandler):
    """Turns watchdog events for one directory into RawFileEvents."""

    def __init__(
        self,
        metadata: WatchMetadata,
        callback: RawEventCallback,
        ignore_patterns: List[str],
    ) -> None:
        super().__init__()
        self.metadata = metadata
        self.callback = callback
        self.ignore_patterns = ignore_patterns or []

    def _is_ignored(self, file_path: str) -> bool:
        """Check if file matches one of the ignore patterns."""
        file_name = os.path.basename(file_path)
        relative_path = to_posix(os.path.relpath(file_path, self.metadata.path))
        posix_path = to_posix(file_path)

        for ignore_pattern in self.ignore_patterns:
            if (
                fnmatch.fnmatch(file_name, ignore_pattern)
                or fnmatch.fnmatch(relative_path, ignore_pattern)
                or fnmatch.fnmatch(posix_path, f"*/{ignore_pattern}")
            ):
                return True
        return False

    def _handle_event(self, kind: RawEventKind, event: FileSystemEvent) -> None:
        """Handle a file system event."""
        src_path = decode_path(event.src_path)
        try:
            dest_path = decode_path(event.dest_path) if kind == "moved" else None

            if self._is_ignored(src_path):
                return

            raw_event = RawFileEvent(
                kind=kind,
                src_path=src_path,
                dest_path=dest_path or None,
                is_directory=event.is_directory,
                watch_path=self.metadata.path,
                watch_id=self.metadata.watch_id,
            )
            logger.debug(f"Raw event on {self.metadata.path}: {kind} - {src_path}")
            self.callback(raw_event)

        except Exception as e:
            logger.error(f"Error handling file event {src_path}: {e}")

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event("modified", event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event("created", event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event("deleted", event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event("moved", event)


class WatchdogWatchHandle(BaseWatchHandle):
    """One watchdog observer scheduled non-recursively on one directory."""

    def __init__(
        self,
        metadata: WatchMetadata,
        observer: Any,
        event_handler: DirectoryEventHandler,
        join_timeout: float = 5.0,
    ) -> None:
        self.metadata = metadata
        self.observer = observer
        self.event_handler = event_handler
        self._join_timeout = join_timeout
        self._is_running = False

    def start(self) -> None:
        """Start the observer thread.

        Raises:
            WatchSetupError: If the OS rejects the watch (missing directory,
                permissions, watch descriptor limits).
        """
        if self._is_running:
            return
        try:
            self.observer.start()
        except OSError as e:
            # The emitter never started; release whatever the observer holds.
            self.observer.stop()
            raise WatchSetupError(self.metadata.path, e) from e

        self._is_running = True
        self.metadata.is_active = True
        logger.info(f"added watcher {self.metadata.watch_id} {self.metadata.path}")

    def close(self) -> None:
        if self._is_running:
            self.observer.stop()
            self.observer.join(timeout=self._join_timeout)
            self._is_running = False
            self.metadata.is_active = False
            logger.info(f"removed watcher {self.metadata.watch_id} {self.metadata.path}")

    @property
    def is_running(self) -> bool:
        return self._is_running and self.observer.is_alive()


class WatchdogWatchFactory(BaseWatchFactory):
    """Opens one watchdog observer per directory."""

    def __init__(self, observer_class: Any = None, join_timeout: float = 5.0) -> None:
        super().__init__()
        self._observer_class = observer_class or Observer
        self._join_timeout = join_timeout

    def open_watch(
        self,
        path: str,
        callback: RawEventCallback,
        ignore_patterns: Optional[List[str]] = None,
    ) -> WatchdogWatchHandle:
        metadata = WatchMetadata(
            watch_id=str(uuid.uuid4())[:8],
            path=path,
            ignore_patterns=ignore_patterns,
        )

        observer: Any = self._observer_class()
        event_handler = DirectoryEventHandler(
            metadata=metadata,
            callback=callback,
            ignore_patterns=metadata.ignore_patterns or [],
        )

        try:
            # depth 0: only direct children of path are reported
            observer.schedule(event_handler, path, recursive=False)
        except OSError as e:
            raise WatchSetupError(path, e) from e

        handle = WatchdogWatchHandle(
            metadata=metadata,
            observer=observer,
            event_handler=event_handler,
            join_timeout=self._join_timeout,
        )
        handle.start()
        return handle
