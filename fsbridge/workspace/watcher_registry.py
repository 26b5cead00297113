"""Reconciles non-recursive directory watches against the expanded tree."""

from collections.abc import Iterable
from threading import RLock
from typing import Callable, Dict, List, Optional

from loguru import logger

from fsbridge.common.exceptions import WatchSetupError
from fsbridge.common.file_watcher import BaseWatchFactory, BaseWatchHandle, RawEventCallback
from fsbridge.common.models import WatchErrorNotification
from .path_resolver import PathResolver

WatchErrorCallback = Callable[[WatchErrorNotification], None]


class WatcherRegistry:
    """Owns one watch handle per absolute directory path.

    After every ``reconcile`` the handle keys are exactly the root plus the
    absolute form of each requested relative path, minus the directories the
    OS refused to watch.
    """

    def __init__(
        self,
        resolver: PathResolver,
        watch_factory: BaseWatchFactory,
        on_event: RawEventCallback,
        on_fatal_error: WatchErrorCallback,
        ignore_patterns: Optional[List[str]] = None,
    ) -> None:
        self._resolver = resolver
        self._watch_factory = watch_factory
        self._on_event = on_event
        self._on_fatal_error = on_fatal_error
        self._ignore_patterns = ignore_patterns
        self._watchers: Dict[str, BaseWatchHandle] = {}
        # reconcile reads and mutates _watchers; calls must not interleave
        self._lock = RLock()

    @property
    def lock(self) -> RLock:
        return self._lock

    def watched_paths(self) -> set[str]:
        with self._lock:
            return set(self._watchers)

    def discard(self, absolute_path: str, watch_id: Optional[str] = None) -> bool:
        """Close the watch on a directory that went away.

        The next ``reconcile`` opens a fresh watch if the directory is still
        expanded. The root watch is never discarded.

        Args:
            absolute_path: Watched directory
            watch_id: If given, only the handle with this id is discarded, so a
                late event from a dead watch cannot close its replacement

        Returns:
            True if a handle was closed
        """
        with self._lock:
            handle = self._watchers.get(absolute_path)
            if handle is None or absolute_path == self._resolver.root:
                return False
            if watch_id is not None and handle.metadata.watch_id != watch_id:
                return False
            self._close(absolute_path)
            return True

    def open_root(self) -> None:
        with self._lock:
            root = self._resolver.root
            if root not in self._watchers:
                self._open(root)

    def reconcile(self, desired_relative_paths: Iterable[str]) -> None:
        with self._lock:
            root = self._resolver.root

            desired: list[str] = [root]
            for relative_path in desired_relative_paths:
                absolute_path = self._resolver.to_absolute(relative_path)
                if absolute_path not in desired:
                    desired.append(absolute_path)

            for absolute_path in desired:
                handle = self._watchers.get(absolute_path)
                if handle is not None and not handle.is_running:
                    logger.info(f"watcher on {absolute_path} stopped, reopening it")
                    self._close(absolute_path)
                    handle = None
                if handle is None:
                    self._open(absolute_path)

            wanted = set(desired)
            stale = [
                path
                for path in self._watchers
                if path != root and path not in wanted
            ]
            for path in stale:
                self._close(path)

    def close_all(self) -> int:
        """Close every handle, the root included.

        Returns:
            The number of handles closed
        """
        with self._lock:
            count = len(self._watchers)
            for path in list(self._watchers):
                self._close(path)
            return count

    def _open(self, absolute_path: str) -> None:
        try:
            handle = self._watch_factory.open_watch(
                absolute_path,
                self._on_event,
                ignore_patterns=self._ignore_patterns,
            )
        except WatchSetupError as e:
            if e.is_resource_exhausted:
                logger.error(f"Watcher error: {e}")
                self._on_fatal_error(
                    WatchErrorNotification(
                        path=self._resolver.to_relative(absolute_path),
                        classification="resource_exhausted",
                        code=e.code or "ENOSPC",
                        message=str(e),
                    )
                )
            else:
                logger.warning(f"error watching {absolute_path}, leaving it unwatched: {e}")
            return

        self._watchers[absolute_path] = handle

    def _close(self, absolute_path: str) -> None:
        handle = self._watchers.pop(absolute_path)
        try:
            handle.close()
        except Exception as e:
            logger.error(f"Error closing watcher {absolute_path}: {e}")
