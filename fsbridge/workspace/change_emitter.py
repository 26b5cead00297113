from typing import Callable, List

from loguru import logger

from fsbridge.common.models import ChangeKind, ChangeNotification, WatchErrorNotification

ChangeCallback = Callable[[ChangeNotification], None]
ErrorCallback = Callable[[WatchErrorNotification], None]
WorkingDirCallback = Callable[[str], None]


class ChangeEmitter:
    """Delivers notifications to the UI consumers.

    Delivery is fire-and-forget: a failing consumer is logged and skipped.
    """

    def __init__(self) -> None:
        self._consumers: List[ChangeCallback] = []
        self._error_consumers: List[ErrorCallback] = []
        self._working_dir_consumers: List[WorkingDirCallback] = []

    def subscribe(self, callback: ChangeCallback) -> None:
        self._consumers.append(callback)

    def unsubscribe(self, callback: ChangeCallback) -> None:
        if callback in self._consumers:
            self._consumers.remove(callback)

    def subscribe_errors(self, callback: ErrorCallback) -> None:
        self._error_consumers.append(callback)

    def subscribe_working_dir(self, callback: WorkingDirCallback) -> None:
        """Called with the absolute root whenever a workspace is opened."""
        self._working_dir_consumers.append(callback)

    def emit(self, kind: ChangeKind, relative_path: str, old_path: str | None = None) -> None:
        notification = ChangeNotification(kind=kind, path=relative_path, old_path=old_path)
        logger.debug(f"emitting {kind} {relative_path}")
        for callback in list(self._consumers):
            try:
                callback(notification)
            except Exception as e:
                logger.error(f"error emitting change {kind} {relative_path}: {e}")

    def emit_error(self, notification: WatchErrorNotification) -> None:
        for callback in list(self._error_consumers):
            try:
                callback(notification)
            except Exception as e:
                logger.error(f"error emitting watch error for {notification.path}: {e}")

    def emit_working_dir(self, root: str) -> None:
        for callback in list(self._working_dir_consumers):
            try:
                callback(root)
            except Exception as e:
                logger.error(f"error emitting working directory {root}: {e}")
