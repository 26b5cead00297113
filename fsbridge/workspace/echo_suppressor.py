"""Tells echoes of local writes apart from external edits."""

from threading import Lock
from typing import Callable, Dict

from loguru import logger

from fsbridge.common.models import ChangeKind

ContentReader = Callable[[str], bytes]


class EchoSuppressor:
    """Remembers the bytes this session last wrote to each relative path.

    Entries never expire. A later write replaces the previous one, and the
    map is only emptied when the workspace is reset.
    """

    def __init__(self, read_content: ContentReader) -> None:
        self._read_content = read_content
        self._pending: Dict[str, bytes] = {}
        self._lock = Lock()

    def record_local_write(self, relative_path: str, content: bytes) -> None:
        with self._lock:
            self._pending[relative_path] = content

    def pending_write(self, relative_path: str) -> bytes | None:
        with self._lock:
            return self._pending.get(relative_path)

    def should_suppress(self, relative_path: str, kind: ChangeKind) -> bool:
        if kind != "changed":
            return False

        recorded = self.pending_write(relative_path)
        if recorded is None:
            return False

        try:
            current = self._read_content(relative_path)
        except OSError as e:
            logger.debug(f"Could not read back {relative_path}, emitting: {e}")
            return False

        return current == recorded

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
