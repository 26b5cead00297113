"""Base interfaces for directory watch handles."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from fsbridge.common.models import RawFileEvent
from .metadata import WatchMetadata

RawEventCallback = Callable[[RawFileEvent], None]


class BaseWatchHandle(ABC):
    """A single open, non-recursive watch on one directory."""

    metadata: WatchMetadata

    @property
    def path(self) -> str:
        return self.metadata.path

    @abstractmethod
    def close(self) -> None:
        """Stop delivering events. Returns once the watch is torn down."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass


class BaseWatchFactory(ABC):
    """Abstract factory that opens directory watches."""

    @abstractmethod
    def open_watch(
        self,
        path: str,
        callback: RawEventCallback,
        ignore_patterns: Optional[List[str]] = None,
    ) -> BaseWatchHandle:
        """Open a non-recursive watch on ``path`` and start delivering events.

        Args:
            path: Absolute directory path to watch
            callback: Called from the watch thread for every raw event
            ignore_patterns: Glob patterns, matched against the entry name and
                its path relative to ``path``, whose events are dropped

        Returns:
            The started watch handle

        Raises:
            WatchSetupError: If the OS refuses the watch
        """
        pass
