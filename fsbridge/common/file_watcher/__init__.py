"""Directory watch components."""

from .base import BaseWatchFactory, BaseWatchHandle, RawEventCallback
from .metadata import DEFAULT_IGNORE_PATTERNS, WatchMetadata
from .manager import WatchdogWatchFactory, WatchdogWatchHandle

__all__ = [
    "BaseWatchFactory",
    "BaseWatchHandle",
    "DEFAULT_IGNORE_PATTERNS",
    "RawEventCallback",
    "WatchMetadata",
    "WatchdogWatchFactory",
    "WatchdogWatchHandle",
]
