"""Workspace session: watches, echo suppression and path translation."""

from .change_emitter import ChangeEmitter
from .echo_suppressor import EchoSuppressor
from .path_resolver import PathResolver, normalize
from .recent_folders import RecentFoldersStore
from .session import WorkspaceSession
from .visibility_filter import VisibilityFilter
from .watcher_registry import WatcherRegistry

__all__ = [
    "ChangeEmitter",
    "EchoSuppressor",
    "PathResolver",
    "RecentFoldersStore",
    "VisibilityFilter",
    "WatcherRegistry",
    "WorkspaceSession",
    "normalize",
]
