from dependency_injector import containers, providers

from fsbridge.common.file_watcher import DEFAULT_IGNORE_PATTERNS, WatchdogWatchFactory
from fsbridge.common.utils import DEFAULT_CONFIG_DIR
from fsbridge.workspace.recent_folders import RecentFoldersStore
from fsbridge.workspace.session import (
    DEFAULT_ENQUEUE_TIMEOUT,
    DEFAULT_QUEUE_SIZE,
    WorkspaceSession,
)

DEFAULT_CONFIG = {
    "config_dir": str(DEFAULT_CONFIG_DIR),
    "queue_size": DEFAULT_QUEUE_SIZE,
    "enqueue_timeout": DEFAULT_ENQUEUE_TIMEOUT,
    "join_timeout": 5.0,
    "ignore_patterns": list(DEFAULT_IGNORE_PATTERNS),
}


class WorkspaceContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    watch_factory = providers.Singleton(
        WatchdogWatchFactory,
        join_timeout=config.join_timeout,
    )

    folders_store = providers.Singleton(
        RecentFoldersStore,
        config_dir=config.config_dir,
    )

    workspace_session = providers.Factory(
        WorkspaceSession,
        watch_factory=watch_factory,
        folders_store=folders_store,
        queue_size=config.queue_size,
        enqueue_timeout=config.enqueue_timeout,
        ignore_patterns=config.ignore_patterns,
    )


def load_config(target: WorkspaceContainer) -> WorkspaceContainer:
    """Apply the defaults, then any FSBRIDGE_* environment overrides."""
    target.config.from_dict(DEFAULT_CONFIG)
    target.config.config_dir.from_env("FSBRIDGE_HOME", default=DEFAULT_CONFIG["config_dir"])
    target.config.queue_size.from_env(
        "FSBRIDGE_QUEUE_SIZE", as_=int, default=DEFAULT_CONFIG["queue_size"]
    )
    target.config.enqueue_timeout.from_env(
        "FSBRIDGE_ENQUEUE_TIMEOUT", as_=float, default=DEFAULT_CONFIG["enqueue_timeout"]
    )
    target.config.join_timeout.from_env(
        "FSBRIDGE_JOIN_TIMEOUT", as_=float, default=DEFAULT_CONFIG["join_timeout"]
    )
    return target


container = load_config(WorkspaceContainer())
