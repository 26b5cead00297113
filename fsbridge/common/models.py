from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

RawEventKind = Literal["created", "deleted", "modified", "moved"]
ChangeKind = Literal["created", "removed", "dirCreated", "dirRemoved", "changed", "renamed"]
WatchErrorClass = Literal["resource_exhausted", "setup_failed"]


class RawFileEvent(BaseModel):
    """An event as reported by a single directory watch, paths still absolute."""

    kind: RawEventKind
    src_path: str
    dest_path: str | None = Field(default=None)
    is_directory: bool = Field(default=False)
    # The directory and handle id of the watch that reported the event
    watch_path: str | None = Field(default=None)
    watch_id: str | None = Field(default=None)


class ChangeNotification(BaseModel):
    kind: ChangeKind
    path: str
    old_path: str | None = Field(default=None)


class WatchErrorNotification(BaseModel):
    """Fatal watch error delivered out of band to the UI."""

    path: str
    classification: WatchErrorClass
    code: str | None = Field(default=None)
    message: str = Field(default="")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class DirectoryEntry(BaseModel):
    name: str
    is_directory: bool


class FileStat(BaseModel):
    size: int
    mode: int
    mtime: float
    atime: float
    ctime: float
    is_directory: bool
    is_file: bool
    is_symlink: bool = Field(default=False)


class RecentFolders(BaseModel):
    recent_folders: list[str] = Field(default_factory=list)
    opened_folders: list[str] = Field(default_factory=list)
