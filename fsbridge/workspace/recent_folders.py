"""Persistence for the recent and currently opened workspace folders."""

import os
from pathlib import Path
from threading import Lock
from typing import List

from loguru import logger
from pydantic import ValidationError

from fsbridge.common.models import RecentFolders
from fsbridge.common.utils import DEFAULT_CONFIG_DIR, read_json_file, write_json_file

FOLDERS_FILE = "folders.json"


class RecentFoldersStore:
    """Keeps ``folders.json`` in the config directory up to date.

    Most recently used folders are at the end of each list.
    """

    def __init__(self, config_dir: str | Path = DEFAULT_CONFIG_DIR) -> None:
        self._file = Path(config_dir) / FOLDERS_FILE
        self._lock = Lock()

    @property
    def file(self) -> Path:
        return self._file

    def _load(self) -> RecentFolders:
        """Load the folders file.

        Returns:
            The stored lists. Empty lists if the file doesn't exist or is invalid.
        """
        try:
            content = read_json_file(self._file)
        except OSError as e:
            logger.warning(f"Could not read {self._file}: {e}")
            return RecentFolders()

        if content is None:
            return RecentFolders()
        try:
            return RecentFolders.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Invalid folders file {self._file}: {e}")
            return RecentFolders()

    def _save(self, folders: RecentFolders) -> None:
        write_json_file(self._file, folders.model_dump_json(indent=2))

    def recent(self) -> List[str]:
        return self._load().recent_folders

    def opened(self) -> List[str]:
        return self._load().opened_folders

    def add(self, path: str) -> None:
        """Mark ``path`` as both recently used and currently opened."""
        with self._lock:
            folders = self._load()
            folders.recent_folders = [p for p in folders.recent_folders if p != path] + [path]
            folders.opened_folders = [p for p in folders.opened_folders if p != path] + [path]
            self._save(folders)

    def remove_opened(self, path: str) -> None:
        with self._lock:
            folders = self._load()
            folders.opened_folders = [p for p in folders.opened_folders if p != path]
            self._save(folders)

    def remove_recent(self, path: str) -> None:
        with self._lock:
            folders = self._load()
            folders.recent_folders = [p for p in folders.recent_folders if p != path]
            self._save(folders)

    def prune_missing(self) -> List[str]:
        """Drop opened folders that are no longer directories.

        Returns:
            The opened folders that still exist
        """
        with self._lock:
            folders = self._load()
            existing = [p for p in folders.opened_folders if os.path.isdir(p)]
            for missing in set(folders.opened_folders) - set(existing):
                logger.info(f"error opening folder {missing}, removing it from opened folders")
            if existing != folders.opened_folders:
                folders.opened_folders = existing
                self._save(folders)
            return existing
