"""Translation between absolute paths and workspace-relative POSIX paths."""

import os

from fsbridge.common.exceptions import NotConfiguredError
from fsbridge.common.utils import to_posix

ROOT_PATH = "."


def normalize(relative_path: str) -> str:
    """Canonical form of a workspace-relative path.

    This is what ``to_relative(to_absolute(p))`` yields for any ``p``.
    """
    segments = [s for s in to_posix(relative_path).split("/") if s not in ("", ROOT_PATH)]
    return "/".join(segments) or ROOT_PATH


def parent_of(relative_path: str) -> str:
    parent = relative_path.rpartition("/")[0]
    return parent or ROOT_PATH


class PathResolver:
    """Resolves paths against a single workspace root.

    Every operation raises NotConfiguredError until ``configure`` is called.
    """

    def __init__(self, root: str | None = None) -> None:
        self._root: str | None = None
        if root is not None:
            self.configure(root)

    @property
    def root(self) -> str:
        if self._root is None:
            raise NotConfiguredError()
        return self._root

    @property
    def is_configured(self) -> bool:
        return self._root is not None

    def configure(self, root: str) -> None:
        if not os.path.isabs(root):
            raise ValueError(f"Workspace root must be an absolute path: {root}")
        self._root = os.path.realpath(root)

    def reset(self) -> None:
        self._root = None

    def to_absolute(self, relative_path: str) -> str:
        root = self.root
        path = normalize(relative_path or "")
        if path == ROOT_PATH:
            return root
        separator = "" if root.endswith(os.sep) else os.sep
        return root + separator + path.replace("/", os.sep)

    def to_relative(self, absolute_path: str) -> str:
        root = self.root
        if absolute_path == root:
            return ROOT_PATH

        prefix = root if root.endswith(os.sep) else root + os.sep
        if not absolute_path.startswith(prefix):
            raise ValueError(f"{absolute_path} is outside the workspace {root}")

        relative = to_posix(absolute_path[len(root):])
        if relative.startswith("/"):
            relative = relative[1:]
        return relative or ROOT_PATH
