from collections.abc import Iterable

from .path_resolver import ROOT_PATH, normalize, parent_of


class VisibilityFilter:
    """Keeps notifications to what the expanded tree can display.

    An entry is visible when it, or the directory holding it, is expanded.
    """

    def __init__(self) -> None:
        self._expanded: tuple[str, ...] = (ROOT_PATH,)

    @property
    def expanded_paths(self) -> tuple[str, ...]:
        return self._expanded

    def update(self, expanded_paths: Iterable[str]) -> tuple[str, ...]:
        ordered: list[str] = [ROOT_PATH]
        for path in expanded_paths:
            path = normalize(path)
            if path not in ordered:
                ordered.append(path)
        # Swapped in one assignment; the dispatch thread reads it unlocked
        self._expanded = tuple(ordered)
        return self._expanded

    def reset(self) -> None:
        self._expanded = (ROOT_PATH,)

    def is_visible(self, relative_path: str) -> bool:
        expanded = self._expanded
        return relative_path in expanded or parent_of(relative_path) in expanded
