import pytest

from fsbridge.workspace.visibility_filter import VisibilityFilter


class TestVisibilityFilter:
    """Test cases for limiting notifications to the expanded tree."""

    def test_root_is_always_expanded(self) -> None:
        visibility = VisibilityFilter()

        assert visibility.expanded_paths == (".",)
        assert visibility.update([]) == (".",)

    def test_top_level_entries_are_visible_with_root_only(self) -> None:
        visibility = VisibilityFilter()

        assert visibility.is_visible("a.txt")
        assert visibility.is_visible("src")
        assert not visibility.is_visible("src/x.txt")

    @pytest.mark.parametrize(
        "expanded,visible",
        [
            (["a/b"], True),
            (["a/b/c.txt"], True),
            (["a"], False),
            (["a/b/c"], False),
            ([], False),
        ],
    )
    def test_nested_entry(self, expanded: list[str], visible: bool) -> None:
        visibility = VisibilityFilter()
        visibility.update(expanded)

        assert visibility.is_visible("a/b/c.txt") is visible

    def test_update_normalizes_and_deduplicates(self) -> None:
        visibility = VisibilityFilter()

        expanded = visibility.update(["/src", "src", ".", "docs"])

        assert expanded == (".", "src", "docs")

    def test_collapse_hides_entries(self) -> None:
        visibility = VisibilityFilter()
        visibility.update(["src"])
        assert visibility.is_visible("src/x.txt")

        visibility.update([])

        assert not visibility.is_visible("src/x.txt")

    def test_reset(self) -> None:
        visibility = VisibilityFilter()
        visibility.update(["src"])

        visibility.reset()

        assert visibility.expanded_paths == (".",)
