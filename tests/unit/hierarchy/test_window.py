"""Unit tests for level window filtering."""

from venue_hierarchy.hierarchy.window import LevelWindowFilter
from venue_hierarchy.schemas.location import LevelWindow

PATH = ["Europe", "Germany", "Bavaria", "Munich"]


class TestApply:
    """Tests for LevelWindowFilter.apply."""

    def test_full_window(self):
        assert LevelWindowFilter.apply(PATH, LevelWindow()) == PATH

    def test_middle(self):
        """Levels 2..3 of a four-level path."""
        assert LevelWindowFilter.apply(PATH, LevelWindow.of(2, 3)) == ["Germany", "Bavaria"]

    def test_single_level(self):
        assert LevelWindowFilter.apply(PATH, LevelWindow.of(1, 1)) == ["Europe"]

    def test_end_beyond_path(self):
        """An end past the path is clipped to its length."""
        assert LevelWindowFilter.apply(PATH, LevelWindow.of(3, 6)) == ["Bavaria", "Munich"]

    def test_start_beyond_path(self):
        """A window below the deepest level is empty, not an error."""
        assert LevelWindowFilter.apply(PATH, LevelWindow.of(5, 6)) == []

    def test_empty_path(self):
        assert LevelWindowFilter.apply([], LevelWindow()) == []


class TestFilterPaths:
    """Tests for LevelWindowFilter.filter_paths."""

    def test_drops_empty(self):
        """Paths with nothing in the window are dropped."""
        paths = [PATH, ["Europe", "Austria"]]
        window_filter = LevelWindowFilter(LevelWindow.of(3, 4))
        assert window_filter.filter_paths(paths) == [["Bavaria", "Munich"]]

    def test_explicit_window_overrides(self):
        window_filter = LevelWindowFilter(LevelWindow.of(3, 4))
        assert window_filter.filter_paths([PATH], LevelWindow.of(1, 1)) == [["Europe"]]
