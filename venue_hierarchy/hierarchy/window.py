"""
Level window filtering.

Clips a root-to-leaf path to an inclusive, 1-based ``[start, end]`` window.
The display renderer and the authoring preview both go through
``LevelWindowFilter.apply`` so the two can never disagree for the same input.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from venue_hierarchy.schemas.location import LevelWindow

T = TypeVar("T")


class LevelWindowFilter:
    """Slice paths to a configured level window."""

    def __init__(self, window: LevelWindow | None = None) -> None:
        self.window = window or LevelWindow()

    @staticmethod
    def apply(path: Sequence[T], window: LevelWindow) -> list[T]:
        """
        Visible slice of ``path`` for ``window``.

        A window that starts beyond the end of the path yields ``[]``; this is
        not an error.
        """
        length = len(path)
        actual_start = max(1, window.start)
        actual_end = min(window.end, length)
        if actual_start > length:
            return []
        return list(path[actual_start - 1 : actual_end])

    def filter_paths(
        self,
        paths: Sequence[Sequence[T]],
        window: LevelWindow | None = None,
    ) -> list[list[T]]:
        """Apply the window to every path, dropping paths that end up empty."""
        window = window or self.window
        filtered = (self.apply(path, window) for path in paths)
        return [p for p in filtered if p]
