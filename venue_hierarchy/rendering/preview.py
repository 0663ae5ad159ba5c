"""
Authoring preview.

What the editor shows while a hierarchy block is being configured: the
plain-text hierarchy for the current window, the bounds of the level slider
and a short description of the selected window. Unlike the display surface,
the preview always shows something, falling back to a placeholder message.

The window is applied with the same ``LevelWindowFilter`` as the display
renderer, so preview and published output agree for the same inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel

from venue_hierarchy.hierarchy.builder import LevelRangeHook, default_level_range, normalize_level_range
from venue_hierarchy.hierarchy.paths import HierarchyPathResolver
from venue_hierarchy.hierarchy.window import LevelWindowFilter
from venue_hierarchy.rendering.renderer import DEFAULT_PATH_SEPARATOR, DEFAULT_SEPARATOR, compose_text
from venue_hierarchy.schemas.location import DisplayAttributes, HierarchyLevel, TermNode

logger = logging.getLogger(__name__)

NO_POST_ID = "No post ID available"
SCOPE_MISMATCH = "This block must be used within an event"
NO_HIERARCHY = "No location hierarchy available for this event"
NO_LEVELS_IN_WINDOW = "No location hierarchy available at selected levels"
LOAD_ERROR = "Error loading location hierarchy"

DEFAULT_MAX_DEPTH = 7


class PreviewState(BaseModel):
    """Everything the editor needs to draw the block and its controls."""

    text: str
    is_placeholder: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    slider_min: int = 1
    slider_max: int = DEFAULT_MAX_DEPTH
    start_level: int = 1
    end_level: int = DEFAULT_MAX_DEPTH
    window_label: str = ""


def describe_window(start_level: int, end_level: int) -> str:
    """``"Country to City"``, or a single label when start equals end."""

    def _label(level: int) -> str:
        try:
            return HierarchyLevel(level).label
        except ValueError:
            return ""

    start = _label(start_level)
    if start_level == end_level:
        return start
    return f"{start} to {_label(end_level)}"


class HierarchyPreview:
    """Compute the authoring preview for one event."""

    def __init__(
        self,
        level_range_hook: LevelRangeHook | None = None,
        max_depth_cap: int = DEFAULT_MAX_DEPTH,
        separator: str = DEFAULT_SEPARATOR,
        path_separator: str = DEFAULT_PATH_SEPARATOR,
        path_resolver: HierarchyPathResolver | None = None,
    ) -> None:
        self.level_range_hook = level_range_hook or default_level_range
        self.max_depth_cap = max_depth_cap
        self.separator = separator
        self.path_separator = path_separator
        self.path_resolver = path_resolver or HierarchyPathResolver()

    def placeholder(self, message: str, attributes: DisplayAttributes | None = None) -> PreviewState:
        attributes = attributes or DisplayAttributes()
        return self._state(message, True, self.max_depth_cap, attributes)

    def preview(
        self,
        terms: Sequence[TermNode],
        attributes: DisplayAttributes,
        venue_name: str | None = None,
    ) -> PreviewState:
        """
        Preview text and slider state for ``terms``.

        Args:
            terms: Terms linked to the event (any order)
            attributes: Block attributes currently set in the editor
            venue_name: Venue label, shown when ``show_venue`` is on
        """
        venue = venue_name if attributes.show_venue and venue_name else None

        if not terms:
            text = venue or NO_HIERARCHY
            return self._state(text, venue is None, self.max_depth_cap, attributes)

        paths = [
            self.path_resolver.path_names(p) for p in self.path_resolver.resolve_paths(terms)
        ]
        longest = max((len(p) for p in paths), default=0)
        max_depth = min(longest, self.max_depth_cap) or self.max_depth_cap

        window = attributes.window
        filtered = [LevelWindowFilter.apply(p, window) for p in paths]
        text = compose_text(filtered, venue, self.separator, self.path_separator)
        if not text:
            return self._state(NO_LEVELS_IN_WINDOW, True, max_depth, attributes)
        return self._state(text, False, max_depth, attributes)

    def _state(
        self,
        text: str,
        is_placeholder: bool,
        max_depth: int,
        attributes: DisplayAttributes,
    ) -> PreviewState:
        low, high = normalize_level_range(self.level_range_hook())
        slider_max = max(low, min(high, max_depth))
        start = min(max(low, attributes.window.start), slider_max)
        end = max(start, min(attributes.window.end, slider_max))
        return PreviewState(
            text=text,
            is_placeholder=is_placeholder,
            max_depth=max_depth,
            slider_min=low,
            slider_max=slider_max,
            start_level=start,
            end_level=end,
            window_label=describe_window(start, end),
        )
