"""
Hierarchy Renderer.

Turns the terms linked to an event into the inline display string, e.g.
``Europe > Germany > Bavaria > Munich > Conference Center``.

Rendering pipeline: resolve one path per leaf -> clip each path to the level
window -> join names (optionally linked to their archive pages) -> append the
venue. All names are HTML-escaped with markupsafe; the configured separators
are trusted markup.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from markupsafe import Markup, escape

from venue_hierarchy.hierarchy.paths import HierarchyPathResolver
from venue_hierarchy.hierarchy.window import LevelWindowFilter
from venue_hierarchy.rendering.links import ArchiveUrlResolver, is_safe_url, resolve_url
from venue_hierarchy.schemas.location import LevelWindow, TermNode

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = " > "
DEFAULT_PATH_SEPARATOR = ", "


class HierarchyRenderer:
    """Render location hierarchies as HTML or plain text."""

    def __init__(
        self,
        url_resolver: ArchiveUrlResolver | None = None,
        separator: str = DEFAULT_SEPARATOR,
        path_separator: str = DEFAULT_PATH_SEPARATOR,
        link_class: str = "location-link",
        venue_link_class: str = "venue-link",
        block_class: str = "wp-block-venue-hierarchy",
        path_resolver: HierarchyPathResolver | None = None,
    ) -> None:
        self.url_resolver = url_resolver
        self.separator = separator
        self.path_separator = path_separator
        self.link_class = link_class
        self.venue_link_class = venue_link_class
        self.block_class = block_class
        self.path_resolver = path_resolver or HierarchyPathResolver()

    @classmethod
    def from_config(
        cls,
        display_config: dict | None,
        url_resolver: ArchiveUrlResolver | None = None,
    ) -> "HierarchyRenderer":
        """Build a renderer from the ``display`` section of the hierarchy config."""
        cfg = display_config or {}
        return cls(
            url_resolver=url_resolver,
            separator=cfg.get("separator", DEFAULT_SEPARATOR),
            path_separator=cfg.get("path_separator", DEFAULT_PATH_SEPARATOR),
            link_class=cfg.get("link_class", "location-link"),
            venue_link_class=cfg.get("venue_link_class", "venue-link"),
            block_class=cfg.get("block_class", "wp-block-venue-hierarchy"),
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def visible_paths(
        self,
        terms: Sequence[TermNode],
        window: LevelWindow,
    ) -> list[list[TermNode]]:
        """Resolved paths clipped to ``window``; empty paths are dropped."""
        paths = self.path_resolver.resolve_paths(terms)
        return LevelWindowFilter(window).filter_paths(paths)

    # ------------------------------------------------------------------
    # HTML
    # ------------------------------------------------------------------

    def render(
        self,
        terms: Sequence[TermNode],
        window: LevelWindow,
        *,
        linkify: bool = False,
        show_venue: bool = False,
        venue_name: str | None = None,
        venue_link: str | None = None,
    ) -> Markup:
        """
        Inline HTML for ``terms`` clipped to ``window``.

        Falls back to the venue alone when no level is visible, and to an
        empty string when there is no venue either.
        """
        paths = self.visible_paths(terms, window)
        rendered = [
            Markup(self.separator).join(self._term_html(t, linkify) for t in path)
            for path in paths
        ]
        hierarchy = Markup(self.path_separator).join(rendered)

        venue = None
        if show_venue and venue_name:
            venue = self._venue_html(venue_name, venue_link, linkify)

        if not hierarchy:
            return venue or Markup("")
        if venue:
            return hierarchy + Markup(self.separator) + venue
        return hierarchy

    def render_block(
        self,
        terms: Sequence[TermNode],
        window: LevelWindow,
        *,
        linkify: bool = False,
        show_venue: bool = False,
        venue_name: str | None = None,
        venue_link: str | None = None,
    ) -> Markup:
        """``render`` wrapped in the host's block paragraph; empty stays empty."""
        inner = self.render(
            terms,
            window,
            linkify=linkify,
            show_venue=show_venue,
            venue_name=venue_name,
            venue_link=venue_link,
        )
        if not inner:
            return Markup("")
        return Markup('<p class="{cls}">{inner}</p>').format(
            cls=self.block_class, inner=inner
        )

    # ------------------------------------------------------------------
    # Plain text
    # ------------------------------------------------------------------

    def render_text(
        self,
        terms: Sequence[TermNode],
        window: LevelWindow,
        *,
        show_venue: bool = False,
        venue_name: str | None = None,
    ) -> str:
        """Unescaped, unlinked rendering for logs, the CLI and JSON payloads."""
        paths = self.visible_paths(terms, window)
        return compose_text(
            [[t.name for t in path] for path in paths],
            venue_name if show_venue else None,
            self.separator,
            self.path_separator,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _term_html(self, term: TermNode, linkify: bool) -> Markup:
        if linkify:
            url = resolve_url(self.url_resolver, term)
            if url:
                return self._link(url, term.name, self.link_class)
        return escape(term.name)

    def _venue_html(self, name: str, link: str | None, linkify: bool) -> Markup:
        if linkify and is_safe_url(link):
            return self._link(link, name, f"{self.link_class} {self.venue_link_class}")
        return escape(name)

    @staticmethod
    def _link(url: str, text: str, css_class: str) -> Markup:
        return Markup('<a href="{url}" class="{cls}">{text}</a>').format(
            url=url, cls=css_class, text=text
        )


def compose_text(
    paths: Sequence[Sequence[str]],
    venue_name: str | None,
    separator: str = DEFAULT_SEPARATOR,
    path_separator: str = DEFAULT_PATH_SEPARATOR,
) -> str:
    """
    Join already-windowed name paths and an optional venue.

    Shared by the plain-text renderer and the authoring preview.
    """
    hierarchy = path_separator.join(separator.join(p) for p in paths if p)
    if not hierarchy:
        return venue_name or ""
    if venue_name:
        return f"{hierarchy}{separator}{venue_name}"
    return hierarchy
