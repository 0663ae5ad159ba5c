"""
Hierarchy display service.

Read-side entry points used by the API and CLI: the published block, the
authoring preview and canonical links for term archives. Nothing here
mutates the store, and no failure is allowed to escape into rendered output.
"""

from __future__ import annotations

import logging

from markupsafe import Markup

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.hierarchy.canonical import CanonicalLinker
from venue_hierarchy.rendering.preview import (
    LOAD_ERROR,
    NO_POST_ID,
    SCOPE_MISMATCH,
    HierarchyPreview,
    PreviewState,
)
from venue_hierarchy.rendering.renderer import HierarchyRenderer
from venue_hierarchy.schemas.location import DisplayAttributes, TermNode, VenueInfo
from venue_hierarchy.storage.term_store import TermStore

logger = logging.getLogger(__name__)


class HierarchyDisplayService:
    """Render, preview and canonicalise location hierarchies."""

    def __init__(
        self,
        store: TermStore,
        renderer: HierarchyRenderer,
        namespace: str,
        preview: HierarchyPreview | None = None,
        owning_record_type: str = "event",
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.namespace = namespace
        self.preview = preview or HierarchyPreview()
        self.owning_record_type = owning_record_type
        self.canonical = CanonicalLinker(store, renderer.url_resolver, namespace)

    def event_terms(self, event_id: int) -> list[TermNode]:
        """
        Terms linked to ``event_id``.

        Raises:
            TermStoreError: If the store cannot be read
        """
        return self.store.list_associated(event_id, self.namespace)

    def render_event(
        self,
        event_id: int | None,
        post_type: str | None,
        attributes: DisplayAttributes,
        venue: VenueInfo | None = None,
    ) -> Markup:
        """
        Published block markup for one event.

        Returns an empty string outside events; read failures fall back to
        the venue alone.
        """
        if not event_id or post_type != self.owning_record_type:
            return Markup("")

        venue = venue or VenueInfo()
        try:
            terms = self.event_terms(event_id)
        except TermStoreError as e:
            logger.error(f"Error getting location terms for event {event_id}: {e}")
            terms = []

        return self.renderer.render_block(
            terms,
            attributes.window,
            linkify=attributes.enable_links,
            show_venue=attributes.show_venue,
            venue_name=venue.name,
            venue_link=venue.permalink,
        )

    def render_event_text(
        self,
        event_id: int,
        attributes: DisplayAttributes,
        venue_name: str | None = None,
    ) -> str:
        """Plain text variant of ``render_event`` (no links, no escaping)."""
        try:
            terms = self.event_terms(event_id)
        except TermStoreError as e:
            logger.error(f"Error getting location terms for event {event_id}: {e}")
            terms = []
        return self.renderer.render_text(
            terms,
            attributes.window,
            show_venue=attributes.show_venue,
            venue_name=venue_name,
        )

    def preview_event(
        self,
        event_id: int | None,
        post_type: str | None,
        attributes: DisplayAttributes,
        venue_name: str | None = None,
    ) -> PreviewState:
        """Authoring preview; every failure becomes a visible placeholder."""
        if post_type and post_type != self.owning_record_type:
            return self.preview.placeholder(SCOPE_MISMATCH, attributes)
        if not event_id:
            return self.preview.placeholder(NO_POST_ID, attributes)

        try:
            terms = self.event_terms(event_id)
        except TermStoreError as e:
            logger.error(f"Error loading location hierarchy for event {event_id}: {e}")
            if attributes.show_venue and venue_name:
                return self.preview.placeholder(venue_name, attributes).model_copy(
                    update={"is_placeholder": False}
                )
            return self.preview.placeholder(LOAD_ERROR, attributes)

        return self.preview.preview(terms, attributes, venue_name)

    def canonical_for_slug(self, slug: str) -> str | None:
        """Canonical archive URL for the term ``slug``; None when self-canonical."""
        try:
            term = self.store.find_by_slug(self.namespace, slug)
        except TermStoreError as e:
            logger.warning(f"Could not load term '{slug}': {e}")
            return None
        if term is None:
            return None
        return self.canonical.canonical_target(term)

    def list_terms(self) -> list[TermNode]:
        """All terms of the namespace, parents before children."""
        return self.store.list_terms(self.namespace)
