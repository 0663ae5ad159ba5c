"""
Canonical links for location archive pages.

An archive page whose term has exactly one child adds nothing over the
child's page, so its canonical URL points at the deepest descendant reached
by following single-child steps (``Europe -> Germany -> Berlin`` when each
has one child).
"""

from __future__ import annotations

import logging

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.hierarchy.paths import MAX_DEPTH
from venue_hierarchy.rendering.links import ArchiveUrlResolver, resolve_url
from venue_hierarchy.schemas.location import TermNode
from venue_hierarchy.storage.term_store import TermStore

logger = logging.getLogger(__name__)


class CanonicalLinker:
    """Find the single-child shortcut target of a term archive page."""

    def __init__(
        self,
        store: TermStore,
        url_resolver: ArchiveUrlResolver,
        namespace: str,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.store = store
        self.url_resolver = url_resolver
        self.namespace = namespace
        self.max_depth = max_depth

    def canonical_term(self, term: TermNode) -> TermNode | None:
        """
        Deepest descendant reached through single-child steps.

        Returns None when ``term`` has zero or several children (the page is
        its own canonical) or when the store cannot be read.
        """
        seen = {term.term_id}
        target: TermNode | None = None
        current = term

        for _ in range(self.max_depth):
            try:
                children = self.store.list_children(self.namespace, current.term_id)
            except TermStoreError as e:
                logger.warning(f"Could not list children of term {current.term_id}: {e}")
                break
            if len(children) != 1 or children[0].term_id in seen:
                break
            current = children[0]
            seen.add(current.term_id)
            target = current

        return target

    def canonical_target(self, term: TermNode) -> str | None:
        """Archive URL of ``canonical_term(term)``, or None."""
        target = self.canonical_term(term)
        if target is None:
            return None
        return resolve_url(self.url_resolver, target)
