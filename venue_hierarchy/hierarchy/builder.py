"""
Term Graph Builder.

Upserts the chain of location terms for one resolved address and links the
chain to its event. Terms are deduplicated by ``(slug, namespace)``: a term
that already exists is reused, and if it hangs under the wrong parent it is
moved under the expected one. Running the same chain twice against a
consistent store issues reads only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.hierarchy.slugs import SlugGenerator
from venue_hierarchy.schemas.location import (
    MAX_LEVEL,
    MIN_LEVEL,
    HierarchyLevel,
    LocationLevels,
    OwningRecordAssociation,
    TermDraft,
)
from venue_hierarchy.storage.term_store import TermStore

logger = logging.getLogger(__name__)

PreInsertHook = Callable[[TermDraft], TermDraft]
LevelRangeHook = Callable[[], tuple[int, int]]

DEFAULT_NAMESPACE = "event-location"


def identity_hook(draft: TermDraft) -> TermDraft:
    """Default pre-insert hook: leave the draft unchanged."""
    return draft


def default_level_range() -> tuple[int, int]:
    """Default level-range hook: every level from continent to street number."""
    return (MIN_LEVEL, MAX_LEVEL)


def normalize_level_range(level_range: tuple[int, int]) -> tuple[int, int]:
    """Clamp a ``(min, max)`` pair into ``[1, 6]``."""
    low, high = level_range
    return max(MIN_LEVEL, int(low)), min(MAX_LEVEL, int(high))


class TermGraphBuilder:
    """
    Build and repair location term chains.

    Hooks are injected at construction rather than looked up globally:

    - ``pre_insert_hook`` may rename a term, change its slug or re-parent it
      before it is looked up or created;
    - ``level_range_hook`` bounds which levels are written at all.
    """

    def __init__(
        self,
        store: TermStore,
        slug_generator: SlugGenerator | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        pre_insert_hook: PreInsertHook | None = None,
        level_range_hook: LevelRangeHook | None = None,
    ) -> None:
        self.store = store
        self.slugs = slug_generator or SlugGenerator()
        self.namespace = namespace
        self.pre_insert_hook = pre_insert_hook or identity_hook
        self.level_range_hook = level_range_hook or default_level_range

    def allowed_range(self) -> tuple[int, int]:
        return normalize_level_range(self.level_range_hook())

    def build_chain(
        self,
        levels: LocationLevels,
        allowed_range: tuple[int, int] | None = None,
        namespace: str | None = None,
    ) -> list[int]:
        """
        Find or create every term of ``levels``, top-down.

        Levels outside ``allowed_range`` are skipped without breaking the
        chain: the next written level attaches to the last written term. A
        store failure stops the chain; terms written before it are kept.

        Returns:
            Term ids in level order
        """
        namespace = namespace or self.namespace
        low, high = normalize_level_range(allowed_range or self.allowed_range())

        term_ids: list[int] = []
        parent_id: int | None = None

        for level, name in levels.as_level_pairs():
            if not low <= level <= high:
                continue
            try:
                term_id = self._upsert(levels, level, name, parent_id, namespace)
            except TermStoreError as e:
                logger.error(
                    f"Aborting location chain at level {level.label} ('{name}'): {e}"
                )
                break
            if term_id == parent_id:
                # Same slug as the level above (e.g. state and city "Wien").
                continue
            term_ids.append(term_id)
            parent_id = term_id

        return term_ids

    def build_and_associate(
        self,
        owner_id: int,
        levels: LocationLevels,
        allowed_range: tuple[int, int] | None = None,
        namespace: str | None = None,
    ) -> OwningRecordAssociation:
        """
        Build the chain and replace the owner's term links with it.

        Nothing is associated when no term could be produced, so an event
        keeps its previous hierarchy rather than losing it.

        Returns:
            The association written (``term_ids`` empty if nothing was written)

        Raises:
            TermStoreError: If the association itself fails
        """
        namespace = namespace or self.namespace
        association = OwningRecordAssociation(
            owner_id=owner_id,
            namespace=namespace,
            term_ids=self.build_chain(levels, allowed_range, namespace),
        )
        if association.term_ids:
            self.store.associate(owner_id, namespace, association.term_ids)
            logger.info(
                f"Linked event {owner_id} to {len(association.term_ids)} location terms"
            )
        else:
            logger.info(f"No location terms produced for event {owner_id}")
        return association

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _upsert(
        self,
        levels: LocationLevels,
        level: HierarchyLevel,
        name: str,
        parent_id: int | None,
        namespace: str,
    ) -> int:
        draft = self._prepare_draft(levels, level, name, parent_id, namespace)

        existing = self.store.find_by_slug(namespace, draft.slug)
        if existing is not None:
            if existing.term_id == draft.parent_id:
                return existing.term_id
            if existing.parent_id != draft.parent_id:
                logger.info(
                    f"Moving term '{existing.name}' ({existing.slug}) from parent "
                    f"{existing.parent_id} to {draft.parent_id}"
                )
                self.store.update_parent(existing.term_id, draft.parent_id)
            return existing.term_id

        created = self.store.create(
            namespace, draft.name, draft.slug, draft.parent_id, int(level)
        )
        logger.debug(f"Created term '{created.name}' ({created.slug}) at {level.label}")
        return created.term_id

    def _prepare_draft(
        self,
        levels: LocationLevels,
        level: HierarchyLevel,
        name: str,
        parent_id: int | None,
        namespace: str,
    ) -> TermDraft:
        draft = TermDraft(
            name=name,
            slug=self.slugs.for_level(name, level, levels.country_code),
            parent_id=parent_id,
            namespace=namespace,
            level=int(level),
            location=levels,
        )
        hooked = self.pre_insert_hook(draft.model_copy()) or draft

        # Namespace and level are not the hook's to change.
        name = hooked.name.strip() or draft.name
        slug = hooked.slug.strip() or self.slugs.slugify(name) or draft.slug
        return draft.model_copy(
            update={"name": name, "slug": slug, "parent_id": hooked.parent_id}
        )
