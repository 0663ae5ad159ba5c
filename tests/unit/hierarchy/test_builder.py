"""
Unit tests for TermGraphBuilder.

Tests for:
- chain creation and parent links
- idempotent re-runs (reads only)
- term reuse across addresses and parent repair
- level ranges and hooks
- association replacement
"""

from unittest.mock import MagicMock

import pytest

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.hierarchy.builder import TermGraphBuilder, normalize_level_range
from venue_hierarchy.schemas.location import LocationLevels
from venue_hierarchy.storage.term_store import InMemoryTermStore

NAMESPACE = "event-location"


class FailingStore(InMemoryTermStore):
    """In-memory store that refuses to create one slug."""

    def __init__(self, bad_slug: str):
        super().__init__()
        self.bad_slug = bad_slug

    def create(self, namespace, name, slug, parent_id, level):
        if slug == self.bad_slug:
            raise TermStoreError(f"cannot create {slug}")
        return super().create(namespace, name, slug, parent_id, level)


# =============================================================================
# Chains
# =============================================================================


class TestBuildChain:
    """Tests for build_chain."""

    def test_creates_full_chain(self, builder, store, munich_levels):
        """Every level should become a term under the previous one."""
        term_ids = builder.build_chain(munich_levels)

        terms = [store.get(i) for i in term_ids]
        assert [t.slug for t in terms] == [
            "europe",
            "de",
            "bayern",
            "muenchen",
            "marienplatz",
            "marienplatz-8",
        ]
        assert [t.level for t in terms] == [1, 2, 3, 4, 5, 6]
        assert terms[0].parent_id is None
        for parent, child in zip(terms, terms[1:]):
            assert child.parent_id == parent.term_id

    def test_names_keep_original_casing(self, builder, store, munich_levels):
        """Display names are stored as geocoded."""
        term_ids = builder.build_chain(munich_levels)
        assert store.get(term_ids[3]).name == "München"

    def test_rerun_is_read_only(self, store, munich_levels):
        """A second run against a consistent store should not write."""
        spy = MagicMock(wraps=store)
        builder = TermGraphBuilder(spy, namespace=NAMESPACE)

        first = builder.build_chain(munich_levels)
        creates = spy.create.call_count
        second = builder.build_chain(munich_levels)

        assert first == second
        assert spy.create.call_count == creates
        spy.update_parent.assert_not_called()

    def test_shared_prefix_reused(self, builder, store, munich_levels, berlin_components):
        """Two German addresses share the continent and country terms."""
        from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer

        munich = builder.build_chain(munich_levels)
        berlin = builder.build_chain(AddressNormalizer().normalize(berlin_components))

        assert munich[:2] == berlin[:2]
        assert munich[2] != berlin[2]
        assert len(store.list_terms(NAMESPACE)) == 6 + 4

    def test_parent_repair(self, builder, store, munich_levels):
        """An existing term under the wrong parent should be moved."""
        stray = store.create(NAMESPACE, "München", "muenchen", None, 4)

        term_ids = builder.build_chain(munich_levels)

        assert term_ids[3] == stray.term_id
        assert store.get(stray.term_id).parent_id == term_ids[2]

    def test_level_sharing_slug_with_parent(self, builder, store):
        """A city named like its state reuses the state term and the chain goes on."""
        from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer

        levels = AddressNormalizer().normalize(
            {
                "house_number": "1",
                "road": "Stephansplatz",
                "city": "Wien",
                "state": "Wien",
                "country": "Österreich",
                "country_code": "at",
            }
        )

        term_ids = builder.build_chain(levels)

        terms = [store.get(i) for i in term_ids]
        assert len(term_ids) == 5
        assert [t.slug for t in terms][:3] == ["europe", "at", "wien"]
        assert [t.level for t in terms] == [1, 2, 3, 5, 6]
        assert terms[0].parent_id is None
        for parent, child in zip(terms, terms[1:]):
            assert child.parent_id == parent.term_id
        assert len(term_ids) == len(set(term_ids))

    def test_equivalent_names_share_one_term(self, builder, store, munich_levels):
        """Names that slug identically map to a single term."""
        first = builder.build_chain(munich_levels)
        count = len(store.list_terms(NAMESPACE))

        second = builder.build_chain(munich_levels.model_copy(update={"city": "Muenchen"}))

        assert second[3] == first[3]
        assert len(store.list_terms(NAMESPACE)) == count
        assert store.get(first[3]).name == "München"

    def test_allowed_range_skips_levels(self, builder, store, munich_levels):
        """Levels outside the range are skipped without breaking the chain."""
        term_ids = builder.build_chain(munich_levels, allowed_range=(2, 4))

        terms = [store.get(i) for i in term_ids]
        assert [t.slug for t in terms] == ["de", "bayern", "muenchen"]
        assert terms[0].parent_id is None
        assert terms[1].parent_id == terms[0].term_id
        assert terms[2].parent_id == terms[1].term_id

    def test_level_range_hook(self, store, munich_levels):
        """The level-range hook bounds the written levels."""
        builder = TermGraphBuilder(store, namespace=NAMESPACE, level_range_hook=lambda: (1, 3))
        term_ids = builder.build_chain(munich_levels)
        assert [store.get(i).slug for i in term_ids] == ["europe", "de", "bayern"]

    def test_store_failure_stops_chain(self, munich_levels):
        """A failing create keeps earlier terms and returns them."""
        store = FailingStore(bad_slug="muenchen")
        builder = TermGraphBuilder(store, namespace=NAMESPACE)

        term_ids = builder.build_chain(munich_levels)

        assert [store.get(i).slug for i in term_ids] == ["europe", "de", "bayern"]
        assert store.find_by_slug(NAMESPACE, "marienplatz") is None

    def test_empty_levels(self, builder):
        """Nothing to build means no ids."""
        assert builder.build_chain(LocationLevels()) == []

    def test_chain_without_continent(self, builder, store):
        """Unknown continents start the chain at the country."""
        levels = LocationLevels(country="Atlantis", country_code="zz", state="Deep", city="Core")
        term_ids = builder.build_chain(levels)
        terms = [store.get(i) for i in term_ids]
        assert [t.slug for t in terms] == ["zz", "deep", "core"]
        assert terms[0].parent_id is None


class TestNormalizeLevelRange:
    """Tests for normalize_level_range."""

    def test_clamped(self):
        assert normalize_level_range((0, 9)) == (1, 6)
        assert normalize_level_range((2, 4)) == (2, 4)


# =============================================================================
# Hooks
# =============================================================================


class TestPreInsertHook:
    """Tests for the pre-insert hook."""

    def test_rename(self, store, munich_levels):
        """A hook can rename terms and change their slugs."""

        def hook(draft):
            if draft.level == 4:
                return draft.model_copy(update={"name": "Munich", "slug": "munich"})
            return draft

        builder = TermGraphBuilder(store, namespace=NAMESPACE, pre_insert_hook=hook)
        term_ids = builder.build_chain(munich_levels)

        city = store.get(term_ids[3])
        assert (city.name, city.slug) == ("Munich", "munich")

    def test_cannot_change_level_or_namespace(self, store, munich_levels):
        """Namespace and level changes are ignored."""

        def hook(draft):
            return draft.model_copy(update={"namespace": "other", "level": 1})

        builder = TermGraphBuilder(store, namespace=NAMESPACE, pre_insert_hook=hook)
        term_ids = builder.build_chain(munich_levels)

        assert [store.get(i).level for i in term_ids] == [1, 2, 3, 4, 5, 6]
        assert store.list_terms("other") == []

    def test_blank_slug_falls_back(self, store, munich_levels):
        """A hook that blanks the slug gets one derived from the name."""

        def hook(draft):
            return draft.model_copy(update={"slug": ""})

        builder = TermGraphBuilder(store, namespace=NAMESPACE, pre_insert_hook=hook)
        term_ids = builder.build_chain(munich_levels)

        assert store.get(term_ids[0]).slug == "europe"

    def test_hook_receives_location(self, store, munich_levels):
        """Drafts carry the whole resolved location."""
        seen = []

        def hook(draft):
            seen.append(draft)
            return draft

        TermGraphBuilder(store, namespace=NAMESPACE, pre_insert_hook=hook).build_chain(
            munich_levels
        )
        assert len(seen) == 6
        assert all(d.location == munich_levels for d in seen)
        assert seen[0].parent_id is None


# =============================================================================
# Association
# =============================================================================


class TestBuildAndAssociate:
    """Tests for build_and_associate."""

    def test_associates_chain(self, builder, store, munich_levels):
        """The event should be linked to every term of the chain."""
        association = builder.build_and_associate(42, munich_levels)
        assert (association.owner_id, association.namespace) == (42, NAMESPACE)
        assert [t.term_id for t in store.list_associated(42, NAMESPACE)] == association.term_ids

    def test_replaces_previous_links(self, builder, store, munich_levels, berlin_components):
        """Re-resolving replaces the old chain."""
        from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer

        builder.build_and_associate(42, munich_levels)
        berlin_ids = builder.build_and_associate(
            42, AddressNormalizer().normalize(berlin_components)
        ).term_ids

        linked = store.list_associated(42, NAMESPACE)
        assert {t.term_id for t in linked} == set(berlin_ids)

    def test_empty_chain_keeps_links(self, builder, store, munich_levels):
        """An empty chain should not wipe the event's hierarchy."""
        builder.build_and_associate(42, munich_levels)
        assert builder.build_and_associate(42, LocationLevels()).term_ids == []
        assert len(store.list_associated(42, NAMESPACE)) == 6

    def test_association_failure_propagates(self, munich_levels):
        """Association errors are raised to the caller."""
        store = InMemoryTermStore()
        store.associate = MagicMock(side_effect=TermStoreError("boom"))
        builder = TermGraphBuilder(store, namespace=NAMESPACE)

        with pytest.raises(TermStoreError):
            builder.build_and_associate(42, munich_levels)
