"""Unit tests for LocationResolutionService."""

from unittest.mock import MagicMock

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.services.resolution import LocationResolutionService, ResolutionStatus
from venue_hierarchy.schemas.location import EventRecord, VenueInfo

NS = "event-location"
MUNICH = "Marienplatz 8, München"


def _event(address=MUNICH, **kwargs):
    return EventRecord(event_id=42, venue=VenueInfo(name="Rathaus", full_address=address), **kwargs)


class TestOnEventSaved:
    """Tests for the save hook."""

    def test_resolves(self, fake_geocoder, builder, store):
        service = LocationResolutionService(fake_geocoder, builder)
        result = service.on_event_saved(_event())

        assert result.status is ResolutionStatus.RESOLVED
        assert result.success
        assert len(result.term_ids) == 6
        assert result.levels.city == "München"
        assert [t.term_id for t in store.list_associated(42, NS)] == result.term_ids

    def test_autosave_skipped(self, fake_geocoder, builder):
        service = LocationResolutionService(fake_geocoder, builder)
        result = service.on_event_saved(_event(is_autosave=True))
        assert result.status is ResolutionStatus.SKIPPED
        assert fake_geocoder.calls == []

    def test_other_post_type_skipped(self, fake_geocoder, builder):
        service = LocationResolutionService(fake_geocoder, builder)
        result = service.on_event_saved(_event(post_type="page"))
        assert result.status is ResolutionStatus.SKIPPED

    def test_missing_address_skipped(self, fake_geocoder, builder):
        service = LocationResolutionService(fake_geocoder, builder)
        assert service.on_event_saved(_event(address="  ")).status is ResolutionStatus.SKIPPED
        no_venue = EventRecord(event_id=42)
        assert service.on_event_saved(no_venue).status is ResolutionStatus.SKIPPED

    def test_resave_is_stable(self, fake_geocoder, builder, store):
        """Saving twice gives the same terms and no extra rows."""
        service = LocationResolutionService(fake_geocoder, builder)
        first = service.on_event_saved(_event())
        second = service.on_event_saved(_event())
        assert first.term_ids == second.term_ids
        assert len(store.list_terms(NS)) == 6


class TestResolveAddress:
    """Tests for failure handling in resolve_address."""

    def test_geocode_failure_keeps_links(self, fake_geocoder, builder, store):
        service = LocationResolutionService(fake_geocoder, builder)
        service.resolve_address(42, MUNICH)

        result = service.resolve_address(42, "Unknown Street 1")

        assert result.status is ResolutionStatus.GEOCODE_FAILED
        assert len(store.list_associated(42, NS)) == 6

    def test_no_usable_levels(self, builder, make_geocoder):
        geocoder = make_geocoder({"Somewhere": {"postcode": "12345"}})
        service = LocationResolutionService(geocoder, builder)
        assert service.resolve_address(42, "Somewhere").status is ResolutionStatus.EMPTY

    def test_association_failure(self, fake_geocoder, builder, store):
        store.associate = MagicMock(side_effect=TermStoreError("locked"))
        service = LocationResolutionService(fake_geocoder, builder)

        result = service.resolve_address(42, MUNICH)

        assert result.status is ResolutionStatus.STORE_FAILED
        assert "locked" in result.reason
