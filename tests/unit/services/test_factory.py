"""Unit tests for ServiceFactory."""

from unittest.mock import MagicMock

from venue_hierarchy.geocoding.geocoder import NominatimGeocoder
from venue_hierarchy.services.factory import ServiceFactory
from venue_hierarchy.storage.postgres import PostgresTermStore
from venue_hierarchy.storage.term_store import InMemoryTermStore

CONFIG = {
    "namespace": "venue-places",
    "address": {"designated_regions": ["de"]},
    "display": {"separator": " / "},
    "preview": {"max_depth": 5},
}


class TestServiceFactory:
    """Tests for ServiceFactory wiring."""

    def test_namespace_from_config(self, settings):
        assert ServiceFactory(settings, CONFIG).namespace == "venue-places"

    def test_namespace_falls_back_to_settings(self, settings):
        assert ServiceFactory(settings, {}).namespace == settings.TAXONOMY_NAMESPACE

    def test_memory_store_is_shared(self, settings):
        factory = ServiceFactory(settings, CONFIG)
        store = factory.create_store()
        assert isinstance(store, InMemoryTermStore)
        assert factory.create_store() is store

    def test_postgres_store_for_connection(self, settings):
        store = ServiceFactory(settings, CONFIG).create_store(MagicMock())
        assert isinstance(store, PostgresTermStore)

    def test_geocoder_cached(self, settings):
        factory = ServiceFactory(settings, CONFIG)
        geocoder = factory.create_geocoder()
        assert isinstance(geocoder, NominatimGeocoder)
        assert factory.create_geocoder() is geocoder

    def test_config_flows_into_services(self, settings):
        factory = ServiceFactory(settings, CONFIG)
        assert factory.create_normalizer().policy.designated_regions == frozenset({"de"})
        assert factory.create_renderer().separator == " / "
        assert factory.create_preview().max_depth_cap == 5

    def test_level_range_from_settings(self):
        from venue_hierarchy.configs.settings import Settings

        settings = Settings(_env_file=None, DATABASE_URL=None, MIN_LEVEL=2, MAX_LEVEL=4)
        builder = ServiceFactory(settings, CONFIG).create_builder(InMemoryTermStore())
        assert builder.allowed_range() == (2, 4)
        assert builder.namespace == "venue-places"

    def test_hooks_passed_to_builder(self, settings):
        hook = MagicMock(side_effect=lambda draft: draft)
        factory = ServiceFactory(settings, CONFIG, pre_insert_hook=hook)
        assert factory.create_builder(InMemoryTermStore()).pre_insert_hook is hook
