"""
Service Factory.

Wires the stateless service objects from Settings and the hierarchy YAML.
Services are created once per process (or per request for the store, whose
PostgreSQL connection is borrowed from a pool) and passed to callers.

Usage:
    factory = ServiceFactory()
    store = factory.create_store()
    resolution = factory.create_resolution_service(store)
    resolution.on_event_saved(event)
"""

from __future__ import annotations

import logging
from typing import Any

from venue_hierarchy.configs.config import Config
from venue_hierarchy.configs.settings import Settings, get_settings
from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer, AddressPolicy
from venue_hierarchy.geocoding.geocoder import Geocoder, NominatimGeocoder
from venue_hierarchy.hierarchy.builder import LevelRangeHook, PreInsertHook, TermGraphBuilder
from venue_hierarchy.rendering.links import TermArchiveLinker
from venue_hierarchy.rendering.preview import DEFAULT_MAX_DEPTH, HierarchyPreview
from venue_hierarchy.rendering.renderer import HierarchyRenderer
from venue_hierarchy.services.display import HierarchyDisplayService
from venue_hierarchy.services.resolution import LocationResolutionService
from venue_hierarchy.storage.term_store import InMemoryTermStore, TermStore

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Create configured services and their collaborators."""

    def __init__(
        self,
        settings: Settings | None = None,
        config: dict[str, Any] | None = None,
        pre_insert_hook: PreInsertHook | None = None,
        level_range_hook: LevelRangeHook | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.config = config if config is not None else Config.load_hierarchy_config()
        self.pre_insert_hook = pre_insert_hook
        self.level_range_hook = level_range_hook or self._settings_level_range
        self._memory_store: InMemoryTermStore | None = None
        self._geocoder: Geocoder | None = None

    @property
    def namespace(self) -> str:
        return self.config.get("namespace") or self.settings.TAXONOMY_NAMESPACE

    def _settings_level_range(self) -> tuple[int, int]:
        return (self.settings.MIN_LEVEL, self.settings.MAX_LEVEL)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def create_store(self, db_connection=None) -> TermStore:
        """
        PostgreSQL store for ``db_connection``, else a shared in-memory store.

        The in-memory store is only meant for development and tests; it is
        reused across calls so that resolution and display see the same data.
        """
        if db_connection is not None:
            from venue_hierarchy.storage.postgres import PostgresTermStore

            return PostgresTermStore(db_connection)
        if self.settings.DATABASE_URL:
            logger.warning("DATABASE_URL is set but no connection was supplied; using memory store")
        if self._memory_store is None:
            self._memory_store = InMemoryTermStore()
        return self._memory_store

    def create_geocoder(self) -> Geocoder:
        if self._geocoder is None:
            self._geocoder = NominatimGeocoder(self.settings)
        return self._geocoder

    def create_normalizer(self) -> AddressNormalizer:
        return AddressNormalizer(AddressPolicy.from_config(self.config.get("address")))

    def create_builder(self, store: TermStore) -> TermGraphBuilder:
        return TermGraphBuilder(
            store,
            namespace=self.namespace,
            pre_insert_hook=self.pre_insert_hook,
            level_range_hook=self.level_range_hook,
        )

    def create_renderer(self) -> HierarchyRenderer:
        return HierarchyRenderer.from_config(
            self.config.get("display"),
            url_resolver=TermArchiveLinker(self.settings.ARCHIVE_BASE_URL),
        )

    def create_preview(self) -> HierarchyPreview:
        display = self.config.get("display") or {}
        preview = self.config.get("preview") or {}
        return HierarchyPreview(
            level_range_hook=self.level_range_hook,
            max_depth_cap=int(preview.get("max_depth", DEFAULT_MAX_DEPTH)),
            separator=display.get("separator", " > "),
            path_separator=display.get("path_separator", ", "),
        )

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def create_resolution_service(self, store: TermStore) -> LocationResolutionService:
        return LocationResolutionService(
            geocoder=self.create_geocoder(),
            builder=self.create_builder(store),
            normalizer=self.create_normalizer(),
            owning_record_type=self.settings.OWNING_RECORD_TYPE,
        )

    def create_display_service(self, store: TermStore) -> HierarchyDisplayService:
        return HierarchyDisplayService(
            store=store,
            renderer=self.create_renderer(),
            namespace=self.namespace,
            preview=self.create_preview(),
            owning_record_type=self.settings.OWNING_RECORD_TYPE,
        )
