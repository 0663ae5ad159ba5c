"""
Location Resolution Service.

Runs when an event is saved: geocode the venue address, normalise the
result into levels, upsert the term chain and link it to the event.

Everything here is fail-soft. A geocoding or store failure is logged and
reported in the returned ``ResolutionResult``; the event keeps whatever
hierarchy it had before, and the next save retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer
from venue_hierarchy.geocoding.geocoder import Geocoder
from venue_hierarchy.hierarchy.builder import TermGraphBuilder
from venue_hierarchy.monitoring.logging import with_context
from venue_hierarchy.schemas.location import EventRecord, LocationLevels

logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    """Outcome of one resolution attempt."""

    RESOLVED = "resolved"
    SKIPPED = "skipped"
    GEOCODE_FAILED = "geocode_failed"
    STORE_FAILED = "store_failed"
    EMPTY = "empty"


@dataclass
class ResolutionResult:
    """What happened to one event's location hierarchy."""

    status: ResolutionStatus
    term_ids: list[int] = field(default_factory=list)
    levels: LocationLevels | None = None
    reason: str | None = None

    @property
    def success(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED


class LocationResolutionService:
    """Coordinate geocoder, normaliser and term graph builder."""

    def __init__(
        self,
        geocoder: Geocoder,
        builder: TermGraphBuilder,
        normalizer: AddressNormalizer | None = None,
        owning_record_type: str = "event",
    ) -> None:
        self.geocoder = geocoder
        self.builder = builder
        self.normalizer = normalizer or AddressNormalizer()
        self.owning_record_type = owning_record_type

    def on_event_saved(self, event: EventRecord) -> ResolutionResult:
        """
        Save hook for events.

        Autosaves, records of another type and events without a venue
        address are skipped.
        """
        if event.is_autosave:
            return ResolutionResult(ResolutionStatus.SKIPPED, reason="autosave")
        if event.post_type != self.owning_record_type:
            return ResolutionResult(
                ResolutionStatus.SKIPPED, reason=f"post type '{event.post_type}'"
            )
        address = event.venue.full_address if event.venue else None
        if not address or not address.strip():
            return ResolutionResult(ResolutionStatus.SKIPPED, reason="no venue address")
        return self.resolve_address(event.event_id, address)

    def resolve_address(self, event_id: int, address: str) -> ResolutionResult:
        """Geocode ``address`` and (re)build the hierarchy of ``event_id``."""
        log = with_context(logger, event_id=event_id, stage="resolve", address=address)

        result = self.geocoder.geocode(address)
        if result is None:
            log.error(f"Failed to geocode address for event {event_id}")
            return ResolutionResult(ResolutionStatus.GEOCODE_FAILED, reason="geocode failed")

        levels = self.normalizer.normalize(result.address_components, result.country_code)
        if levels.is_empty():
            log.warning(f"Geocoder returned no usable levels for event {event_id}")
            return ResolutionResult(ResolutionStatus.EMPTY, levels=levels)

        try:
            term_ids = self.builder.build_and_associate(event_id, levels).term_ids
        except TermStoreError as e:
            log.error(f"Failed to link location terms to event {event_id}: {e}")
            return ResolutionResult(ResolutionStatus.STORE_FAILED, levels=levels, reason=str(e))

        if not term_ids:
            return ResolutionResult(ResolutionStatus.EMPTY, levels=levels)
        return ResolutionResult(ResolutionStatus.RESOLVED, term_ids=term_ids, levels=levels)
