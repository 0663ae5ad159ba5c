"""
Exception types for the venue hierarchy service.

Only failures that cross a component boundary are modelled as exceptions.
Empty windows, scope mismatches and truncated paths are ordinary return
values handled by the rendering layer.
"""


class VenueHierarchyError(Exception):
    """Base class for all venue hierarchy errors."""


class GeocodeFailure(VenueHierarchyError):
    """The geocoding provider failed, timed out or returned nothing usable."""

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"Geocoding failed for '{address}': {reason}")


class TermStoreError(VenueHierarchyError):
    """A create, update or association call against the term store failed."""
