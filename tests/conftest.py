"""
Shared pytest fixtures for the venue hierarchy test suite.

Provides sample Nominatim address payloads, an in-memory term store and
factories for TermNode objects and fake geocoders.
"""

from typing import Optional

import pytest

from venue_hierarchy.configs.settings import Settings
from venue_hierarchy.geocoding.address_normalizer import AddressNormalizer
from venue_hierarchy.geocoding.geocoder import GeocodeResult
from venue_hierarchy.hierarchy.builder import TermGraphBuilder
from venue_hierarchy.schemas.location import TermNode
from venue_hierarchy.storage.term_store import InMemoryTermStore

NAMESPACE = "event-location"


# =============================================================================
# Address payloads
# =============================================================================


@pytest.fixture
def munich_components():
    """Nominatim ``address`` block for Marienplatz 8, München."""
    return {
        "house_number": "8",
        "road": "Marienplatz",
        "suburb": "Altstadt-Lehel",
        "city": "München",
        "state": "Bayern",
        "postcode": "80331",
        "country": "Deutschland",
        "country_code": "de",
    }


@pytest.fixture
def berlin_components():
    """Nominatim ``address`` block for a city-state (no ``state`` key)."""
    return {
        "house_number": "1",
        "road": "Alexanderplatz",
        "suburb": "Mitte",
        "city": "Berlin",
        "postcode": "10178",
        "country": "Deutschland",
        "country_code": "de",
    }


@pytest.fixture
def munich_levels(munich_components):
    """Normalised levels for the Munich address."""
    return AddressNormalizer().normalize(munich_components)


# =============================================================================
# Stores and builders
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the environment and without rate limiting."""
    return Settings(
        _env_file=None,
        DATABASE_URL=None,
        GEOCODING_MIN_DELAY_SECONDS=0,
        GEOCODING_API_KEY=None,
    )


@pytest.fixture
def store():
    """Empty in-memory term store."""
    return InMemoryTermStore()


@pytest.fixture
def builder(store):
    """Term graph builder over the in-memory store."""
    return TermGraphBuilder(store, namespace=NAMESPACE)


@pytest.fixture
def make_term():
    """
    Return a function that creates TermNode objects with sensible defaults.

    Example:
        term = make_term(3, "Bavaria", parent_id=2, level=3)
    """

    def _make_term(
        term_id: int,
        name: str,
        parent_id: Optional[int] = None,
        level: int = 1,
        slug: Optional[str] = None,
    ) -> TermNode:
        return TermNode(
            term_id=term_id,
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            parent_id=parent_id,
            level=level,
            namespace=NAMESPACE,
        )

    return _make_term


@pytest.fixture
def conference_terms(make_term):
    """Europe > Germany > Bavaria > Munich, deliberately out of order."""
    return [
        make_term(4, "Munich", parent_id=3, level=4),
        make_term(1, "Europe", level=1),
        make_term(3, "Bavaria", parent_id=2, level=3),
        make_term(2, "Germany", parent_id=1, level=2, slug="de"),
    ]


# =============================================================================
# Fake geocoder
# =============================================================================


class FakeGeocoder:
    """Geocoder double returning canned components per address."""

    def __init__(self, responses: Optional[dict] = None):
        self.responses = responses or {}
        self.calls: list[str] = []

    def geocode(self, address: str) -> Optional[GeocodeResult]:
        self.calls.append(address)
        components = self.responses.get(address)
        if components is None:
            return None
        return GeocodeResult(
            address_components=components,
            country_code=components.get("country_code"),
        )


@pytest.fixture
def make_geocoder():
    """Return the FakeGeocoder class for tests that need custom responses."""
    return FakeGeocoder


@pytest.fixture
def fake_geocoder(munich_components, berlin_components):
    """Geocoder that knows the Munich and Berlin sample addresses."""
    return FakeGeocoder(
        {
            "Marienplatz 8, München": munich_components,
            "Alexanderplatz 1, Berlin": berlin_components,
        }
    )
