"""
Geocoding and address normalisation.

Usage:
    from venue_hierarchy.geocoding import NominatimGeocoder, AddressNormalizer

    result = NominatimGeocoder().geocode("Marienplatz 8, München")
    levels = AddressNormalizer().normalize(result.address_components, result.country_code)
"""

from .address_normalizer import AddressNormalizer, AddressPolicy, sanitize_name
from .cache import TTLCache, cache_key
from .continents import continent_for
from .geocoder import GeocodeResult, Geocoder, NominatimGeocoder

__all__ = [
    "AddressNormalizer",
    "AddressPolicy",
    "GeocodeResult",
    "Geocoder",
    "NominatimGeocoder",
    "TTLCache",
    "cache_key",
    "continent_for",
    "sanitize_name",
]
