"""
Venue Geocoder.

Resolves a free-text venue address into raw address components via
Nominatim (through geopy). Calls are rate-limited, bounded by a timeout and
cached by address for a fixed duration.

Geocoding is fail-soft: any provider error is logged and reported as
``None`` so the caller can leave existing hierarchy terms untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from venue_hierarchy.configs.settings import Settings, get_settings
from venue_hierarchy.exceptions import GeocodeFailure
from venue_hierarchy.geocoding.address_normalizer import sanitize_name
from venue_hierarchy.geocoding.cache import TTLCache, cache_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """Raw address components for one geocoded address."""

    address_components: dict[str, Any] = field(default_factory=dict)
    country_code: str | None = None
    display_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class Geocoder(Protocol):
    """Narrow contract consumed by the resolution service."""

    def geocode(self, address: str) -> GeocodeResult | None: ...


class NominatimGeocoder:
    """
    Geocode addresses via Nominatim.

    The geopy client is created lazily so that constructing the service has
    no network side effects.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: TTLCache[GeocodeResult] | None = None,
        client: Any | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else TTLCache(self.settings.GEOCODE_CACHE_TTL)
        self._geocoder = client
        self._rate_limiter = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def geocode(self, address: str) -> GeocodeResult | None:
        """
        Geocode ``address``.

        Returns ``None`` for empty input and on any provider failure.
        """
        address = sanitize_name(address)
        if not address:
            return None

        key = cache_key(address)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Geocode cache hit for address: %s", address)
            return cached

        try:
            result = self._lookup(address)
        except GeocodeFailure as e:
            logger.warning(str(e))
            return None

        self.cache.set(key, result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lookup(self, address: str) -> GeocodeResult:
        try:
            location = self._get_rate_limiter()(
                address,
                exactly_one=True,
                addressdetails=True,
                timeout=self.settings.GEOCODING_TIMEOUT,
            )
        except GeopyError as e:
            raise GeocodeFailure(address, f"{type(e).__name__}: {e}") from e

        if location is None:
            raise GeocodeFailure(address, "no result")

        raw = getattr(location, "raw", None) or {}
        components = raw.get("address")
        if not isinstance(components, dict) or not components:
            raise GeocodeFailure(address, "result has no address details")

        return GeocodeResult(
            address_components=dict(components),
            country_code=(components.get("country_code") or "").lower() or None,
            display_name=raw.get("display_name"),
            latitude=getattr(location, "latitude", None),
            longitude=getattr(location, "longitude", None),
        )

    def _get_geocoder(self):
        """Lazy-initialize the Nominatim client."""
        if self._geocoder is None:
            self._geocoder = Nominatim(
                user_agent=self.settings.geocoder_user_agent,
                domain=self.settings.NOMINATIM_DOMAIN,
                timeout=self.settings.GEOCODING_TIMEOUT,
            )
        return self._geocoder

    def _get_rate_limiter(self):
        """Lazy-initialize rate limiter (1 req/sec for Nominatim ToS)."""
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(
                self._get_geocoder().geocode,
                min_delay_seconds=self.settings.GEOCODING_MIN_DELAY_SECONDS,
                max_retries=0,
                swallow_exceptions=False,
            )
        return self._rate_limiter
