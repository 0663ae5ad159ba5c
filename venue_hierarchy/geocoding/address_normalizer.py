"""
Address Normalizer.

Turns the raw address components returned by the geocoder into an ordered
``LocationLevels`` record (continent, country, state, city, street,
street + number), applying regional naming rules.

The per-level fallback chains are plain data held by ``AddressPolicy`` so that
regional policy can be changed from the YAML config without touching code.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from venue_hierarchy.geocoding.continents import continent_for
from venue_hierarchy.schemas.location import LocationLevels

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_name(value: Any) -> str:
    """
    Clean a single display name.

    Markup tags and control characters are removed and internal whitespace is
    collapsed. Casing is preserved; the result may be empty.
    """
    if value is None:
        return ""
    text = str(value)
    text = _TAG_RE.sub("", text)
    text = _CONTROL_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


@dataclass(frozen=True)
class AddressPolicy:
    """Regional rules and candidate keys, evaluated first-match-wins."""

    designated_regions: frozenset[str] = frozenset({"de", "at", "ch", "lu"})
    state_designated: tuple[str, ...] = ("state",)
    state: tuple[str, ...] = ("state", "region", "province")
    city: tuple[str, ...] = ("city", "town", "village", "county")
    city_state_district: tuple[str, ...] = ("suburb", "borough")
    street: tuple[str, ...] = ("road", "street", "pedestrian")
    house_number: tuple[str, ...] = ("house_number",)

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> "AddressPolicy":
        """
        Build a policy from the ``address`` section of the hierarchy config.

        Missing keys keep their defaults.
        """
        if not config:
            return cls()

        defaults = cls()
        fallbacks = config.get("fallbacks") or {}
        regions = config.get("designated_regions")

        def _keys(name: str) -> tuple[str, ...]:
            keys = fallbacks.get(name)
            if not keys:
                return getattr(defaults, name)
            return tuple(str(k) for k in keys)

        return cls(
            designated_regions=(
                frozenset(str(r).lower() for r in regions)
                if regions is not None
                else defaults.designated_regions
            ),
            state_designated=_keys("state_designated"),
            state=_keys("state"),
            city=_keys("city"),
            city_state_district=_keys("city_state_district"),
            street=_keys("street"),
            house_number=_keys("house_number"),
        )

    def is_designated(self, country_code: str) -> bool:
        return country_code in self.designated_regions


@dataclass
class AddressNormalizer:
    """
    Convert raw geocoder address components into ``LocationLevels``.

    Never raises: anything missing simply yields an empty level, and callers
    detect emptiness on the result.
    """

    policy: AddressPolicy = field(default_factory=AddressPolicy)

    def normalize(
        self,
        components: Mapping[str, Any] | None,
        country_code: str | None = None,
    ) -> LocationLevels:
        """
        Normalize one address.

        Args:
            components: Address mapping as returned by the geocoder
                (``country``, ``state``, ``city``, ``road``, ...)
            country_code: Originating country code; falls back to
                ``components["country_code"]``

        Returns:
            LocationLevels with trimmed, sanitised names
        """
        try:
            return self._normalize(components or {}, country_code)
        except Exception:
            logger.warning("Could not normalize address components: %r", components, exc_info=True)
            return LocationLevels()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _normalize(
        self,
        components: Mapping[str, Any],
        country_code: str | None,
    ) -> LocationLevels:
        code = sanitize_name(country_code or components.get("country_code")).lower()
        designated = self.policy.is_designated(code)

        state_keys = self.policy.state_designated if designated else self.policy.state
        state = self._first(components, state_keys)
        city = self._first(components, self.policy.city)

        # City-states (Berlin, Hamburg, Wien) have no separate state: the
        # city moves up and the district becomes the city level.
        if designated and not state and city:
            state = city
            city = self._first(components, self.policy.city_state_district)

        street = self._first(components, self.policy.street)
        house_number = self._first(components, self.policy.house_number)
        street_number = f"{street} {house_number}" if street and house_number else ""

        return LocationLevels(
            continent=continent_for(code),
            country=sanitize_name(components.get("country")) or None,
            country_code=code or None,
            state=state or None,
            city=city or None,
            street=street or None,
            street_number=street_number or None,
        )

    @staticmethod
    def _first(components: Mapping[str, Any], keys: tuple[str, ...]) -> str:
        """Return the first non-empty sanitised value among ``keys``."""
        for key in keys:
            value = sanitize_name(components.get(key))
            if value:
                return value
        return ""
