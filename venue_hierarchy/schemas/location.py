# venue_hierarchy/schemas/location.py
"""
Location hierarchy schemas.

Models shared by the write path (geocode -> normalise -> build chain) and the
read path (resolve paths -> window -> render). Records that describe stored
terms are frozen; the store hands out fresh instances on every read.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ============================================================================
# LEVELS
# ============================================================================


class HierarchyLevel(IntEnum):
    """Rank of a geographic entity, 1 (continent) to 6 (street + number)."""

    CONTINENT = 1
    COUNTRY = 2
    STATE = 3
    CITY = 4
    STREET = 5
    STREET_NUMBER = 6

    @property
    def label(self) -> str:
        """Human readable label used by the level slider."""
        return _LEVEL_LABELS[self]

    @property
    def field_name(self) -> str:
        """Name of the matching ``LocationLevels`` field."""
        return self.name.lower()


_LEVEL_LABELS = {
    HierarchyLevel.CONTINENT: "Continent",
    HierarchyLevel.COUNTRY: "Country",
    HierarchyLevel.STATE: "State",
    HierarchyLevel.CITY: "City",
    HierarchyLevel.STREET: "Street",
    HierarchyLevel.STREET_NUMBER: "Number",
}

MIN_LEVEL = int(HierarchyLevel.CONTINENT)
MAX_LEVEL = int(HierarchyLevel.STREET_NUMBER)

# Display windows without an explicit end show everything below the start.
DEFAULT_END_LEVEL = 999


# ============================================================================
# RESOLVED LOCATION
# ============================================================================


class LocationLevels(BaseModel):
    """
    Ordered geographic levels resolved from one geocoded address.

    Built fresh for every resolution and never persisted; it is consumed by
    the term graph builder.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "continent": "Europe",
                "country": "Germany",
                "country_code": "de",
                "state": "Bayern",
                "city": "München",
                "street": "Marienplatz",
                "street_number": "Marienplatz 8",
            }
        },
    )

    continent: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None

    def get(self, level: HierarchyLevel) -> Optional[str]:
        """Return the name stored for ``level`` (None when empty)."""
        return getattr(self, level.field_name) or None

    def as_level_pairs(self) -> Iterator[tuple[HierarchyLevel, str]]:
        """
        Yield ``(level, name)`` for every non-empty level, top-down.

        Once a level below the continent is empty, nothing further down is
        yielded: a street without a city would attach to the wrong parent.
        An empty continent is tolerated so the chain can start at country.
        """
        for level in HierarchyLevel:
            name = self.get(level)
            if name:
                yield level, name
            elif level is not HierarchyLevel.CONTINENT:
                return

    def is_empty(self) -> bool:
        """True when no level carries a name."""
        return not any(True for _ in self.as_level_pairs())


# ============================================================================
# TERM GRAPH
# ============================================================================


class TermNode(BaseModel):
    """One persisted geographic entity at one level."""

    model_config = ConfigDict(frozen=True)

    term_id: int
    name: str
    slug: str
    parent_id: Optional[int] = None
    level: int = Field(ge=MIN_LEVEL, le=MAX_LEVEL)
    namespace: str

    @field_validator("parent_id", mode="before")
    @classmethod
    def zero_parent_is_root(cls, v):
        """Stores that use 0 for "no parent" map onto None."""
        if v == 0:
            return None
        return v

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class TermDraft(BaseModel):
    """
    A term about to be created or reused by the builder.

    This is the payload handed to the pre-insert hook. ``namespace`` and
    ``level`` are restored by the builder if a hook changes them.
    """

    name: str
    slug: str
    parent_id: Optional[int] = None
    namespace: str
    level: int
    location: LocationLevels


class OwningRecordAssociation(BaseModel):
    """Links one event to the term ids of a single root-to-leaf chain."""

    owner_id: int
    namespace: str
    term_ids: list[int] = Field(default_factory=list)


# ============================================================================
# DISPLAY
# ============================================================================


class LevelWindow(BaseModel):
    """
    Inclusive, 1-based ``[start, end]`` range of levels to display.

    Values are normalised so that ``1 <= start <= end``.
    """

    model_config = ConfigDict(frozen=True)

    start: int = MIN_LEVEL
    end: int = DEFAULT_END_LEVEL

    @model_validator(mode="before")
    @classmethod
    def clamp(cls, data):
        if isinstance(data, dict):
            start = max(MIN_LEVEL, int(data.get("start", MIN_LEVEL) or MIN_LEVEL))
            end = data.get("end", DEFAULT_END_LEVEL)
            end = DEFAULT_END_LEVEL if end is None else int(end)
            data = {**data, "start": start, "end": max(start, end)}
        return data

    @classmethod
    def of(cls, start: int, end: int | None = None) -> "LevelWindow":
        return cls(start=start, end=end)


class VenueInfo(BaseModel):
    """Venue details supplied by the host event record."""

    name: Optional[str] = None
    full_address: Optional[str] = None
    permalink: Optional[str] = None


class EventRecord(BaseModel):
    """
    The owning record handed over by the host on save.

    Only the fields needed to resolve a location hierarchy are modelled.
    """

    event_id: int
    post_type: str = "event"
    venue: Optional[VenueInfo] = None
    is_autosave: bool = False


class DisplayAttributes(BaseModel):
    """Per display instance settings of the hierarchy block."""

    start_level: int = MIN_LEVEL
    end_level: int = DEFAULT_END_LEVEL
    enable_links: bool = False
    show_venue: bool = False

    @property
    def window(self) -> LevelWindow:
        return LevelWindow.of(self.start_level, self.end_level)
