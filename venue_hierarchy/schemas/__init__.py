"""Location hierarchy data models."""

from .location import (
    DEFAULT_END_LEVEL,
    MAX_LEVEL,
    MIN_LEVEL,
    DisplayAttributes,
    EventRecord,
    HierarchyLevel,
    LevelWindow,
    LocationLevels,
    OwningRecordAssociation,
    TermDraft,
    TermNode,
    VenueInfo,
)

__all__ = [
    "DEFAULT_END_LEVEL",
    "MAX_LEVEL",
    "MIN_LEVEL",
    "DisplayAttributes",
    "EventRecord",
    "HierarchyLevel",
    "LevelWindow",
    "LocationLevels",
    "OwningRecordAssociation",
    "TermDraft",
    "TermNode",
    "VenueInfo",
]
