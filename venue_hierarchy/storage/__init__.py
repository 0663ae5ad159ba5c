"""
Term storage.

``InMemoryTermStore`` needs no dependencies; ``PostgresTermStore`` lives in
``venue_hierarchy.storage.postgres`` and is imported on demand.
"""

from .term_store import InMemoryTermStore, TermStore

__all__ = ["InMemoryTermStore", "TermStore"]
