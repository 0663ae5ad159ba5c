"""
Hierarchy path reconstruction.

Rebuilds root-to-leaf paths from the flat set of terms linked to one event.
Normally an event carries a single chain, but nothing stops an editor from
linking terms of several branches, so every leaf in scope gets its own path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from venue_hierarchy.schemas.location import TermNode

logger = logging.getLogger(__name__)

MAX_DEPTH = 10


def find_leaf_terms(terms: Sequence[TermNode]) -> list[TermNode]:
    """
    Terms that no other term in ``terms`` names as its parent.

    When every term is somebody's parent (a pure cycle) all terms are
    returned so the caller still has something to walk from.
    """
    parent_ids = {t.parent_id for t in terms if t.parent_id is not None}
    leaves = [t for t in terms if t.term_id not in parent_ids]
    return leaves or list(terms)


def build_term_path(
    term: TermNode,
    scope: Iterable[TermNode],
    max_depth: int = MAX_DEPTH,
) -> list[TermNode]:
    """
    Walk from ``term`` up to its root within ``scope``.

    The walk stops at a root, at a parent that is not in scope (that term is
    then treated as the root), after ``max_depth`` terms, or on the first
    revisited term. Returns terms ordered root first.
    """
    by_id = {t.term_id: t for t in scope}
    path: list[TermNode] = []
    seen: set[int] = set()
    current: TermNode | None = term

    while current is not None:
        if current.term_id in seen:
            logger.debug(f"Cycle detected at term {current.term_id}; path truncated")
            break
        if len(path) >= max_depth:
            logger.debug(f"Path from term {term.term_id} exceeds depth {max_depth}; truncated")
            break
        seen.add(current.term_id)
        path.append(current)
        if current.parent_id is None:
            break
        current = by_id.get(current.parent_id)

    path.reverse()
    return path


class HierarchyPathResolver:
    """Reconstruct one path per leaf for a set of terms."""

    def __init__(self, max_depth: int = MAX_DEPTH) -> None:
        self.max_depth = max_depth

    def resolve_paths(self, terms: Sequence[TermNode]) -> list[list[TermNode]]:
        """
        Root-to-leaf paths for every leaf in ``terms``.

        Paths are ordered by leaf level, then leaf id, so output is stable
        regardless of the order the store returned the terms in.
        """
        if not terms:
            return []
        leaves = sorted(find_leaf_terms(terms), key=lambda t: (t.level, t.term_id))
        paths = []
        for leaf in leaves:
            path = build_term_path(leaf, terms, self.max_depth)
            if path:
                paths.append(path)
        return paths

    @staticmethod
    def path_names(path: Sequence[TermNode]) -> list[str]:
        return [t.name for t in path]

    def max_path_length(self, terms: Sequence[TermNode]) -> int:
        """Length of the longest path in ``terms`` (0 when empty)."""
        return max((len(p) for p in self.resolve_paths(terms)), default=0)
