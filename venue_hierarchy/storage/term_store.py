"""
Term store contract and in-memory implementation.

The term store holds the location forest (one namespace per taxonomy) and
the many-to-many links between events and terms. Terms are keyed by
``(namespace, slug)``; ``create`` is create-if-absent so that two writers
racing on the same slug end up sharing one row.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.schemas.location import TermNode

logger = logging.getLogger(__name__)


class TermStore(ABC):
    """Abstract hierarchical term storage."""

    @abstractmethod
    def find_by_slug(self, namespace: str, slug: str) -> TermNode | None:
        """Return the term with ``slug`` in ``namespace`` or None."""

    @abstractmethod
    def get(self, term_id: int) -> TermNode | None:
        """Return the term with ``term_id`` or None."""

    @abstractmethod
    def create(
        self,
        namespace: str,
        name: str,
        slug: str,
        parent_id: int | None,
        level: int,
    ) -> TermNode:
        """
        Create a term, or return the existing one with the same slug.

        Raises:
            TermStoreError: If the term cannot be stored
        """

    @abstractmethod
    def update_parent(self, term_id: int, parent_id: int | None) -> TermNode:
        """
        Point ``term_id`` at a new parent.

        Raises:
            TermStoreError: If the term or the new parent does not exist
        """

    @abstractmethod
    def list_children(self, namespace: str, term_id: int) -> list[TermNode]:
        """Direct children of ``term_id``, ordered by id."""

    @abstractmethod
    def list_terms(self, namespace: str) -> list[TermNode]:
        """All terms in ``namespace``, roots first then by parent and id."""

    @abstractmethod
    def associate(self, owner_id: int, namespace: str, term_ids: Iterable[int]) -> None:
        """
        Replace the owner's links in ``namespace`` with ``term_ids``.

        Raises:
            TermStoreError: If any term does not exist
        """

    @abstractmethod
    def list_associated(self, owner_id: int, namespace: str) -> list[TermNode]:
        """Terms linked to ``owner_id``, ordered by parent then id."""


def hierarchical_sort_key(term: TermNode) -> tuple[int, int, int]:
    """Order roots first, then by parent id, then by term id."""
    return (0 if term.parent_id is None else 1, term.parent_id or 0, term.term_id)


class InMemoryTermStore(TermStore):
    """
    Process-local term store.

    Used when no DATABASE_URL is configured and throughout the test suite.
    All operations are serialised by one lock.
    """

    def __init__(self) -> None:
        self._terms: dict[int, TermNode] = {}
        self._slugs: dict[tuple[str, str], int] = {}
        self._associations: dict[tuple[int, str], list[int]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def find_by_slug(self, namespace: str, slug: str) -> TermNode | None:
        with self._lock:
            term_id = self._slugs.get((namespace, slug))
            return self._terms.get(term_id) if term_id is not None else None

    def get(self, term_id: int) -> TermNode | None:
        with self._lock:
            return self._terms.get(term_id)

    def create(
        self,
        namespace: str,
        name: str,
        slug: str,
        parent_id: int | None,
        level: int,
    ) -> TermNode:
        if not slug:
            raise TermStoreError(f"Cannot create term '{name}' without a slug")
        with self._lock:
            existing = self.find_by_slug(namespace, slug)
            if existing is not None:
                return existing
            self._check_parent(namespace, parent_id)
            try:
                term = TermNode(
                    term_id=next(self._ids),
                    name=name,
                    slug=slug,
                    parent_id=parent_id,
                    level=level,
                    namespace=namespace,
                )
            except ValueError as e:
                raise TermStoreError(f"Invalid term '{name}': {e}") from e
            self._terms[term.term_id] = term
            self._slugs[(namespace, slug)] = term.term_id
            return term

    def update_parent(self, term_id: int, parent_id: int | None) -> TermNode:
        with self._lock:
            term = self._terms.get(term_id)
            if term is None:
                raise TermStoreError(f"Term {term_id} does not exist")
            self._check_parent(term.namespace, parent_id)
            if parent_id == term_id:
                raise TermStoreError(f"Term {term_id} cannot be its own parent")
            if term_id in self._ancestors(parent_id):
                raise TermStoreError(
                    f"Term {term_id} cannot be moved under its descendant {parent_id}"
                )
            updated = term.model_copy(update={"parent_id": parent_id})
            self._terms[term_id] = updated
            return updated

    def list_children(self, namespace: str, term_id: int) -> list[TermNode]:
        with self._lock:
            return sorted(
                (
                    t
                    for t in self._terms.values()
                    if t.namespace == namespace and t.parent_id == term_id
                ),
                key=lambda t: t.term_id,
            )

    def list_terms(self, namespace: str) -> list[TermNode]:
        with self._lock:
            return sorted(
                (t for t in self._terms.values() if t.namespace == namespace),
                key=hierarchical_sort_key,
            )

    def associate(self, owner_id: int, namespace: str, term_ids: Iterable[int]) -> None:
        ids = list(dict.fromkeys(term_ids))
        with self._lock:
            missing = [i for i in ids if i not in self._terms]
            if missing:
                raise TermStoreError(f"Cannot associate unknown terms {missing}")
            self._associations[(owner_id, namespace)] = ids

    def list_associated(self, owner_id: int, namespace: str) -> list[TermNode]:
        with self._lock:
            ids = self._associations.get((owner_id, namespace), [])
            terms = [self._terms[i] for i in ids if i in self._terms]
            return sorted(terms, key=hierarchical_sort_key)

    def _ancestors(self, term_id: int | None) -> set[int]:
        """``term_id`` and every term above it."""
        seen: set[int] = set()
        while term_id is not None and term_id not in seen:
            seen.add(term_id)
            term = self._terms.get(term_id)
            term_id = term.parent_id if term else None
        return seen

    def _check_parent(self, namespace: str, parent_id: int | None) -> None:
        if parent_id is None:
            return
        parent = self._terms.get(parent_id)
        if parent is None or parent.namespace != namespace:
            raise TermStoreError(f"Parent term {parent_id} does not exist in '{namespace}'")
