"""
PostgreSQL Term Store.

Persists the location forest and event/term links in two tables. Every
mutating call runs in its own transaction so that a failure part-way through
a chain leaves the already committed terms in place; re-running the chain
picks up where it stopped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import psycopg2
from psycopg2.extras import execute_values

from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.schemas.location import TermNode
from venue_hierarchy.storage.term_store import TermStore

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS location_terms (
    term_id     SERIAL PRIMARY KEY,
    namespace   TEXT NOT NULL,
    name        TEXT NOT NULL,
    slug        TEXT NOT NULL,
    parent_id   INTEGER REFERENCES location_terms (term_id) ON DELETE SET NULL,
    level       SMALLINT NOT NULL CHECK (level BETWEEN 1 AND 6),
    UNIQUE (namespace, slug)
);

CREATE INDEX IF NOT EXISTS location_terms_parent_idx
    ON location_terms (namespace, parent_id);

CREATE TABLE IF NOT EXISTS event_location_terms (
    event_id    BIGINT NOT NULL,
    namespace   TEXT NOT NULL,
    term_id     INTEGER NOT NULL REFERENCES location_terms (term_id) ON DELETE CASCADE,
    position    SMALLINT NOT NULL,
    PRIMARY KEY (event_id, namespace, term_id)
);
"""

# Walks up from the proposed parent; a hit means the move would close a cycle.
_ANCESTOR_CHECK_SQL = """
WITH RECURSIVE ancestors (term_id, parent_id) AS (
    SELECT term_id, parent_id FROM location_terms WHERE term_id = %s
    UNION
    SELECT t.term_id, t.parent_id
    FROM location_terms t JOIN ancestors a ON t.term_id = a.parent_id
)
SELECT 1 FROM ancestors WHERE term_id = %s
"""
_DESCENDANT_PARENT = object()

_TERM_COLUMNS ="t.term_id, t.name, t.slug, t.parent_id, t.level, t.namespace"
_HIERARCHICAL_ORDER = "ORDER BY t.parent_id ASC NULLS FIRST, t.term_id ASC"


def _row_to_term(row) -> TermNode:
    return TermNode(
        term_id=row[0],
        name=row[1],
        slug=row[2],
        parent_id=row[3],
        level=row[4],
        namespace=row[5],
    )


class PostgresTermStore(TermStore):
    """
    Term store backed by an active psycopg2 connection.

    The connection is owned by the caller (typically borrowed from a pool for
    the duration of one request).
    """

    def __init__(self, db_connection) -> None:
        """Initialize with an active psycopg2 connection."""
        self.conn = db_connection

    def ensure_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        self._write(lambda cur: cur.execute(SCHEMA_SQL), "create schema")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_slug(self, namespace: str, slug: str) -> TermNode | None:
        rows = self._read(
            f"SELECT {_TERM_COLUMNS} FROM location_terms t "
            "WHERE t.namespace = %s AND t.slug = %s",
            (namespace, slug),
        )
        return _row_to_term(rows[0]) if rows else None

    def get(self, term_id: int) -> TermNode | None:
        rows = self._read(
            f"SELECT {_TERM_COLUMNS} FROM location_terms t WHERE t.term_id = %s",
            (term_id,),
        )
        return _row_to_term(rows[0]) if rows else None

    def list_children(self, namespace: str, term_id: int) -> list[TermNode]:
        rows = self._read(
            f"SELECT {_TERM_COLUMNS} FROM location_terms t "
            "WHERE t.namespace = %s AND t.parent_id = %s ORDER BY t.term_id",
            (namespace, term_id),
        )
        return [_row_to_term(r) for r in rows]

    def list_terms(self, namespace: str) -> list[TermNode]:
        rows = self._read(
            f"SELECT {_TERM_COLUMNS} FROM location_terms t "
            f"WHERE t.namespace = %s {_HIERARCHICAL_ORDER}",
            (namespace,),
        )
        return [_row_to_term(r) for r in rows]

    def list_associated(self, owner_id: int, namespace: str) -> list[TermNode]:
        rows = self._read(
            f"SELECT {_TERM_COLUMNS} FROM location_terms t "
            "JOIN event_location_terms e ON e.term_id = t.term_id "
            f"WHERE e.event_id = %s AND e.namespace = %s {_HIERARCHICAL_ORDER}",
            (owner_id, namespace),
        )
        return [_row_to_term(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

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

        def _insert(cur):
            # A concurrent writer may have inserted the same slug; the
            # follow-up SELECT then returns its row instead of a duplicate.
            cur.execute(
                """
                INSERT INTO location_terms (namespace, name, slug, parent_id, level)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (namespace, slug) DO NOTHING
                """,
                (namespace, name, slug, parent_id, level),
            )
            cur.execute(
                f"SELECT {_TERM_COLUMNS} FROM location_terms t "
                "WHERE t.namespace = %s AND t.slug = %s",
                (namespace, slug),
            )
            return cur.fetchone()

        row = self._write(_insert, f"create term '{name}'")
        if row is None:
            raise TermStoreError(f"Term '{name}' ({slug}) was not stored")
        return _row_to_term(row)

    def update_parent(self, term_id: int, parent_id: int | None) -> TermNode:
        if parent_id == term_id:
            raise TermStoreError(f"Term {term_id} cannot be its own parent")

        def _update(cur):
            if parent_id is not None:
                cur.execute(_ANCESTOR_CHECK_SQL, (parent_id, term_id))
                if cur.fetchone() is not None:
                    return _DESCENDANT_PARENT
            cur.execute(
                f"""
                UPDATE location_terms t SET parent_id = %s
                WHERE t.term_id = %s
                RETURNING {_TERM_COLUMNS}
                """,
                (parent_id, term_id),
            )
            return cur.fetchone()

        row = self._write(_update, f"update parent of term {term_id}")
        if row is _DESCENDANT_PARENT:
            raise TermStoreError(
                f"Term {term_id} cannot be moved under its descendant {parent_id}"
            )
        if row is None:
            raise TermStoreError(f"Term {term_id} does not exist")
        return _row_to_term(row)

    def associate(self, owner_id: int, namespace: str, term_ids: Iterable[int]) -> None:
        ids = list(dict.fromkeys(term_ids))

        def _replace(cur):
            cur.execute(
                "DELETE FROM event_location_terms WHERE event_id = %s AND namespace = %s",
                (owner_id, namespace),
            )
            if ids:
                execute_values(
                    cur,
                    """
                    INSERT INTO event_location_terms (event_id, namespace, term_id, position)
                    VALUES %s
                    """,
                    [(owner_id, namespace, term_id, pos) for pos, term_id in enumerate(ids)],
                )

        self._write(_replace, f"associate terms with event {owner_id}")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _read(self, sql: str, params: tuple) -> list:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
            self.conn.commit()
            return rows
        except psycopg2.Error as e:
            self.conn.rollback()
            raise TermStoreError(f"Term store read failed: {e}") from e

    def _write(self, operation, description: str):
        try:
            with self.conn.cursor() as cur:
                result = operation(cur)
            self.conn.commit()
            return result
        except psycopg2.Error as e:
            self.conn.rollback()
            logger.error(f"Failed to {description}: {e}")
            raise TermStoreError(f"Failed to {description}: {e}") from e
