"""
PostgreSQL-backed price store.

`PriceStore` owns the connection pool and exposes the two operations the pipeline
needs:

- `commit_batch`: insert a batch of records and aggregate the whole table inside
  one transaction, so the reported statistics always include the new rows.
- `read_records`: stream every record ordered by id through a server-side cursor.

The module-level `insert_records` and `compute_stats` helpers run against an open
cursor and never manage transactions themselves.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Iterator, Optional, Sequence

import psycopg
from psycopg_pool import ConnectionPool

from src.config import Settings, get_settings
from src.domain.models import IngestStats, Record
from src.errors import ExportFailedError, InsertFailedError
from src.infrastructure.db_factory import apply_statement_timeout, build_dsn, create_pool
from src.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS prices (
    id          BIGINT PRIMARY KEY,
    name        TEXT    NOT NULL,
    category    TEXT    NOT NULL,
    price       NUMERIC NOT NULL CHECK (price >= 0),
    create_date DATE    NOT NULL
);
"""

INSERT_SQL = (
    "INSERT INTO prices (id, name, category, price, create_date) "
    "VALUES (%s, %s, %s, %s, %s)"
)

STATS_SQL = """
SELECT
    COUNT(*)                 AS total_items,
    COUNT(DISTINCT category) AS total_categories,
    COALESCE(SUM(price), 0)  AS total_price
FROM prices
"""

SELECT_ALL_SQL = "SELECT id, name, category, price, create_date FROM prices ORDER BY id"

EXPORT_CURSOR_NAME = "prices_export"


def insert_records(cur: psycopg.Cursor, records: Sequence[Record]) -> int:
    """
    Insert `records` in input order on the cursor's open transaction.

    Returns the number of rows inserted. Any database error propagates; the
    caller is responsible for rolling back.
    """
    if not records:
        return 0
    cur.executemany(
        INSERT_SQL,
        [(r.id, r.name, r.category, r.price, r.created_at) for r in records],
    )
    return len(records)


def compute_stats(cur: psycopg.Cursor) -> IngestStats:
    """
    Aggregate row count, distinct categories, and price sum over the whole table.
    """
    cur.execute(STATS_SQL)
    row = cur.fetchone()
    if row is None:  # pragma: no cover - aggregate queries always return a row
        raise psycopg.DataError("statistics query returned no row")
    total_items, total_categories, total_price = row
    return IngestStats(
        total_items=total_items,
        total_categories=total_categories,
        total_price=total_price,
    )


def _batched_records(cur: psycopg.Cursor, batch_size: int) -> Iterator[Record]:
    """
    Yield records from a cursor using fetchmany batches.
    """
    while True:
        batch = cur.fetchmany(batch_size)
        if not batch:
            break
        for record_id, name, category, price, created_at in batch:
            yield Record(
                id=record_id,
                name=name,
                category=category,
                price=price,
                created_at=created_at,
            )


class PriceStore:
    """
    Store client for the `prices` table.

    The service creates one instance at startup, opens it, hands it to the HTTP
    app and CLI commands, and closes it at shutdown. The instance is safe to share
    across threads; each call borrows its own pooled connection.

    Example
    -------
        with PriceStore.from_settings(settings) as store:
            stats = store.commit_batch(records)
    """

    def __init__(
        self,
        pool: ConnectionPool,
        statement_timeout_ms: int = 0,
        export_batch_size: int = 1_000,
    ) -> None:
        self._pool = pool
        self.statement_timeout_ms = statement_timeout_ms
        self.export_batch_size = export_batch_size

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, dsn_override: Optional[str] = None
    ) -> "PriceStore":
        settings = settings or get_settings()
        pool = create_pool(
            dsn_override or build_dsn(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        return cls(
            pool,
            statement_timeout_ms=settings.db_statement_timeout_ms,
            export_batch_size=settings.export_batch_size,
        )

    def open(self, wait: bool = True, timeout: float = 30.0) -> None:
        """Open the pool; with `wait`, block until `min_size` connections are ready."""
        self._pool.open(wait=wait, timeout=timeout)
        log.info("Price store opened", extra={"pool": self._pool.name})

    def close(self) -> None:
        self._pool.close()
        log.info("Price store closed", extra={"pool": self._pool.name})

    def __enter__(self) -> "PriceStore":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def ensure_schema(self) -> None:
        """Create the `prices` table when it does not exist yet."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
        log.info("Schema ensured", extra={"table": "prices"})

    def commit_batch(self, records: Sequence[Record]) -> IngestStats:
        """
        Insert `records` and aggregate the table as one all-or-nothing unit.

        Raises
        ------
        InsertFailedError
            If any insert, the statistics query, or the commit fails. The
            transaction is rolled back and the table is left untouched.
        """
        try:
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        apply_statement_timeout(cur, self.statement_timeout_ms)
                        inserted = insert_records(cur, records)
                        stats = compute_stats(cur)
        except psycopg.Error as exc:
            log.warning(
                "Ingest transaction rolled back",
                extra={"rows": len(records), "error": str(exc)},
            )
            raise InsertFailedError(f"failed to insert prices: {exc}") from exc

        log.info(
            "Ingest transaction committed",
            extra={"rows": inserted, "total_items": stats.total_items},
        )
        return stats

    @contextmanager
    def read_records(self) -> Generator[Iterator[Record], None, None]:
        """
        Stream every record ordered by id inside a read transaction.

        The iterator is only valid inside the `with` block. A database error while
        opening or iterating is raised as ExportFailedError.
        """
        try:
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor() as setup:
                        apply_statement_timeout(setup, self.statement_timeout_ms)
                    with conn.cursor(name=EXPORT_CURSOR_NAME) as cur:
                        cur.execute(SELECT_ALL_SQL)
                        yield _batched_records(cur, self.export_batch_size)
        except psycopg.Error as exc:
            raise ExportFailedError(f"failed to read prices: {exc}") from exc


__all__ = [
    "PriceStore",
    "SCHEMA_SQL",
    "compute_stats",
    "insert_records",
]
