"""
Database connection factory utilities for the price archive service.

Builds the PostgreSQL DSN from settings, creates the sync connection pool owned
by the PriceStore, and provides a startup readiness probe.

Only the startup probe retries (via tenacity): once the service is running, store
faults surface immediately to the caller instead of being retried.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import Settings, get_settings
from src.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def create_pool(
    dsn: str,
    min_size: int = 1,
    max_size: int = 10,
    open: bool = False,
) -> ConnectionPool:
    """
    Create a synchronous connection pool.

    Parameters
    ----------
    dsn : str
        libpq connection string.
    min_size : int
        Minimum number of idle connections to keep.
    max_size : int
        Maximum total connections in the pool.
    open : bool
        Whether to open the pool immediately. The PriceStore opens it explicitly.
    """
    return ConnectionPool(conninfo=dsn, min_size=min_size, max_size=max_size, open=open)


def apply_statement_timeout(cur: psycopg.Cursor, timeout_ms: int) -> None:
    """
    Bound every statement of the current transaction to `timeout_ms`.

    Uses SET LOCAL, so the setting is discarded at commit or rollback and never
    leaks to the next user of a pooled connection.
    """
    if timeout_ms <= 0:
        return
    cur.execute(
        sql.SQL("SET LOCAL statement_timeout = {}").format(sql.Literal(int(timeout_ms)))
    )


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def wait_for_database(dsn: str, connect_timeout: int = 5) -> None:
    """
    Block until the database accepts connections.

    Retries up to 5 times with exponential backoff for transient connection errors.

    Raises
    ------
    psycopg.OperationalError
        If the database is still unreachable after all retry attempts.
    """
    with psycopg.connect(dsn, connect_timeout=connect_timeout) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
    log.info("Database is reachable")


__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "create_pool",
    "wait_for_database",
]
