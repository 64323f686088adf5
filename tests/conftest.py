"""
Pytest configuration for the price archive service.

Provides fixtures for:
- In-memory archives and store for unit tests
- Database connection management and table cleanup for integration tests
- Settings override for integration tests
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest

from src.config import Settings
from src.infrastructure.store import SCHEMA_SQL, PriceStore
from tests.helpers import SCENARIO_ROWS, InMemoryStore, make_archive


@pytest.fixture
def scenario_archive() -> bytes:
    return make_archive(SCENARIO_ROWS)


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def unit_settings() -> Settings:
    """Settings with the default archive layout and a 1 MiB upload cap."""
    return Settings(
        _env_file=None,
        payload_name="data.csv",
        payload_extension=".csv",
        export_archive_name="prices.zip",
        max_upload_bytes=1 << 20,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("POSTGRES_HOST", "localhost"),
        db_port=int(os.getenv("POSTGRES_PORT", "5432")),
        db_user=os.getenv("POSTGRES_USER", "validator"),
        db_password=os.getenv("POSTGRES_PASSWORD", "val1dat0r"),
        db_name=os.getenv("POSTGRES_DB", "project-sem-1"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection with the schema in place.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_prices_table(db_connection: psycopg.Connection) -> Generator[None, None, None]:
    """
    Empty the prices table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE prices;")
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE prices;")


@pytest.fixture(scope="function")
def pg_store(
    test_settings: Settings, test_dsn: str, clean_prices_table: None
) -> Generator[PriceStore, None, None]:
    """
    Opened PriceStore against the test database, closed after the test.
    """
    store = PriceStore.from_settings(test_settings, dsn_override=test_dsn)
    store.open()
    try:
        yield store
    finally:
        store.close()
