"""
Integration tests for the price archive pipeline against PostgreSQL.

These tests run against a real PostgreSQL instance and verify that:
1. Ingest commits all rows and reports statistics computed by the database
2. A failing batch leaves the table exactly as it was
3. Export reproduces the stored rows and round-trips through ingest
4. The HTTP endpoints work end to end

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
from datetime import date
from decimal import Decimal

import psycopg
import pytest

from src.api.app import PRICES_ROUTE, create_app
from src.errors import InsertFailedError, InvalidPriceError
from src.pipeline.export import export_archive
from src.pipeline.ingest import ingest_archive
from src.infrastructure.store import PriceStore
from scripts import generate_data
from tests.helpers import HEADER_LINE, SCENARIO_ROWS, fetch_table, make_archive, payload_lines

GENERATED_ROWS = 2_500
GENERATED_SEED = 321

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


def _sql_stats(conn: psycopg.Connection) -> tuple:
    with conn.cursor() as cur:
        cur.execute(
            "SELECT COUNT(*), COUNT(DISTINCT category), COALESCE(SUM(price), 0) FROM prices;"
        )
        return cur.fetchone()


class TestIngest:
    """Ingest against a real table."""

    def test_scenario_into_empty_table(self, pg_store: PriceStore, db_connection, test_settings):
        stats = ingest_archive(make_archive(SCENARIO_ROWS), pg_store, test_settings)

        assert stats.total_items == 3
        assert stats.total_categories == 2
        assert stats.total_price == Decimal("600.00")
        assert fetch_table(db_connection) == [
            (1, "A", "cat1", Decimal("100.00"), date(2024, 1, 1)),
            (2, "B", "cat2", Decimal("200.00"), date(2024, 1, 2)),
            (3, "C", "cat1", Decimal("300.00"), date(2024, 1, 3)),
        ]

    @pytest.mark.slow
    def test_stats_match_table_aggregates(self, pg_store: PriceStore, db_connection, test_settings):
        ingest_archive(make_archive(SCENARIO_ROWS), pg_store, test_settings)
        archive = generate_data._generate_archive(GENERATED_ROWS, GENERATED_SEED, start_id=1_000)

        stats = ingest_archive(archive, pg_store, test_settings)

        count, categories, total = _sql_stats(db_connection)
        assert stats.total_items == count == GENERATED_ROWS + 3
        assert stats.total_categories == categories
        assert stats.total_price == total

    def test_duplicate_id_rolls_back_batch(
        self, pg_store: PriceStore, db_connection, test_settings
    ):
        ingest_archive(make_archive(SCENARIO_ROWS), pg_store, test_settings)
        before = fetch_table(db_connection)

        rows = [["50", "New", "cat9", "5.00", "2024-06-01"], SCENARIO_ROWS[1]]
        with pytest.raises(InsertFailedError):
            ingest_archive(make_archive(rows), pg_store, test_settings)

        assert fetch_table(db_connection) == before

    def test_invalid_row_never_touches_table(
        self, pg_store: PriceStore, db_connection, test_settings
    ):
        rows = [list(row) for row in SCENARIO_ROWS]
        rows[2][3] = "-3"

        with pytest.raises(InvalidPriceError):
            ingest_archive(make_archive(rows), pg_store, test_settings)

        assert fetch_table(db_connection) == []

    def test_store_usable_after_failed_batch(self, pg_store: PriceStore, test_settings):
        ingest_archive(make_archive(SCENARIO_ROWS[:1]), pg_store, test_settings)
        with pytest.raises(InsertFailedError):
            ingest_archive(make_archive(SCENARIO_ROWS), pg_store, test_settings)

        stats = ingest_archive(make_archive(SCENARIO_ROWS[1:]), pg_store, test_settings)

        assert stats.total_items == 3


class TestExport:
    """Export against a real table."""

    def test_empty_table_exports_header_only(self, pg_store: PriceStore, test_settings):
        assert payload_lines(export_archive(pg_store, test_settings)) == [HEADER_LINE]

    def test_export_lists_rows_by_id(self, pg_store: PriceStore, test_settings):
        shuffled = [SCENARIO_ROWS[2], SCENARIO_ROWS[0], SCENARIO_ROWS[1]]
        ingest_archive(make_archive(shuffled), pg_store, test_settings)

        lines = payload_lines(export_archive(pg_store, test_settings))

        assert lines == [HEADER_LINE] + [",".join(row) for row in SCENARIO_ROWS]

    def test_export_is_idempotent(self, pg_store: PriceStore, test_settings):
        ingest_archive(make_archive(SCENARIO_ROWS), pg_store, test_settings)

        first = payload_lines(export_archive(pg_store, test_settings))
        second = payload_lines(export_archive(pg_store, test_settings))

        assert first == second

    @pytest.mark.slow
    def test_round_trip_reproduces_table(self, pg_store: PriceStore, db_connection, test_settings):
        archive = generate_data._generate_archive(GENERATED_ROWS, GENERATED_SEED)
        ingest_archive(archive, pg_store, test_settings)
        original = fetch_table(db_connection)
        exported = export_archive(pg_store, test_settings)

        with db_connection.cursor() as cur:
            cur.execute("TRUNCATE TABLE prices;")
        stats = ingest_archive(exported, pg_store, test_settings)

        assert fetch_table(db_connection) == original
        assert stats.total_items == GENERATED_ROWS


class TestHttp:
    """Flask endpoints backed by PostgreSQL."""

    def test_upload_then_download(self, pg_store: PriceStore, test_settings):
        client = create_app(pg_store, test_settings).test_client()

        upload = client.post(PRICES_ROUTE, data=make_archive(SCENARIO_ROWS))
        download = client.get(PRICES_ROUTE)

        assert upload.status_code == 200
        assert upload.get_json() == {"total_items": 3, "total_categories": 2, "total_price": 600.0}
        assert download.status_code == 200
        assert payload_lines(download.data)[1:] == [",".join(row) for row in SCENARIO_ROWS]

    def test_duplicate_upload_is_server_error(self, pg_store: PriceStore, test_settings):
        client = create_app(pg_store, test_settings).test_client()
        client.post(PRICES_ROUTE, data=make_archive(SCENARIO_ROWS))

        response = client.post(PRICES_ROUTE, data=make_archive(SCENARIO_ROWS))

        assert response.status_code == 500
