"""
Shared test helpers: archive builders and an in-memory RecordStore.
"""

from __future__ import annotations

import io
import zipfile
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Generator, Iterator, List, Optional, Sequence

import psycopg

from src.codec.archive import build_archive
from src.codec.tabular import encode_raw_rows
from src.domain.models import IngestStats, Record
from src.errors import ExportFailedError, InsertFailedError

SCENARIO_ROWS = [
    ["1", "A", "cat1", "100.00", "2024-01-01"],
    ["2", "B", "cat2", "200.00", "2024-01-02"],
    ["3", "C", "cat1", "300.00", "2024-01-03"],
]

HEADER_LINE = "id,name,category,price,create_date"


def make_archive(
    rows: Sequence[Sequence[str]],
    payload_name: str = "data.csv",
    header: Sequence[str] = ("id", "name", "category", "price", "create_date"),
) -> bytes:
    """Build an in-memory ZIP holding one CSV with `header` and `rows`."""
    return build_archive(encode_raw_rows(rows, header=header), payload_name)


def read_entries(archive: bytes) -> Dict[str, bytes]:
    """Map entry name to content for every member of a ZIP archive."""
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def payload_lines(archive: bytes, payload_name: str = "data.csv") -> List[str]:
    return read_entries(archive)[payload_name].decode("utf-8").splitlines()


class InMemoryStore:
    """
    RecordStore fake keeping committed rows in a dict.

    `commit_batch` stages into a copy and swaps it in only when every row was
    accepted, mirroring a rolled-back transaction on failure.
    """

    def __init__(
        self, fail_on_id: Optional[int] = None, fail_read_after: Optional[int] = None
    ) -> None:
        self.rows: Dict[int, Record] = {}
        self.fail_on_id = fail_on_id
        self.fail_read_after = fail_read_after
        self.commit_calls = 0

    def commit_batch(self, records: Sequence[Record]) -> IngestStats:
        self.commit_calls += 1
        staged = dict(self.rows)
        for record in records:
            if record.id in staged:
                raise InsertFailedError(f"duplicate key value: id={record.id}")
            if record.id == self.fail_on_id:
                raise InsertFailedError(f"connection lost while inserting id={record.id}")
            staged[record.id] = record
        self.rows = staged
        return IngestStats(
            total_items=len(staged),
            total_categories=len({r.category for r in staged.values()}),
            total_price=sum((r.price for r in staged.values()), Decimal("0")),
        )

    def _iterate(self) -> Iterator[Record]:
        for position, record_id in enumerate(sorted(self.rows)):
            if self.fail_read_after is not None and position >= self.fail_read_after:
                raise ExportFailedError("connection lost during export")
            yield self.rows[record_id]

    @contextmanager
    def read_records(self) -> Generator[Iterator[Record], None, None]:
        yield self._iterate()


def fetch_table(conn: psycopg.Connection) -> List[tuple]:
    """All rows of the prices table ordered by id."""
    with conn.cursor() as cur:
        cur.execute("SELECT id, name, category, price, create_date FROM prices ORDER BY id;")
        return cur.fetchall()
