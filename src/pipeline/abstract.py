"""
Store interface the ingest and export pipelines depend on.

`PriceStore` implements it against PostgreSQL; tests supply in-memory fakes.
"""

from __future__ import annotations

from typing import ContextManager, Iterator, Protocol, Sequence, runtime_checkable

from src.domain.models import IngestStats, Record


@runtime_checkable
class RecordStore(Protocol):
    """
    Minimal store contract.

    Implementations must make `commit_batch` atomic: either every record is
    committed and the returned stats describe the table including them, or
    nothing is committed and InsertFailedError is raised.
    """

    def commit_batch(self, records: Sequence[Record]) -> IngestStats:
        ...

    def read_records(self) -> ContextManager[Iterator[Record]]:
        """Iterate all records ordered by id; raise ExportFailedError on read failure."""
        ...


__all__ = ["RecordStore"]
