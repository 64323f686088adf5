"""
Ingest flow: ZIP bytes in, statistics out.

    open_payload -> iter_rows -> validate_row -> PriceStore.commit_batch

The whole archive is decoded and validated before a transaction is opened, so a
bad row aborts the call without touching the database, and the transaction only
spans the row writes plus the aggregate query.
"""

from __future__ import annotations

from contextlib import closing
from typing import List, Optional

from src.codec.archive import open_payload
from src.codec.tabular import iter_rows
from src.config import Settings, get_settings
from src.domain.models import IngestStats, Record
from src.errors import ClientDataError
from src.pipeline.abstract import RecordStore
from src.utils.logging import get_logger
from src.utils.profiler import profile_block
from src.validation import validate_row

log = get_logger(__name__)


def load_records(
    data: bytes,
    payload_name: str = "data.csv",
    extension: str = ".csv",
) -> List[Record]:
    """
    Decode and validate every row of an archive.

    Stops at the first invalid row (abort-on-first-error); the entry stream is
    released on every exit path.

    Raises
    ------
    ClientDataError
        Any of the archive, header, row, or field errors.
    """
    records: List[Record] = []
    with open_payload(data, payload_name, extension) as stream:
        with closing(iter_rows(stream)) as rows:
            for line_number, fields in rows:
                records.append(validate_row(fields, line_number))
    return records


def ingest_archive(
    data: bytes,
    store: RecordStore,
    settings: Optional[Settings] = None,
) -> IngestStats:
    """
    Validate an uploaded archive and commit its rows atomically.

    Parameters
    ----------
    data : bytes
        Fully buffered ZIP archive.
    store : RecordStore
        Store client; `commit_batch` supplies the transaction.
    settings : Settings | None
        Payload naming; defaults to the cached settings.

    Returns
    -------
    IngestStats
        Grand totals over the whole table, taken inside the insert transaction.
    """
    settings = settings or get_settings()
    log.info("[INGEST START]", extra={"archive_bytes": len(data)})

    with profile_block("ingest") as stats:
        try:
            records = load_records(data, settings.payload_name, settings.payload_extension)
        except ClientDataError as exc:
            log.warning(
                "[INGEST REJECTED] %s", exc.message, extra={"error_type": type(exc).__name__}
            )
            raise
        summary = store.commit_batch(records)

    log.info(
        "[INGEST COMPLETE]",
        extra={
            "rows": len(records),
            "total_items": summary.total_items,
            "total_categories": summary.total_categories,
            **stats.as_log_extra(),
        },
    )
    return summary


__all__ = ["ingest_archive", "load_records"]
