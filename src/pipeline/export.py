"""
Export flow: the whole store out as a ZIP holding one CSV.

    PriceStore.read_records -> write_rows -> build_archive

The CSV is assembled in memory and only packaged once the read finished, so a
failed read never yields a truncated archive.
"""

from __future__ import annotations

import io
from typing import Optional

from src.codec.archive import build_archive
from src.codec.tabular import write_rows
from src.config import Settings, get_settings
from src.pipeline.abstract import RecordStore
from src.utils.logging import get_logger
from src.utils.profiler import profile_block

log = get_logger(__name__)


def export_archive(store: RecordStore, settings: Optional[Settings] = None) -> bytes:
    """
    Serialize every stored record, ordered by id, into a ZIP archive.

    Raises
    ------
    ExportFailedError
        If the store read fails at any point; no bytes are returned.
    """
    settings = settings or get_settings()
    buffer = io.BytesIO()

    with profile_block("export") as stats:
        with store.read_records() as records:
            rows = write_rows(buffer, records)
        archive = build_archive(buffer.getvalue(), settings.payload_name)

    log.info(
        "[EXPORT COMPLETE]",
        extra={"rows": rows, "archive_bytes": len(archive), **stats.as_log_extra()},
    )
    return archive


__all__ = ["export_archive"]
