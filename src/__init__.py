"""
Price Archive Service - ZIP/CSV price ingest and export over PostgreSQL.

This package accepts a ZIP archive holding one CSV price list, validates every
row, commits the batch to the `prices` table in a single transaction, and reports
store-wide statistics computed inside that transaction. The inverse flow dumps
the table back into the same ZIP/CSV layout.

- `src.codec`: ZIP entry selection and CSV encode/decode
- `src.validation`: per-row field coercion
- `src.infrastructure`: connection pool and the PostgreSQL PriceStore
- `src.pipeline`: ingest and export flows
- `src.api`: Flask app exposing /api/v0/prices
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from src.config import Settings, get_settings
from src.domain.models import IngestStats, Record
from src.errors import ClientDataError, PriceArchiveError, StoreError
from src.infrastructure.store import PriceStore
from src.pipeline import RecordStore, export_archive, ingest_archive
from src.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "IngestStats",
    "Record",
    # Errors
    "ClientDataError",
    "PriceArchiveError",
    "StoreError",
    # Store and pipeline
    "PriceStore",
    "RecordStore",
    "export_archive",
    "ingest_archive",
    # Logging
    "configure_logging",
    "get_logger",
]
