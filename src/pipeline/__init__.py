"""
Pipeline package: the ingest and export flows.

Both entry points receive their store explicitly; nothing here holds global
database state.
"""

from src.pipeline.abstract import RecordStore
from src.pipeline.export import export_archive
from src.pipeline.ingest import ingest_archive, load_records

__all__ = [
    "RecordStore",
    "export_archive",
    "ingest_archive",
    "load_records",
]
