"""
Domain package for the price archive service.

Exports the record and statistics models shared by the ingest and export flows.
Keep this package focused on data definitions and validation concerns.
"""

from src.domain.models import CSV_HEADER, IngestStats, Record

__all__ = [
    "CSV_HEADER",
    "IngestStats",
    "Record",
]
