"""
Codec package: the CSV and ZIP primitives shared by ingest and export.

Keep this layer free of database access; it only turns bytes into rows and back.
"""

from src.codec.archive import build_archive, open_payload, select_payload_entry
from src.codec.tabular import SCHEMA_WIDTH, encode_rows, iter_rows, write_rows

__all__ = [
    "SCHEMA_WIDTH",
    "build_archive",
    "encode_rows",
    "iter_rows",
    "open_payload",
    "select_payload_entry",
    "write_rows",
]
