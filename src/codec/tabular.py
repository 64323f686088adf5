"""
CSV encode/decode primitives for the price payload.

Decoding is lazy: `iter_rows` yields one raw 5-field tuple per data line and never
materializes the file. The header line is consumed and only its width is checked.

Usage:
    with open_payload(data) as stream:
        for line_number, fields in iter_rows(stream):
            ...
"""

from __future__ import annotations

import csv
import io
from typing import BinaryIO, Iterable, Iterator, List, Sequence, Tuple

from src.domain.models import CSV_HEADER, Record
from src.errors import HeaderInvalidError, RowMalformedError

SCHEMA_WIDTH = len(CSV_HEADER)

RawRow = Tuple[str, str, str, str, str]


class _PhysicalLines:
    """
    Decode a byte stream one physical line at a time.

    `line_number` is the 1-based number of the last line handed out, so a decode
    failure can be pinned to the exact line holding the bad bytes.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._raw = iter(stream)
        self._pending: List[bytes] = []
        self.line_number = 0

    def __iter__(self) -> "_PhysicalLines":
        return self

    def __next__(self) -> str:
        if not self._pending:
            # Byte iteration only splits on \n; a lone \r also ends a line.
            self._pending = next(self._raw).splitlines(keepends=True)
        chunk = self._pending.pop(0)
        self.line_number += 1
        # utf-8-sig drops a leading BOM written by spreadsheet exports.
        return chunk.decode("utf-8-sig" if self.line_number == 1 else "utf-8")


def iter_rows(stream: BinaryIO) -> Iterator[Tuple[int, RawRow]]:
    """
    Yield `(line_number, fields)` for each data record of a CSV byte stream.

    Parameters
    ----------
    stream : BinaryIO
        Readable byte stream positioned at the start of the CSV payload. The
        caller owns it; it is never closed here.

    Returns
    -------
    Iterator[Tuple[int, RawRow]]
        `line_number` is the physical line the record starts on, so a quoted
        field spanning several lines reports its first line.

    Raises
    ------
    HeaderInvalidError
        If the payload is empty or the header does not have five fields.
    RowMalformedError
        For a record with the wrong field count, unterminated quoting, or bytes
        that are not valid UTF-8.
    """
    lines = _PhysicalLines(stream)
    reader = csv.reader(lines, strict=True)
    try:
        header = next(reader, None)
    except (csv.Error, UnicodeDecodeError) as exc:
        raise HeaderInvalidError(f"unreadable CSV header: {exc}") from exc
    if header is None:
        raise HeaderInvalidError("CSV payload is empty; expected a header line")
    if len(header) != SCHEMA_WIDTH:
        raise HeaderInvalidError(f"CSV header has {len(header)} fields, expected {SCHEMA_WIDTH}")

    while True:
        start_line = reader.line_num + 1
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise RowMalformedError(str(exc), line_number=start_line) from exc
        except UnicodeDecodeError as exc:
            raise RowMalformedError(
                f"payload is not valid UTF-8: {exc.reason}", line_number=lines.line_number
            ) from exc

        if not fields:
            continue
        if len(fields) != SCHEMA_WIDTH:
            raise RowMalformedError(
                f"expected {SCHEMA_WIDTH} fields, got {len(fields)}",
                line_number=start_line,
            )
        yield start_line, tuple(fields)  # type: ignore[misc]


def write_rows(stream: BinaryIO, records: Iterable[Record]) -> int:
    """
    Write the canonical header followed by one line per record.

    Returns the number of data rows written.
    """
    text = io.TextIOWrapper(stream, encoding="utf-8", newline="")
    written = 0
    try:
        writer = csv.writer(text, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow(record.to_row())
            written += 1
    finally:
        text.detach()
    return written


def encode_rows(records: Iterable[Record]) -> bytes:
    """Serialize records to CSV bytes in memory."""
    buffer = io.BytesIO()
    write_rows(buffer, records)
    return buffer.getvalue()


def encode_raw_rows(rows: Iterable[Sequence[str]], header: Sequence[str] = CSV_HEADER) -> bytes:
    """Serialize arbitrary string rows (used to build fixtures and sample data)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


__all__ = [
    "RawRow",
    "SCHEMA_WIDTH",
    "encode_raw_rows",
    "encode_rows",
    "iter_rows",
    "write_rows",
]
