"""
ZIP container primitives.

`open_payload` locates the single CSV entry inside an uploaded archive and exposes
it as a byte stream scoped to a `with` block. `build_archive` does the reverse for
exports. Both operate purely in memory.
"""

from __future__ import annotations

import io
import zipfile
import zlib
from contextlib import contextmanager
from typing import BinaryIO, Generator, Iterable, Optional

from src.errors import ArchiveCorruptError, EmptyInputError, PayloadNotFoundError
from src.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_PAYLOAD_NAME = "data.csv"
DEFAULT_PAYLOAD_EXTENSION = ".csv"


def select_payload_entry(
    names: Iterable[str],
    payload_name: str = DEFAULT_PAYLOAD_NAME,
    extension: str = DEFAULT_PAYLOAD_EXTENSION,
) -> Optional[str]:
    """
    Pick the entry to ingest from a list of archive member names.

    An exact match on `payload_name` wins; otherwise the first file entry whose
    name ends with `extension` (case-insensitive) is used. Directory entries are
    never selected. Returns None when nothing qualifies.
    """
    fallback: Optional[str] = None
    suffix = extension.lower()
    for name in names:
        if name.endswith("/"):
            continue
        if name == payload_name:
            return name
        if fallback is None and name.lower().endswith(suffix):
            fallback = name
    return fallback


@contextmanager
def open_payload(
    data: bytes,
    payload_name: str = DEFAULT_PAYLOAD_NAME,
    extension: str = DEFAULT_PAYLOAD_EXTENSION,
) -> Generator[BinaryIO, None, None]:
    """
    Open the CSV payload of an in-memory ZIP archive.

    Parameters
    ----------
    data : bytes
        Raw archive bytes, fully buffered.
    payload_name : str
        Canonical entry name preferred over any other candidate.
    extension : str
        Fallback suffix used when the canonical entry is absent.

    Raises
    ------
    EmptyInputError
        If `data` is empty.
    ArchiveCorruptError
        If `data` is not a ZIP archive, or the entry fails to decompress while
        being read inside the `with` block.
    PayloadNotFoundError
        If no entry matches the selection rule.
    """
    if not data:
        raise EmptyInputError("archive is empty")

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ArchiveCorruptError(f"failed to read zip archive: {exc}") from exc

    with archive:
        entry = select_payload_entry(archive.namelist(), payload_name, extension)
        if entry is None:
            raise PayloadNotFoundError(
                f"{payload_name} (or any *{extension} file) not found in archive"
            )
        log.debug("Selected archive entry", extra={"entry": entry, "archive_bytes": len(data)})

        try:
            stream = archive.open(entry)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as exc:
            raise ArchiveCorruptError(f"failed to open {entry}: {exc}") from exc

        with stream:
            try:
                yield stream
            except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
                raise ArchiveCorruptError(f"failed to decompress {entry}: {exc}") from exc


def build_archive(payload: bytes, payload_name: str = DEFAULT_PAYLOAD_NAME) -> bytes:
    """
    Package `payload` as the single entry of a fresh deflated ZIP archive.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(payload_name, payload)
    return buffer.getvalue()


__all__ = [
    "DEFAULT_PAYLOAD_EXTENSION",
    "DEFAULT_PAYLOAD_NAME",
    "build_archive",
    "open_payload",
    "select_payload_entry",
]
