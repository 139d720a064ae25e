"""Zip archive helpers: decoding, entry reads, and root-directory stripping.

Tag archives served by GitHub wrap every file in one synthetic top-level
folder (``<repo>-<release>/``). ``strip_root_dir()`` re-encodes the archive
with that first path segment removed from every entry, so the bundle
unpacks straight into the caller's working directory.

Edge cases:
  - An archive with zero entries produces a valid empty archive.
  - An entry with no ``/`` (a top-level file) is written under an empty
    name. GitHub archives carry exactly one such entry, the root folder
    itself (``repo-1.0/`` strips to ``""``).
  - Two entries that collide after stripping abort the transform with a
    ``WriteFailure``; no partial archive is ever returned.
"""

import io
import logging
import shutil
import zipfile
import zlib

from carimbo_cdn.errors import DecodeFailure, ReadFailure, WriteFailure

logger = logging.getLogger(__name__)

SEPARATOR = "/"

_DECODE_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError)

# Corrupt data, CRC mismatch, encrypted or unsupported compression methods.
_ENTRY_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    OSError,
    RuntimeError,
    NotImplementedError,
    ValueError,
)


def open_archive(data: bytes) -> zipfile.ZipFile:
    """Open ``data`` as a zip archive.

    Raises:
        DecodeFailure: If the bytes are not a readable zip archive.
    """
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except _DECODE_ERRORS as exc:
        raise DecodeFailure(f"not a zip archive ({len(data)} bytes): {exc}", cause=exc) from exc


def read_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
    """Return the decompressed content of one entry.

    Raises:
        ReadFailure: If the entry is corrupt or cannot be decompressed.
    """
    try:
        return archive.read(info)
    except _ENTRY_ERRORS as exc:
        raise ReadFailure(f"cannot read entry {info.filename!r}: {exc}", cause=exc) from exc


def strip_first_segment(name: str) -> str:
    """Drop the first ``/``-separated segment of an entry name.

    ``"repo-1.0/src/main.lua"`` → ``"src/main.lua"``; ``"README"`` → ``""``.
    """
    return SEPARATOR.join(name.split(SEPARATOR)[1:])


def strip_root_dir(data: bytes) -> bytes:
    """Re-encode a zip archive with the top-level directory removed.

    Entry content is copied byte-for-byte; timestamps, permission bits and
    the compression method of each entry are carried over.

    Raises:
        DecodeFailure: If ``data`` is not a zip archive.
        WriteFailure: If an entry cannot be created or copied.
    """
    source = open_archive(data)
    output = io.BytesIO()
    seen: set[str] = set()

    with source, zipfile.ZipFile(output, "w") as target:
        for info in source.infolist():
            name = strip_first_segment(info.filename)
            if name in seen:
                raise WriteFailure(
                    f"duplicate entry {name!r} after stripping {info.filename!r}"
                )
            seen.add(name)

            try:
                _copy_entry(source, target, info, name)
            except _ENTRY_ERRORS as exc:
                raise WriteFailure(
                    f"cannot copy entry {info.filename!r}: {exc}", cause=exc
                ) from exc

        count = len(seen)

    logger.debug("Stripped root directory from %d archive entries", count)
    return output.getvalue()


def _copy_entry(
    source: zipfile.ZipFile,
    target: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    name: str,
) -> None:
    entry = zipfile.ZipInfo(name, date_time=info.date_time)
    entry.compress_type = info.compress_type
    entry.create_system = info.create_system
    entry.external_attr = info.external_attr
    entry.comment = info.comment

    # ZipInfo.is_dir() indexes the last character; the stripped root is "".
    if name.endswith(SEPARATOR):
        target.writestr(entry, b"")
        return

    # Sizes the zip64 decision for the streaming writer.
    entry.file_size = info.file_size
    with source.open(info) as src, target.open(entry, "w") as dst:
        shutil.copyfileobj(src, dst)
