"""Read export archives into decoded text entries."""

import asyncio
import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from mirror_me.common import entry_basename, entry_extension

from .errors import EntryDecodeError, InvalidArchiveFormat

logger = logging.getLogger(__name__)

DEFAULT_SUPPORTED_EXTENSIONS = ('.csv', '.json')


@dataclass(frozen=True)
class ArchiveEntry:
    """Raw archive member, alive only while an archive is being read."""
    path: str
    is_directory: bool
    raw_content: bytes


@dataclass(frozen=True)
class DecodedEntry:
    """Archive member decoded to text, named by its basename."""
    name: str
    path: str
    text: str


def open_archive(data: bytes) -> zipfile.ZipFile:
    """Open in-memory archive bytes.

    Raises:
        InvalidArchiveFormat: If the bytes are not a valid zip archive
    """
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        raise InvalidArchiveFormat(f"Invalid format: {e}", size=len(data)) from e


def select_members(archive: zipfile.ZipFile, supported_extensions: Iterable[str]) -> List[zipfile.ZipInfo]:
    """Return non-directory members with a supported extension, in archive order."""
    extensions = {ext.lower() for ext in supported_extensions}
    selected = []
    for info in archive.infolist():
        if info.is_dir():
            continue
        if entry_extension(info.filename) in extensions:
            selected.append(info)
        else:
            logger.debug(f"Ignoring unsupported entry: {info.filename}")
    return selected


def load_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> ArchiveEntry:
    """Read one member's raw bytes.

    Raises:
        EntryDecodeError: If the member cannot be decompressed
    """
    try:
        raw = archive.read(info)
    except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, OSError) as e:
        raise EntryDecodeError(f"Failed to read {info.filename}: {e}", entry=info.filename) from e
    return ArchiveEntry(path=info.filename, is_directory=info.is_dir(), raw_content=raw)


def decode_entry(entry: ArchiveEntry) -> DecodedEntry:
    """Decode an entry's bytes as UTF-8 text (a leading BOM is dropped).

    Invalid byte sequences become U+FFFD, so a stray non-UTF-8 file never
    fails the batch; affected fields simply carry replacement characters.
    """
    text = entry.raw_content.decode('utf-8-sig', errors='replace')
    if '\ufffd' in text:
        logger.warning(
            f"Entry {entry.path} is not valid UTF-8, undecodable bytes replaced",
            extra={"extra_fields": {"entry": entry.path}},
        )
    return DecodedEntry(name=entry_basename(entry.path), path=entry.path, text=text)


def _read_text(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> DecodedEntry:
    return decode_entry(load_entry(archive, info))


async def read_archive(
    data: bytes,
    supported_extensions: Sequence[str] = DEFAULT_SUPPORTED_EXTENSIONS,
) -> List[DecodedEntry]:
    """
    Decode every supported entry of an archive.

    Each kept entry is decoded in its own worker thread; all of them are
    awaited before returning, and the first failure fails the whole batch.

    Args:
        data: Archive bytes
        supported_extensions: Extensions to keep (case-insensitive)

    Returns:
        Decoded entries in archive enumeration order

    Raises:
        InvalidArchiveFormat: If the bytes are not a valid archive
        EntryDecodeError: If any kept entry cannot be decompressed
    """
    with open_archive(data) as archive:
        members = select_members(archive, supported_extensions)
        logger.debug(
            f"Decoding {len(members)} of {len(archive.infolist())} archive entries",
            extra={"extra_fields": {"kept_entries": len(members)}},
        )
        # Join every task before the archive closes, then surface the first failure
        results = await asyncio.gather(
            *(asyncio.to_thread(_read_text, archive, info) for info in members),
            return_exceptions=True,
        )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
