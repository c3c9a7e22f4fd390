"""Drive one extraction run: archive -> parsed entries -> provider record."""

import logging
import time
from functools import reduce
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, TypeVar

import aiofiles

from mirror_me.common import LogContext

from .archive import DEFAULT_SUPPORTED_EXTENSIONS, DecodedEntry, read_archive
from .errors import EntryParseError
from .parsers import EntryFormat, detect_format, parse_entry
from .rules import Rule, RuleSet
from .values import JsonValue

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _entry_format(entry: DecodedEntry, hierarchical: Optional[bool]) -> Optional[EntryFormat]:
    if hierarchical is None:
        return detect_format(entry.name)
    return EntryFormat.HIERARCHICAL if hierarchical else EntryFormat.DELIMITED


def _parse_matched(
    entries: Sequence[DecodedEntry],
    rule_set: RuleSet[R],
    hierarchical: Optional[bool],
    skip_malformed_entries: bool,
) -> List[Tuple[Rule[R], JsonValue]]:
    """Pair each entry that has a rule with its parsed content, in entry order."""
    matched = []
    for entry in entries:
        rule = rule_set.dispatch(entry.name)
        if rule is None:
            logger.debug(f"No {rule_set.provider} rule for {entry.path}, skipping")
            continue

        entry_format = _entry_format(entry, hierarchical)
        if entry_format is None:
            logger.debug(f"No parser for {entry.path}, skipping")
            continue

        try:
            parsed = parse_entry(entry.text, entry_format, entry.path)
        except EntryParseError as e:
            if not skip_malformed_entries:
                raise
            logger.warning(
                f"Skipping malformed entry {entry.path}: {e.message}",
                extra={"extra_fields": e.log_fields()},
            )
            continue

        logger.debug(f"Dispatching {entry.path} to rule {rule.match_name}")
        matched.append((rule, parsed))
    return matched


async def extract(
    archive: bytes,
    rule_set: RuleSet[R],
    hierarchical: Optional[bool] = None,
    supported_extensions: Sequence[str] = DEFAULT_SUPPORTED_EXTENSIONS,
    skip_malformed_entries: bool = False,
) -> R:
    """
    Extract one provider's normalized record from archive bytes.

    Entries are decoded concurrently, then parsed and folded through the
    provider's rules one at a time, in archive order, starting from an empty
    record. Entries with no matching rule are ignored.

    Args:
        archive: Archive bytes
        rule_set: Provider rule set
        hierarchical: Parse every entry as JSON (True) or delimited text
            (False); defaults to the rule set's own setting
        supported_extensions: Entry extensions to decode
        skip_malformed_entries: Log and skip entries that fail to parse
            instead of failing the run

    Returns:
        The finished (immutable) record

    Raises:
        InvalidArchiveFormat: If the archive cannot be opened
        EntryDecodeError: If a supported entry cannot be decompressed
        EntryParseError: If a matched entry is malformed and skipping is off
    """
    if hierarchical is None:
        hierarchical = rule_set.hierarchical

    with LogContext(provider=rule_set.provider):
        start = time.perf_counter()
        entries = await read_archive(archive, supported_extensions)
        matched = _parse_matched(entries, rule_set, hierarchical, skip_malformed_entries)

        record = reduce(
            lambda acc, pair: pair[0].apply(acc, pair[1]),
            matched,
            rule_set.new_record(),
        )

        logger.info(
            f"Extracted {rule_set.provider} record from {len(matched)} of {len(entries)} entries",
            extra={"extra_fields": {
                "decoded_entries": len(entries),
                "matched_entries": len(matched),
                "duration_seconds": round(time.perf_counter() - start, 3),
            }},
        )
    return record


async def extract_file(
    archive_path: Path,
    rule_set: RuleSet[R],
    hierarchical: Optional[bool] = None,
    supported_extensions: Sequence[str] = DEFAULT_SUPPORTED_EXTENSIONS,
    skip_malformed_entries: bool = False,
) -> R:
    """Read an archive file into memory and run :func:`extract` on it."""
    async with aiofiles.open(archive_path, 'rb') as f:
        data = await f.read()
    logger.debug(f"Read {len(data)} bytes from {archive_path}")
    return await extract(
        data,
        rule_set,
        hierarchical=hierarchical,
        supported_extensions=supported_extensions,
        skip_malformed_entries=skip_malformed_entries,
    )
