"""Parse decoded archive entries into records.

Delimited text with a header row becomes a list of row mappings keyed by
header names; hierarchical text (JSON) is parsed into nested dicts and lists
as is. Provider rules only ever see these two shapes.
"""

import csv
import io
import json
import logging
from enum import Enum
from typing import Dict, List, Optional

from mirror_me.common import entry_extension

from .errors import EntryParseError
from .values import JsonValue

logger = logging.getLogger(__name__)

# Same key papaparse uses for cells beyond the header width
EXTRA_FIELDS_KEY = "__parsed_extra"


class EntryFormat(Enum):
    """Supported entry text formats."""
    DELIMITED = "delimited"
    HIERARCHICAL = "hierarchical"


EXTENSION_MAP = {
    '.csv': EntryFormat.DELIMITED,
    '.json': EntryFormat.HIERARCHICAL,
}


def detect_format(name: str) -> Optional[EntryFormat]:
    """Detect entry format from its extension, None when unsupported."""
    return EXTENSION_MAP.get(entry_extension(name))


def parse_delimited(text: str, name: str = "<entry>") -> List[Dict[str, Optional[str]]]:
    """
    Parse delimited text with a header row.

    Args:
        text: Decoded entry text
        name: Entry name, used in error messages

    Returns:
        One mapping per data row, keyed by header names in header order.
        Blank lines are skipped; short rows fill missing cells with None.

    Raises:
        EntryParseError: If the text is not valid delimited text
    """
    try:
        reader = csv.DictReader(io.StringIO(text), restkey=EXTRA_FIELDS_KEY)
        return [dict(row) for row in reader]
    except csv.Error as e:
        raise EntryParseError(f"Malformed delimited text in {name}: {e}", entry=name) from e


def parse_hierarchical(text: str, name: str = "<entry>") -> JsonValue:
    """
    Parse hierarchical text into nested dicts and lists.

    Raises:
        EntryParseError: If the text is not valid JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise EntryParseError(f"Malformed JSON in {name}: {e}", entry=name, line=e.lineno) from e


def parse_entry(text: str, entry_format: EntryFormat, name: str = "<entry>") -> JsonValue:
    """Parse entry text with the strategy for ``entry_format``."""
    logger.debug(f"Parsing {name} as {entry_format.value}")
    if entry_format is EntryFormat.HIERARCHICAL:
        return parse_hierarchical(text, name)
    return parse_delimited(text, name)
