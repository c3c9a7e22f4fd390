"""Lookup primitives over parsed export content.

Parsed content uses Python's JSON value types (``JsonValue``). Rules never
cast optimistically: the ``as_*`` accessors return ``None`` on a shape
mismatch, and every lookup treats a missing key as absent rather than an
error.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def as_mapping(value: JsonValue) -> Optional[Mapping[str, Any]]:
    """Return value if it is a mapping, else None."""
    return value if isinstance(value, Mapping) else None


def as_list(value: JsonValue) -> Optional[List[Any]]:
    """Return value if it is a list, else None."""
    return value if isinstance(value, list) else None


def first(value: JsonValue) -> JsonValue:
    """Return the first element of a non-empty list, else None."""
    items = as_list(value)
    return items[0] if items else None


def get_values(record: JsonValue, keys: Iterable[str]) -> List[Any]:
    """
    Return the values of ``record`` whose keys are in ``keys``.

    Values come back in the record's own key order, not the order of
    ``keys``. Keys absent from the record are skipped silently, and a
    record that is not a mapping yields an empty list.

    Args:
        record: Parsed record (mapping)
        keys: Key names to look up

    Returns:
        List of matching values
    """
    mapping = as_mapping(record)
    if mapping is None:
        return []
    wanted = set(keys)
    return [value for key, value in mapping.items() if key in wanted]


def get_value(record: JsonValue, key: str) -> JsonValue:
    """Return the single value stored under ``key``, or None when absent."""
    values = get_values(record, [key])
    return values[0] if values else None


def get_nested_values(record: JsonValue, keys: Sequence[str]) -> List[Any]:
    """
    Like :func:`get_values`, but each key may be a dotted path.

    Every key contributes exactly one value, in the order of ``keys``. The
    segment before the first ``.`` selects a value from ``record``. When
    that value is a list, the rest of the path is applied to every element
    and the results are collected into one flat list for that key;
    otherwise the rest of the path is applied to the value directly. A
    missing key at any depth yields None.

    Example:
        >>> get_nested_values({"a": [{"b": 1}], "c": [{"d": 2}, {"d": 3}]}, ["a.b", "c.d"])
        [[1], [2, 3]]
    """
    return [_resolve_path(record, key)[0] for key in keys]


def _resolve_path(record: JsonValue, key: str) -> Tuple[JsonValue, bool]:
    head, sep, rest = key.partition('.')
    value = get_value(record, head)
    if not sep:
        return value, False
    items = as_list(value)
    if items is None:
        return _resolve_path(value, rest)
    flattened: List[Any] = []
    for element in items:
        resolved, fanned_out = _resolve_path(element, rest)
        # Only lists produced by a deeper fan-out are spliced; leaf lists stay whole
        if fanned_out:
            flattened.extend(resolved)
        else:
            flattened.append(resolved)
    return flattened, True


def populate_array(target: List[Dict[str, Any]], records: Iterable[JsonValue], fields: Sequence[str]) -> None:
    """
    Append one object per record to ``target``, keeping only ``fields``.

    Objects list the fields in the order given; a field missing from a row
    is stored as None. Row order is preserved.
    """
    for record in records:
        target.append({name: get_value(record, name) for name in fields})


def get_value_from_object_array(data: JsonValue, wrapper_key: str, fields: Sequence[str]) -> List[Any]:
    """
    Unwrap ``wrapper_key`` and pull the first matching field from each element.

    ``data`` is usually ``{wrapper_key: [...]}``; newer exports sometimes drop
    the wrapper and ship the list at top level, which is accepted as is.
    Elements with no matching field are skipped.
    """
    container = data if isinstance(data, list) else get_value(data, wrapper_key)
    values = []
    for element in as_list(container) or []:
        matches = get_values(element, fields)
        if matches:
            values.append(matches[0])
    return values


def decode_string(text: str) -> str:
    """
    Reverse UTF-8 text that was stored as Latin-1 code units.

    Instagram exports write "Zoë" as "ZoÃ«". Each code unit is reinterpreted
    as one byte and the bytes are decoded as UTF-8. Text that was not double
    encoded (code units above 0xFF, or bytes that are not UTF-8) is returned
    unchanged.
    """
    try:
        return text.encode('latin-1').decode('utf-8')
    except (UnicodeEncodeError, UnicodeDecodeError):
        logger.debug(f"Text is not double encoded, keeping as is: {text!r}")
        return text


def epoch_millis_to_datetime(value: JsonValue) -> Optional[datetime]:
    """Convert an epoch-millisecond number (or numeric string) to an aware UTC datetime."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        return EPOCH + timedelta(milliseconds=float(value))
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Not an epoch timestamp: {value!r}")
        return None


def epoch_seconds_to_datetime(value: JsonValue) -> Optional[datetime]:
    """Convert an epoch-second number (or numeric string) to an aware UTC datetime."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Not an epoch timestamp: {value!r}")
        return None
    return epoch_millis_to_datetime(seconds * 1000)
