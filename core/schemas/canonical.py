"""
Schemas
File: canonical.py

Purpose: Deterministic serialization used for receipt hashing.

Identical inputs must produce byte-identical JSON across runs.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

# No whitespace between tokens
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime_canonical(dt: datetime) -> str:
    """Format as ISO-8601 with a Z suffix (e.g. "2026-06-14T19:00:00Z")."""
    utc_dt = ensure_utc(dt)
    if utc_dt.microsecond == 0:
        return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def canonicalize_value(value: Any) -> Any:
    """
    Recursively convert a value into JSON-safe canonical form.

    Decimals become their normalized string so 10, 10.0 and 10.00 hash
    the same; None entries in dicts are dropped.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Decimal):
        normalized = value.normalize()
        # normalize() turns 100 into 1E+2; keep plain notation
        return format(normalized, "f")
    if isinstance(value, float):
        return canonicalize_value(Decimal(str(value)))
    if isinstance(value, datetime):
        return format_datetime_canonical(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return canonicalize_value(value.model_dump(exclude_none=True))
    if isinstance(value, dict):
        return {
            str(k): canonicalize_value(v)
            for k, v in value.items()
            if v is not None
        }
    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item) for item in value]
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def dumps_canonical(obj: Any) -> str:
    """
    Serialize to canonical JSON: sorted keys, no whitespace, UTC datetimes.

    Example:
        >>> dumps_canonical({"b": Decimal("2.50"), "a": 1})
        '{"a":1,"b":"2.5"}'
    """
    return json.dumps(
        canonicalize_value(obj),
        sort_keys=True,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=False,
    )
