"""
JSON codec for persisted blobs.

Encoding turns datetimes into ISO 8601 text and enums into their values.
Decoding restores datetimes, but only for the designated timestamp keys;
every other string (including date-looking ones) passes through unchanged.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any

DATE_KEYS = frozenset(
    {
        "created",
        "updated",
        "createdAt",
        "updatedAt",
        "completedAt",
        "assignedAt",
        "startedAt",
        "created_at",
        "updated_at",
        "completed_at",
        "assigned_at",
        "started_at",
    }
)


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(blob: dict[str, Any]) -> str:
    return json.dumps(blob, default=_default, indent=2)


def decode_dates(value: Any) -> Any:
    """Recursively restore datetimes under DATE_KEYS."""
    if isinstance(value, dict):
        decoded = {}
        for key, item in value.items():
            if key in DATE_KEYS and isinstance(item, str):
                decoded[key] = _parse_datetime(item)
            else:
                decoded[key] = decode_dates(item)
        return decoded
    if isinstance(value, list):
        return [decode_dates(item) for item in value]
    return value


def _parse_datetime(text: str) -> datetime | str:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text


def decode(text: str) -> dict[str, Any]:
    result: dict[str, Any] = decode_dates(json.loads(text))
    return result
