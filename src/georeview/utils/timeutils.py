"""Timestamp helpers shared by the timeline and asset adapters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from dateutil.parser import isoparse


def ensure_aware(value: datetime) -> datetime:
    """Return *value* with a timezone, treating naive datetimes as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_epoch(value: datetime) -> float:
    return ensure_aware(value).timestamp()


def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """Parse ISO-8601 text or epoch seconds into an aware datetime."""

    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if isinstance(value, str):
        return ensure_aware(isoparse(value.strip()))
    raise ValueError(f"Not a timestamp: {value!r}")


__all__ = ["ensure_aware", "parse_timestamp", "to_epoch"]
