"""Reverse geocoding used to label freshly committed coordinates."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Mapping, Optional, Tuple, Union

import reverse_geocoder  # type: ignore[import]

from ..domain.models import GeoPoint
from .logging import get_logger

Coordinates = Union[GeoPoint, Mapping[str, object]]

_LAT_KEYS = ("lat", "latitude")
_LNG_KEYS = ("lng", "lon", "longitude")


@lru_cache(maxsize=1)
def _geocoder() -> "reverse_geocoder.RGeocoder":
    """Return a cached reverse geocoder; loading its city table is slow."""

    return reverse_geocoder.RGeocoder(mode=1, verbose=False)


def _as_float(value: object) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _lookup(gps: Mapping[str, object], keys: Tuple[str, ...]) -> Optional[float]:
    for key in keys:
        value = _as_float(gps.get(key))
        if value is not None:
            return value
    return None


def _coordinates(where: Optional[Coordinates]) -> Optional[Tuple[float, float]]:
    if where is None:
        return None
    if isinstance(where, GeoPoint):
        return where.lat, where.lng
    latitude = _lookup(where, _LAT_KEYS)
    longitude = _lookup(where, _LNG_KEYS)
    if latitude is None or longitude is None:
        return None
    return latitude, longitude


def _first_record(result: object) -> Dict[str, str]:
    """Normalise the geocoder answer (a dict or a list of dicts) to text values."""

    if isinstance(result, list):
        result = result[0] if result else None
    if not isinstance(result, dict):
        return {}
    record: Dict[str, str] = {}
    for key, value in result.items():
        if not isinstance(key, str):
            continue
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="ignore")
        record[key] = str(value).strip()
    return record


def format_place(record: Mapping[str, str]) -> Optional[str]:
    """``"<city> — <region>"``, preferring the finer ``admin2`` region."""

    city = record.get("name", "")
    region = record.get("admin2") or record.get("admin1") or ""
    parts = [part for part in (city, region) if part]
    return " — ".join(parts) or None


def resolve_location_name(where: Optional[Coordinates]) -> Optional[str]:
    """Return a human readable place name for *where*.

    *where* is a :class:`GeoPoint` or a mapping with ``lat``/``lng`` keys
    (``latitude``, ``lon`` and ``longitude`` are accepted as aliases).
    Missing coordinates or a failing lookup yield ``None``; committing a
    location never fails because of its label.
    """

    coordinates = _coordinates(where)
    if coordinates is None:
        return None

    try:
        result = _geocoder().query([coordinates])
    except Exception as exc:
        get_logger(__name__).debug("Reverse geocoding failed for %s,%s: %s", *coordinates, exc)
        return None

    name = format_place(_first_record(result))
    if name:
        get_logger(__name__).debug("Resolved %s,%s to %s", *coordinates, name)
    return name


__all__ = ["format_place", "resolve_location_name"]
