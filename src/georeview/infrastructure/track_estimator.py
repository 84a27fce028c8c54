"""Reference location estimator over a recorded movement timeline."""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional

from georeview.config import EXACT_MATCH_TOLERANCE_SEC, MAX_INTERPOLATION_GAP_SEC
from georeview.domain.models import ConfidenceSource, Estimate, GeoPoint
from georeview.domain.ports import IEstimator
from georeview.errors import TrackLoadError
from georeview.utils.jsonio import read_json
from georeview.utils.timeutils import parse_timestamp, to_epoch

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackPoint:
    timestamp: datetime
    lat: float
    lng: float

    @property
    def epoch(self) -> float:
        return to_epoch(self.timestamp)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


@dataclass(frozen=True)
class TrackSegment:
    """Two consecutive timeline fixes bracketing an estimate."""

    start: TrackPoint
    end: TrackPoint


class TrackEstimator(IEstimator):
    """Estimate positions from the timeline fixes around a timestamp.

    A fix within ``exact_tolerance_sec`` yields that fix with high
    confidence. Otherwise, when the surrounding fixes are at most
    ``max_gap_sec`` apart, the position is interpolated linearly with lower
    confidence. Anything else has no estimate.
    """

    def __init__(
        self,
        points: Iterable[TrackPoint],
        exact_tolerance_sec: float = EXACT_MATCH_TOLERANCE_SEC,
        max_gap_sec: float = MAX_INTERPOLATION_GAP_SEC,
    ) -> None:
        self._points: List[TrackPoint] = sorted(points, key=lambda p: p.epoch)
        self._epochs: List[float] = [p.epoch for p in self._points]
        self._exact_tolerance = exact_tolerance_sec
        self._max_gap = max_gap_sec

    def __len__(self) -> int:
        return len(self._points)

    def estimate(self, timestamp: datetime) -> Optional[Estimate]:
        if not self._points:
            return None
        t = to_epoch(timestamp)
        index = bisect.bisect_left(self._epochs, t)
        before = self._points[index - 1] if index > 0 else None
        after = self._points[index] if index < len(self._points) else None

        nearest = min(
            (p for p in (before, after) if p is not None),
            key=lambda p: abs(p.epoch - t),
        )
        segments = self._segments(before, after)
        if abs(nearest.epoch - t) <= self._exact_tolerance:
            return Estimate(nearest.point, ConfidenceSource.HIGH_CONFIDENCE, segments)

        if before is None or after is None:
            return None
        gap = after.epoch - before.epoch
        if gap <= 0 or gap > self._max_gap:
            return None
        ratio = (t - before.epoch) / gap
        point = GeoPoint(
            before.lat + (after.lat - before.lat) * ratio,
            before.lng + (after.lng - before.lng) * ratio,
        )
        return Estimate(point, ConfidenceSource.LOWER_CONFIDENCE, segments)

    @staticmethod
    def _segments(before: Optional[TrackPoint], after: Optional[TrackPoint]) -> tuple[TrackSegment, ...]:
        if before is None or after is None:
            return ()
        return (TrackSegment(before, after),)


def _point_from_row(row: Any) -> TrackPoint:
    if not isinstance(row, dict):
        raise ValueError(f"expected an object, got {type(row).__name__}")
    lng = row.get("lng", row.get("lon"))
    return TrackPoint(
        timestamp=parse_timestamp(row["timestamp"]),
        lat=float(row["lat"]),
        lng=float(lng),
    )


def load_track(path: Path) -> List[TrackPoint]:
    """Read ``[{"timestamp", "lat", "lng"}, ...]`` (or ``{"points": [...]}``)."""

    try:
        payload = read_json(path)
    except (OSError, ValueError) as exc:
        raise TrackLoadError(f"Cannot read timeline {path}: {exc}") from exc
    rows = payload.get("points") if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        raise TrackLoadError(f"{path} does not contain a list of track points")
    points: List[TrackPoint] = []
    for index, row in enumerate(rows):
        try:
            points.append(_point_from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            raise TrackLoadError(f"Invalid track point #{index} in {path}: {exc}") from exc
    LOGGER.info("Loaded %d track points from %s", len(points), path)
    return points


__all__ = ["TrackEstimator", "TrackPoint", "TrackSegment", "load_track"]
