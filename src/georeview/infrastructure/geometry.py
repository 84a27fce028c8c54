"""Conversion of timeline segments into drawable polylines."""

from __future__ import annotations

import math
from typing import Any, Optional

from georeview.domain.models import Polyline
from georeview.domain.ports import IGeometryAdapter
from georeview.infrastructure.track_estimator import TrackSegment


class SegmentPolylineAdapter(IGeometryAdapter):
    """Turns a :class:`TrackSegment` into a two-point polyline.

    Unknown segment types and segments with non-finite coordinates yield
    ``None`` so the projector can drop them.
    """

    def to_renderable(self, segment: Any) -> Optional[Polyline]:
        if not isinstance(segment, TrackSegment):
            return None
        start, end = segment.start, segment.end
        coordinates = (start.lat, start.lng, end.lat, end.lng)
        if not all(math.isfinite(value) for value in coordinates):
            return None
        return Polyline(points=(start.point, end.point))


__all__ = ["SegmentPolylineAdapter"]
