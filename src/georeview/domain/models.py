"""Value objects shared by the review engine and its adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple

from ..config import DEFAULT_PAGE_SIZE


class ConfidenceSource(str, Enum):
    """How the estimator (or the user) arrived at a point."""

    HIGH_CONFIDENCE = "high_confidence"
    LOWER_CONFIDENCE = "lower_confidence"
    MANUAL = "manual"


# The only source eligible for automatic acceptance.
HIGHEST_CONFIDENCE = ConfidenceSource.HIGH_CONFIDENCE


@dataclass(frozen=True)
class FilterCriteria:
    """Search scope of a review session. Hashable so it can key in-flight fetches."""

    tag_ids: FrozenSet[str] = frozenset()
    is_not_in_album: bool = False
    camera_model: Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.tag_ids, frozenset):
            object.__setattr__(self, "tag_ids", frozenset(self.tag_ids))
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int) or self.page_size <= 0:
            raise ValueError(f"page_size must be a positive integer, got {self.page_size!r}")

    @classmethod
    def create(
        cls,
        tag_ids: Iterable[str] = (),
        is_not_in_album: bool = False,
        camera_model: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> FilterCriteria:
        return cls(
            tag_ids=frozenset(tag_ids),
            is_not_in_album=is_not_in_album,
            camera_model=camera_model or None,
            page_size=page_size,
        )


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Asset:
    """Read-only asset record as returned by the asset store."""

    id: str
    created_at: datetime
    original_file_name: str
    tag_ids: FrozenSet[str] = frozenset()
    album_ids: FrozenSet[str] = frozenset()
    camera_model: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_name: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class Estimate:
    point: GeoPoint
    confidence_source: ConfidenceSource
    relevant_segments: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Polyline:
    """Renderable track geometry."""

    points: Tuple[GeoPoint, ...]


@dataclass(frozen=True)
class ReviewCandidate:
    """An asset paired with a possibly-absent estimate and its acceptance state."""

    asset: Asset
    estimate: Optional[Estimate] = None
    geometry: Tuple[Polyline, ...] = ()
    accepted: bool = False

    @property
    def asset_id(self) -> str:
        return self.asset.id

    @property
    def has_estimate(self) -> bool:
        return self.estimate is not None


@dataclass
class SearchPage:
    """One page of search results with the store's pagination signal."""

    items: List[Asset] = field(default_factory=list)
    has_next_page: bool = False
