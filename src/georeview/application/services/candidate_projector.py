"""Projection of accumulated assets into review candidates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Container, List, Optional, Sequence

from georeview.config import SCREENSHOT_MARKERS
from georeview.domain.models import (
    HIGHEST_CONFIDENCE,
    Asset,
    Estimate,
    Polyline,
    ReviewCandidate,
)
from georeview.domain.ports import IEstimator, IGeometryAdapter


def looks_like_screenshot(file_name: str) -> bool:
    lowered = (file_name or "").casefold()
    return any(marker in lowered for marker in SCREENSHOT_MARKERS)


def default_acceptance(asset: Asset, estimate: Optional[Estimate]) -> bool:
    """Whether a fresh candidate starts out accepted."""
    if estimate is None:
        return False
    if estimate.confidence_source != HIGHEST_CONFIDENCE:
        return False
    return not looks_like_screenshot(asset.original_file_name)


class CandidateProjector:
    """Maps assets through the estimator. Holds no per-asset cache."""

    def __init__(self, estimator: IEstimator, geometry_adapter: Optional[IGeometryAdapter] = None) -> None:
        self._estimator = estimator
        self._geometry_adapter = geometry_adapter

    def project(self, assets: Sequence[Asset]) -> List[ReviewCandidate]:
        return [self.project_one(asset) for asset in assets]

    def project_one(self, asset: Asset) -> ReviewCandidate:
        estimate = self._estimator.estimate(asset.created_at)
        if estimate is None:
            return ReviewCandidate(asset=asset, estimate=None, geometry=(), accepted=False)
        return ReviewCandidate(
            asset=asset,
            estimate=estimate,
            geometry=self._geometry_for(estimate),
            accepted=default_acceptance(asset, estimate),
        )

    def _geometry_for(self, estimate: Estimate) -> tuple[Polyline, ...]:
        if self._geometry_adapter is None:
            return ()
        shapes: List[Polyline] = []
        for segment in estimate.relevant_segments:
            shape = self._geometry_adapter.to_renderable(segment)
            if shape is not None:
                shapes.append(shape)
        return tuple(shapes)


@dataclass
class VisibilityResult:
    visible: List[ReviewCandidate] = field(default_factory=list)
    hidden_count: int = 0


def filter_visible(projected: Sequence[ReviewCandidate], seen: Container[str]) -> VisibilityResult:
    """Drop candidates whose asset id is in *seen*."""
    visible = [candidate for candidate in projected if candidate.asset.id not in seen]
    return VisibilityResult(visible=visible, hidden_count=len(projected) - len(visible))


__all__ = [
    "CandidateProjector",
    "VisibilityResult",
    "default_acceptance",
    "filter_visible",
    "looks_like_screenshot",
]
