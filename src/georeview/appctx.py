"""Construction of a ready-to-use review session from settings and files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .domain.models import FilterCriteria
from .domain.ports import Scheduler
from .errors.handler import ErrorHandler
from .events.bus import EventBus
from .gui.viewmodels.review_viewmodel import ReviewViewModel
from .infrastructure.asset_store import JsonAssetStore
from .infrastructure.geometry import SegmentPolylineAdapter
from .infrastructure.seen_store import JsonSeenSetStore
from .infrastructure.track_estimator import TrackEstimator, load_track
from .settings.manager import SettingsManager
from .utils.geocoding import resolve_location_name
from .utils.logging import get_logger


def _create_settings_manager(path: Optional[Path] = None) -> SettingsManager:
    manager = SettingsManager(path)
    manager.load()
    return manager


@dataclass
class ReviewContext:
    """Objects shared by one review session."""

    settings: SettingsManager
    asset_store: JsonAssetStore
    seen_store: JsonSeenSetStore
    estimator: TrackEstimator
    event_bus: EventBus
    viewmodel: ReviewViewModel
    error_handler: ErrorHandler

    def criteria(self, **overrides) -> FilterCriteria:
        """Filter criteria using the configured page size unless overridden."""

        page_size = overrides.pop("page_size", None) or int(self.settings.get("review.page_size"))
        return FilterCriteria.create(page_size=page_size, **overrides)


def build_review_context(
    assets_path: Path,
    track_path: Path,
    *,
    settings: Optional[SettingsManager] = None,
    settings_path: Optional[Path] = None,
    geocode: bool = True,
    scheduler: Optional[Scheduler] = None,
    logger: Optional[logging.Logger] = None,
) -> ReviewContext:
    """Load the asset file, the timeline and the seen-set, and wire a session."""

    settings = settings or _create_settings_manager(settings_path)
    logger = logger or get_logger()

    asset_store = JsonAssetStore(assets_path, geocoder=resolve_location_name if geocode else None)
    asset_store.load()

    seen_store = JsonSeenSetStore(settings.seen_store_path())
    seen_store.load()

    estimator = TrackEstimator(
        load_track(track_path),
        exact_tolerance_sec=float(settings.get("estimator.exact_tolerance_sec")),
        max_gap_sec=float(settings.get("estimator.max_interpolation_gap_sec")),
    )

    event_bus = EventBus(logger=logger)
    error_handler = ErrorHandler(logger, event_bus)
    viewmodel = ReviewViewModel(
        asset_store,
        estimator,
        seen_store,
        geometry_adapter=SegmentPolylineAdapter(),
        scheduler=scheduler,
        event_bus=event_bus,
        error_handler=error_handler,
        refetch_delay_ms=int(settings.get("review.refetch_delay_ms")),
        commit_workers=int(settings.get("review.commit_workers")),
    )
    return ReviewContext(
        settings=settings,
        asset_store=asset_store,
        seen_store=seen_store,
        estimator=estimator,
        event_bus=event_bus,
        viewmodel=viewmodel,
        error_handler=error_handler,
    )


__all__ = ["ReviewContext", "build_review_context"]
