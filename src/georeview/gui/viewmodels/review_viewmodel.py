"""Pure Python review session ViewModel (MVVM) without a Qt dependency.

Wires the review engine together for a presentation layer:

    filter criteria -> ResultAccumulator -> CandidateProjector
                    -> filter_visible -> PendingEditTracker

and exposes the user actions (accept/reject, drag, hide, unhide, commit) as
methods. Failures from the services are logged, routed through the optional
``ErrorHandler`` and handed back as outcome values; they never escape these
methods.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from georeview.application.services.candidate_projector import CandidateProjector, filter_visible
from georeview.application.services.commit_coordinator import CommitCoordinator, CommitResult
from georeview.application.services.pending_edits import PendingEditTracker
from georeview.application.services.result_accumulator import ResultAccumulator
from georeview.config import COMMIT_MAX_WORKERS, REFETCH_DELAY_MS
from georeview.domain.models import FilterCriteria, GeoPoint, ReviewCandidate
from georeview.domain.ports import IAssetStore, IEstimator, IGeometryAdapter, ISeenSetStore, Scheduler
from georeview.errors import GeoReviewError
from georeview.errors.handler import ErrorHandler
from georeview.events.bus import EventBus
from georeview.events.review_events import (
    AssetsHiddenEvent,
    AssetsUnhiddenEvent,
    EditsCommittedEvent,
    PageFetchedEvent,
)
from georeview.gui.viewmodels.base import BaseViewModel
from georeview.gui.viewmodels.signal import ObservableProperty, Signal


@dataclass
class FetchOutcome:
    success: bool = True
    appended: int = 0
    has_next_page: bool = False
    error: Optional[GeoReviewError] = None


@dataclass
class CommitOutcome:
    success: bool = True
    result: Optional[CommitResult] = None
    error: Optional[GeoReviewError] = None


class ReviewViewModel(BaseViewModel):
    """One reviewer session over a filter-scoped set of assets.

    ``commit()`` schedules the follow-up fetch through *scheduler* after
    ``refetch_delay_ms``; without a scheduler the view stays empty until
    :meth:`refresh` or :meth:`load_next_page` is called. Even with a
    scheduler the store may still be geocoding when the refetch runs, so a
    manual :meth:`refresh` can be necessary.
    """

    def __init__(
        self,
        asset_store: IAssetStore,
        estimator: IEstimator,
        seen_store: ISeenSetStore,
        *,
        criteria: Optional[FilterCriteria] = None,
        geometry_adapter: Optional[IGeometryAdapter] = None,
        scheduler: Optional[Scheduler] = None,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
        refetch_delay_ms: int = REFETCH_DELAY_MS,
        commit_workers: int = COMMIT_MAX_WORKERS,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._seen_store = seen_store
        self._event_bus = event_bus
        self._error_handler = error_handler

        self._accumulator = ResultAccumulator(asset_store, criteria or FilterCriteria())
        self._projector = CandidateProjector(estimator, geometry_adapter)
        self._tracker = PendingEditTracker()
        self._coordinator = CommitCoordinator(
            asset_store,
            seen_store,
            self._accumulator,
            self._tracker,
            refetch=self._on_refetch_due,
            scheduler=scheduler,
            refetch_delay_ms=refetch_delay_ms,
            max_workers=commit_workers,
        )

        self._projected: List[ReviewCandidate] = []
        self._session: int = 0
        self._refetch_session: Optional[int] = None
        self._start_page: int = 1

        # Observable properties
        self.candidates = ObservableProperty([])
        self.confirmed_count = ObservableProperty(0)
        self.hidden_count = ObservableProperty(0)
        self.has_next_page = ObservableProperty(False)
        self.loading = ObservableProperty(False)
        self.committing = ObservableProperty(False)

        # Signals
        self.candidates_changed = Signal()  # emits (candidates)
        self.error_occurred = Signal()  # emits (error)
        self.commit_finished = Signal()  # emits (CommitOutcome)

    # -- read access ------------------------------------------------------------

    @property
    def criteria(self) -> FilterCriteria:
        return self._accumulator.criteria

    @property
    def page(self) -> int:
        return self._accumulator.page

    @property
    def accumulated_count(self) -> int:
        return len(self._accumulator)

    @property
    def projected(self) -> List[ReviewCandidate]:
        return list(self._projected)

    @property
    def visible_count(self) -> int:
        return len(self._tracker)

    @property
    def confirmed_edits(self) -> List[ReviewCandidate]:
        return self._tracker.confirmed_edits

    @property
    def can_commit(self) -> bool:
        return self.confirmed_count.value > 0 and not self._coordinator.is_busy

    @property
    def refetch_pending(self) -> bool:
        return self._refetch_session is not None

    def candidate(self, asset_id: str) -> Optional[ReviewCandidate]:
        return self._tracker.get(asset_id)

    # -- loading ----------------------------------------------------------------

    def set_filter(self, criteria: FilterCriteria) -> FetchOutcome:
        """Start a new accumulation for *criteria*; pending edits are dropped."""
        if criteria == self._accumulator.criteria and self._accumulator.page > 1:
            return FetchOutcome(success=True, has_next_page=self._accumulator.has_next_page)
        self._session += 1
        self._refetch_session = None
        self._start_page = 1
        self._accumulator.reset(criteria)
        self._tracker.clear()
        self._projected = []
        self._publish_state()
        return self.load_next_page()

    def load_next_page(self) -> FetchOutcome:
        """Fetch and merge the next page. No-op once the store reports no more pages."""
        if self._accumulator.exhausted:
            return FetchOutcome(success=True, has_next_page=False)
        # A manual fetch supersedes the delayed post-commit one.
        self._refetch_session = None
        self.loading.value = True
        try:
            page = self._accumulator.page
            result = self._accumulator.fetch_next()
        except GeoReviewError as exc:
            self._report(exc, {"operation": "fetch", "page": self._accumulator.page})
            return FetchOutcome(success=False, error=exc, has_next_page=self._accumulator.has_next_page)
        finally:
            self.loading.value = False

        self._reproject()
        self._publish(PageFetchedEvent(page=page, item_count=len(result.items), has_next_page=result.has_next_page))
        return FetchOutcome(success=True, appended=len(result.items), has_next_page=result.has_next_page)

    def refresh(self) -> FetchOutcome:
        """Reload from the page the current accumulation started at.

        Decisions on candidates that are still visible afterwards are kept.
        """
        self._refetch_session = None
        self._accumulator.reset(page=self._start_page)
        return self.load_next_page()

    # -- decisions --------------------------------------------------------------

    def set_accepted(self, asset_id: str, accepted: bool) -> bool:
        return self._decide(lambda: self._tracker.set_accepted(asset_id, accepted), asset_id)

    def toggle(self, asset_id: str) -> bool:
        return self._decide(lambda: self._tracker.toggle(asset_id), asset_id)

    def relocate(self, asset_id: str, point: GeoPoint) -> bool:
        return self._decide(lambda: self._tracker.relocate(asset_id, point), asset_id)

    def accept_all(self) -> int:
        changed = self._tracker.set_all_accepted(True)
        self._publish_state()
        return changed

    def reject_all(self) -> int:
        changed = self._tracker.set_all_accepted(False)
        self._publish_state()
        return changed

    # -- hiding -----------------------------------------------------------------

    def hide(self, asset_ids: Iterable[str]) -> List[str]:
        """Hide the given pending assets; returns the ids actually hidden."""
        ids = [asset_id for asset_id in dict.fromkeys(asset_ids) if asset_id in self._tracker]
        if not ids:
            return []
        try:
            self._seen_store.add(ids)
        except GeoReviewError as exc:
            self._report(exc, {"operation": "hide", "count": len(ids)})
            return []
        self._logger.info("Hid %d assets", len(ids))
        self._apply_visibility()
        self._publish(AssetsHiddenEvent(asset_ids=tuple(ids)))
        return ids

    def unhide_all(self) -> List[str]:
        """Unhide the hidden assets of the current result domain only."""
        ids = [c.asset.id for c in self._projected if c.asset.id in self._seen_store]
        if not ids:
            return []
        try:
            self._seen_store.discard(ids)
        except GeoReviewError as exc:
            self._report(exc, {"operation": "unhide", "count": len(ids)})
            return []
        self._logger.info("Unhid %d assets", len(ids))
        self._apply_visibility()
        self._publish(AssetsUnhiddenEvent(asset_ids=tuple(ids)))
        return ids

    # -- commit -----------------------------------------------------------------

    def commit(self, hide_rest: bool = False) -> CommitOutcome:
        self.committing.value = True
        try:
            result = self._coordinator.commit(hide_rest=hide_rest)
        except GeoReviewError as exc:
            self._report(exc, {"operation": "commit", "hide_rest": hide_rest})
            outcome = CommitOutcome(success=False, error=exc)
            self.commit_finished.emit(outcome)
            return outcome
        finally:
            # A rejected overlapping call leaves the running commit's flag raised.
            self.committing.value = self._coordinator.is_busy

        self._start_page = result.resume_page
        self._projected = []
        self._refetch_session = self._session if result.refetch_scheduled else None
        self._publish_state()
        self._publish(
            EditsCommittedEvent(
                committed_ids=result.committed_ids,
                hidden_ids=result.hidden_ids,
                resume_page=result.resume_page,
            )
        )
        if result.hide_error is not None:
            self._report(result.hide_error, {"operation": "commit", "hide_rest": True})
        outcome = CommitOutcome(success=True, result=result)
        self.commit_finished.emit(outcome)
        return outcome

    def _on_refetch_due(self) -> None:
        if self.disposed or self._refetch_session is None or self._refetch_session != self._session:
            self._logger.debug("Dropping stale post-commit refetch")
            return
        self._refetch_session = None
        self.load_next_page()

    # -- internal ---------------------------------------------------------------

    def _decide(self, action, asset_id: str) -> bool:
        try:
            action()
        except GeoReviewError as exc:
            self._report(exc, {"operation": "decide", "asset_id": asset_id})
            return False
        self._publish_state()
        return True

    def _reproject(self) -> None:
        self._projected = self._projector.project(self._accumulator.items)
        self._apply_visibility()

    def _apply_visibility(self) -> None:
        visibility = filter_visible(self._projected, self._seen_store)
        self._tracker.merge(visibility.visible)
        self.hidden_count.value = visibility.hidden_count
        self._publish_state()

    def _publish_state(self) -> None:
        candidates = self._tracker.candidates
        self.candidates.value = candidates
        self.confirmed_count.value = len(self._tracker.confirmed_edits)
        self.has_next_page.value = self._accumulator.has_next_page
        if not self._projected:
            self.hidden_count.value = 0
        self.candidates_changed.emit(candidates)

    def _publish(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)

    def _report(self, error: GeoReviewError, context: dict) -> None:
        if self._error_handler is not None:
            self._error_handler.handle(error, context=context)
        else:
            self._logger.error("%s: %s", error.__class__.__name__, error)
        self.error_occurred.emit(error)

    def dispose(self) -> None:
        self._refetch_session = None
        super().dispose()


__all__ = ["CommitOutcome", "FetchOutcome", "ReviewViewModel"]
