"""Batch commit of accepted review candidates to the asset store."""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from georeview.application.services.pending_edits import PendingEditTracker
from georeview.application.services.result_accumulator import ResultAccumulator
from georeview.config import COMMIT_MAX_WORKERS, REFETCH_DELAY_MS
from georeview.domain.models import ReviewCandidate
from georeview.domain.ports import IAssetStore, ISeenSetStore, Scheduler
from georeview.errors import BusyError, CommitError, SeenStoreError

LOGGER = logging.getLogger(__name__)


def resume_page(visible_before: int, confirmed_count: int, page_size: int) -> int:
    """Page to resume from after *confirmed_count* items left the result domain.

    Items hidden by the same commit are not subtracted, so the value is an
    approximation when ``hide_rest`` removes further items.
    """
    remaining = visible_before - confirmed_count
    return max(1, math.ceil(remaining / page_size))


@dataclass
class CommitResult:
    committed_ids: Tuple[str, ...] = ()
    hidden_ids: Tuple[str, ...] = ()
    resume_page: int = 1
    refetch_scheduled: bool = False
    hide_error: Optional[SeenStoreError] = None

    @property
    def committed_count(self) -> int:
        return len(self.committed_ids)


@dataclass
class _BatchOutcome:
    succeeded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, BaseException]] = field(default_factory=list)


class CommitCoordinator:
    """Writes accepted edits back and repositions the accumulator.

    Not reentrant: a second :meth:`commit` while one is running raises
    :class:`BusyError`.
    """

    def __init__(
        self,
        store: IAssetStore,
        seen_store: ISeenSetStore,
        accumulator: ResultAccumulator,
        tracker: PendingEditTracker,
        *,
        refetch: Optional[Callable[[], None]] = None,
        scheduler: Optional[Scheduler] = None,
        refetch_delay_ms: int = REFETCH_DELAY_MS,
        max_workers: int = COMMIT_MAX_WORKERS,
    ) -> None:
        self._store = store
        self._seen_store = seen_store
        self._accumulator = accumulator
        self._tracker = tracker
        self._refetch = refetch
        self._scheduler = scheduler
        self._refetch_delay_ms = refetch_delay_ms
        self._max_workers = max(1, max_workers)
        self._busy = threading.Lock()

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def commit(self, hide_rest: bool = False) -> CommitResult:
        if not self._busy.acquire(blocking=False):
            raise BusyError("A commit is already in progress", key="commit")
        try:
            return self._commit(hide_rest)
        finally:
            self._busy.release()

    def _commit(self, hide_rest: bool) -> CommitResult:
        confirmed = list(self._tracker.confirmed_edits)
        visible_before = len(self._tracker)
        unaccepted = self._tracker.unaccepted_ids()
        LOGGER.info(
            "Committing %d of %d pending edits (hide_rest=%s)",
            len(confirmed),
            visible_before,
            hide_rest,
        )

        outcome = self._update_all(confirmed)
        if outcome.failures:
            failed_ids = [asset_id for asset_id, _ in outcome.failures]
            first_id, cause = outcome.failures[0]
            LOGGER.error(
                "Commit aborted: %d of %d updates failed (first %s: %s)",
                len(failed_ids),
                len(confirmed),
                first_id,
                cause,
            )
            raise CommitError(
                f"Updating {len(failed_ids)} of {len(confirmed)} assets failed: {cause}",
                cause=cause,
                failed_asset_ids=failed_ids,
            ) from cause

        # Updates are applied; a hide failure is reported on the result.
        hidden: Tuple[str, ...] = ()
        hide_error: Optional[SeenStoreError] = None
        if hide_rest and unaccepted:
            try:
                self._seen_store.add(unaccepted)
            except SeenStoreError as exc:
                LOGGER.error("Committed edits but could not hide %d assets: %s", len(unaccepted), exc)
                hide_error = exc
            else:
                hidden = tuple(unaccepted)

        page = resume_page(visible_before, len(confirmed), self._accumulator.page_size)
        self._accumulator.reset(page=page)
        self._tracker.clear()

        scheduled = False
        if self._refetch is not None and self._scheduler is not None:
            # Best effort: the store may still be geocoding when this fires,
            # callers can refresh manually afterwards.
            self._scheduler.call_later(self._refetch_delay_ms, self._refetch)
            scheduled = True

        LOGGER.info("Committed %d edits, hid %d, resuming at page %d", len(confirmed), len(hidden), page)
        return CommitResult(
            committed_ids=tuple(candidate.asset.id for candidate in confirmed),
            hidden_ids=hidden,
            resume_page=page,
            refetch_scheduled=scheduled,
            hide_error=hide_error,
        )

    def _update_all(self, confirmed: List[ReviewCandidate]) -> _BatchOutcome:
        outcome = _BatchOutcome()
        if not confirmed:
            return outcome
        workers = min(self._max_workers, len(confirmed))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="georeview-commit") as executor:
            futures = {
                executor.submit(self._store.update, candidate.asset.id, candidate.estimate.point): candidate.asset.id
                for candidate in confirmed
                if candidate.estimate is not None
            }
            for future in as_completed(futures):
                asset_id = futures[future]
                try:
                    future.result()
                except Exception as exc:
                    outcome.failures.append((asset_id, exc))
                else:
                    outcome.succeeded.append(asset_id)
        position = {candidate.asset.id: index for index, candidate in enumerate(confirmed)}
        outcome.failures.sort(key=lambda failure: position[failure[0]])
        return outcome


__all__ = ["CommitCoordinator", "CommitResult", "resume_page"]
