from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from conftest import TableEstimator, high, lower, make_asset
from georeview.application.services.candidate_projector import CandidateProjector, filter_visible
from georeview.application.services.commit_coordinator import CommitCoordinator, resume_page
from georeview.application.services.pending_edits import PendingEditTracker
from georeview.application.services.result_accumulator import ResultAccumulator
from georeview.domain.models import FilterCriteria, GeoPoint
from georeview.errors import AssetNotFoundError, BusyError, CommitError, SeenStoreError
from georeview.infrastructure.asset_store import InMemoryAssetStore
from georeview.infrastructure.seen_store import InMemorySeenSetStore


@pytest.mark.parametrize(
    "visible, confirmed, page_size, expected",
    [
        (3, 2, 2, 1),
        (3, 3, 2, 1),
        (0, 0, 100, 1),
        (250, 10, 100, 3),
        (200, 0, 100, 2),
    ],
)
def test_resume_page(visible, confirmed, page_size, expected):
    assert resume_page(visible, confirmed, page_size) == expected


class Session:
    """Accumulator, tracker and coordinator over A (high), B (lower), C (high)."""

    def __init__(self, scheduler=None, store=None, refetch=None):
        self.store = store or InMemoryAssetStore([make_asset("A", 0), make_asset("B", 10), make_asset("C", 20)])
        self.seen = InMemorySeenSetStore()
        self.accumulator = ResultAccumulator(self.store, FilterCriteria(page_size=2))
        self.tracker = PendingEditTracker()
        self.projector = CandidateProjector(
            TableEstimator({0: high(1.0, 1.0), 10: lower(2.0, 2.0), 20: high(3.0, 3.0)})
        )
        self.refetch = refetch or Mock()
        self.coordinator = CommitCoordinator(
            self.store,
            self.seen,
            self.accumulator,
            self.tracker,
            refetch=self.refetch,
            scheduler=scheduler,
        )

    def load_all(self):
        while not self.accumulator.exhausted:
            self.accumulator.fetch_next()
        visibility = filter_visible(self.projector.project(self.accumulator.items), self.seen)
        self.tracker.merge(visibility.visible)


class TestCommit:
    def test_commit_with_hide_rest(self, scheduler):
        session = Session(scheduler)
        session.load_all()
        assert [c.asset_id for c in session.tracker.confirmed_edits] == ["A", "C"]

        result = session.coordinator.commit(hide_rest=True)

        assert result.committed_ids == ("A", "C")
        assert result.committed_count == 2
        assert result.hidden_ids == ("B",)
        assert result.resume_page == 1
        assert "B" in session.seen
        assert result.hide_error is None
        assert session.store.get("A").latitude == 1.0
        assert session.store.get("C").longitude == 3.0
        assert session.store.get("B").has_location is False
        assert len(session.tracker) == 0
        assert len(session.accumulator) == 0
        assert session.accumulator.page == 1

    def test_commit_without_hide_rest_keeps_seen_set(self, scheduler):
        session = Session(scheduler)
        session.load_all()

        result = session.coordinator.commit()

        assert result.hidden_ids == ()
        assert len(session.seen) == 0

    def test_refetch_is_scheduled_with_delay(self, scheduler):
        session = Session(scheduler)
        session.load_all()

        result = session.coordinator.commit()

        assert result.refetch_scheduled is True
        assert [delay for delay, _ in scheduler.pending] == [500]
        session.refetch.assert_not_called()
        scheduler.run_all()
        session.refetch.assert_called_once_with()

    def test_no_scheduler_means_no_refetch(self):
        session = Session()
        session.load_all()

        assert session.coordinator.commit().refetch_scheduled is False
        session.refetch.assert_not_called()

    def test_empty_batch_still_repositions(self, scheduler):
        session = Session(scheduler)
        session.load_all()
        session.tracker.set_all_accepted(False)

        result = session.coordinator.commit(hide_rest=True)

        assert result.committed_ids == ()
        assert set(result.hidden_ids) == {"A", "B", "C"}
        assert result.resume_page == 2
        assert session.accumulator.page == 2


class TestCommitFailure:
    def test_failed_update_leaves_state_untouched(self, scheduler):
        store = InMemoryAssetStore([make_asset("A", 0), make_asset("B", 10), make_asset("C", 20)])
        session = Session(scheduler, store=store)
        session.load_all()
        original_update = store.update

        def failing_update(asset_id, point):
            if asset_id == "A":
                raise AssetNotFoundError("gone")
            original_update(asset_id, point)

        store.update = failing_update
        before = session.tracker.snapshot()
        page_before = session.accumulator.page

        with pytest.raises(CommitError) as excinfo:
            session.coordinator.commit(hide_rest=True)

        assert excinfo.value.failed_asset_ids == ("A",)
        assert isinstance(excinfo.value.cause, AssetNotFoundError)
        assert session.tracker.snapshot() == before
        assert len(session.seen) == 0
        assert session.accumulator.page == page_before
        assert len(session.accumulator) == 3
        assert scheduler.pending == []

    def test_failures_are_reported_in_confirmed_order(self):
        store = Mock()
        store.update.side_effect = RuntimeError("offline")
        session = Session(store=InMemoryAssetStore([make_asset("A", 0), make_asset("C", 20)]))
        session.load_all()
        session.coordinator = CommitCoordinator(store, session.seen, session.accumulator, session.tracker)

        with pytest.raises(CommitError) as excinfo:
            session.coordinator.commit()

        assert excinfo.value.failed_asset_ids == ("A", "C")
        assert store.update.call_count == 2


    def test_failed_hide_still_completes_the_commit(self, scheduler):
        session = Session(scheduler)
        session.load_all()
        seen = Mock()
        seen.add.side_effect = SeenStoreError("disk full")
        session.coordinator = CommitCoordinator(
            session.store,
            seen,
            session.accumulator,
            session.tracker,
            refetch=session.refetch,
            scheduler=scheduler,
        )

        result = session.coordinator.commit(hide_rest=True)

        seen.add.assert_called_once_with(["B"])
        assert result.committed_ids == ("A", "C")
        assert result.hidden_ids == ()
        assert isinstance(result.hide_error, SeenStoreError)
        assert session.store.get("A").latitude == 1.0
        assert len(session.tracker) == 0
        assert len(session.accumulator) == 0
        assert session.accumulator.page == 1
        assert [delay for delay, _ in scheduler.pending] == [500]
        assert session.coordinator.is_busy is False

class TestBusy:
    def test_second_commit_while_running_is_rejected(self):
        release = threading.Event()
        entered = threading.Event()
        store = InMemoryAssetStore([make_asset("A", 0)])
        session = Session(store=store)
        session.load_all()

        def slow_update(asset_id, point):
            entered.set()
            release.wait(5)

        store.update = slow_update
        worker = threading.Thread(target=session.coordinator.commit)
        worker.start()
        try:
            assert entered.wait(5)
            assert session.coordinator.is_busy is True
            with pytest.raises(BusyError):
                session.coordinator.commit()
        finally:
            release.set()
            worker.join(5)
        assert session.coordinator.is_busy is False


def test_updates_carry_the_reviewed_point():
    store = Mock()
    session = Session(store=InMemoryAssetStore([make_asset("A", 0)]))
    session.load_all()
    session.tracker.relocate("A", GeoPoint(5.0, 6.0))
    coordinator = CommitCoordinator(store, session.seen, session.accumulator, session.tracker, max_workers=1)

    coordinator.commit()

    store.update.assert_called_once_with("A", GeoPoint(5.0, 6.0))
