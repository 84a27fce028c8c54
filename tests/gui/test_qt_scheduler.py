from __future__ import annotations

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for Qt scheduler tests", exc_type=ImportError)
pytest.importorskip("pytestqt", reason="pytest-qt is required for Qt scheduler tests", exc_type=ImportError)

from georeview.gui.qt_scheduler import QtScheduler


def test_callback_fires_on_event_loop(qtbot):
    scheduler = QtScheduler()
    calls = []

    scheduler.call_later(20, lambda: calls.append("fired"))

    assert calls == []
    qtbot.waitUntil(lambda: calls == ["fired"], timeout=2000)


def test_negative_delay_fires_immediately(qtbot):
    scheduler = QtScheduler()
    calls = []

    scheduler.call_later(-5, lambda: calls.append(1))

    qtbot.waitUntil(lambda: calls == [1], timeout=2000)


def test_refetch_through_viewmodel(qtbot):
    from conftest import TableEstimator, high, make_asset
    from georeview.domain.models import FilterCriteria
    from georeview.gui.viewmodels.review_viewmodel import ReviewViewModel
    from georeview.infrastructure.asset_store import InMemoryAssetStore
    from georeview.infrastructure.seen_store import InMemorySeenSetStore

    store = InMemoryAssetStore([make_asset("A", 0), make_asset("B", 10)])
    vm = ReviewViewModel(
        store,
        TableEstimator({0: high(1.0, 1.0)}),
        InMemorySeenSetStore(),
        scheduler=QtScheduler(),
        refetch_delay_ms=10,
    )
    vm.set_filter(FilterCriteria(page_size=10))

    outcome = vm.commit()

    assert outcome.result.refetch_scheduled is True
    qtbot.waitUntil(lambda: [c.asset_id for c in vm.candidates.value] == ["B"], timeout=2000)


def test_callback_runs_on_the_scheduling_thread(qtbot):
    import threading

    scheduler = QtScheduler()
    threads = []

    scheduler.call_later(0, lambda: threads.append(threading.current_thread()))

    qtbot.waitUntil(lambda: threads == [threading.current_thread()], timeout=2000)
