import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Run Qt headless so tests work without a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from georeview.domain.models import Asset, ConfidenceSource, Estimate, GeoPoint  # noqa: E402
from georeview.domain.ports import IEstimator  # noqa: E402

EPOCH = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_asset(asset_id: str, ts: int = 0, name: Optional[str] = None, **kwargs) -> Asset:
    """Asset created *ts* seconds after a fixed reference time."""
    return Asset(
        id=asset_id,
        created_at=EPOCH + timedelta(seconds=ts),
        original_file_name=name or f"IMG_{asset_id}.jpg",
        **kwargs,
    )


class TableEstimator(IEstimator):
    """Returns canned estimates keyed by seconds after ``EPOCH``."""

    def __init__(self, table: Optional[Dict[int, Estimate]] = None) -> None:
        self.table: Dict[int, Estimate] = dict(table or {})
        self.calls: List[datetime] = []

    def estimate(self, timestamp: datetime) -> Optional[Estimate]:
        self.calls.append(timestamp)
        return self.table.get(int((timestamp - EPOCH).total_seconds()))


def high(lat: float, lng: float, segments=()) -> Estimate:
    return Estimate(GeoPoint(lat, lng), ConfidenceSource.HIGH_CONFIDENCE, tuple(segments))


def lower(lat: float, lng: float) -> Estimate:
    return Estimate(GeoPoint(lat, lng), ConfidenceSource.LOWER_CONFIDENCE)


class ManualScheduler:
    """Collects delayed callbacks so tests decide when they fire."""

    def __init__(self) -> None:
        self.pending: List[Tuple[int, Callable[[], None]]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((delay_ms, callback))

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
