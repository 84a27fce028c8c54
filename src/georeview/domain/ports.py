"""Boundaries to the collaborators the review engine does not own."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Optional, Protocol

from .models import Estimate, FilterCriteria, GeoPoint, Polyline, SearchPage


class IEstimator(ABC):
    @abstractmethod
    def estimate(self, timestamp: datetime) -> Optional[Estimate]:
        """Best location guess for *timestamp*, or ``None`` when the timeline has none."""
        pass


class IGeometryAdapter(ABC):
    @abstractmethod
    def to_renderable(self, segment: Any) -> Optional[Polyline]:
        """Convert a relevant track segment into drawable geometry."""
        pass


class IAssetStore(ABC):
    @abstractmethod
    def search(self, criteria: FilterCriteria, page: int, page_size: int) -> SearchPage:
        """Return 1-based *page* of assets without a location matching *criteria*."""
        pass

    @abstractmethod
    def update(self, asset_id: str, point: GeoPoint) -> None:
        """Write coordinates for *asset_id*; raises on failure."""
        pass


class ISeenSetStore(ABC):
    """Durable set of asset ids the user chose to hide."""

    @abstractmethod
    def add(self, asset_ids: Iterable[str]) -> None:
        pass

    @abstractmethod
    def discard(self, asset_ids: Iterable[str]) -> None:
        pass

    @abstractmethod
    def __contains__(self, asset_id: object) -> bool:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class Scheduler(Protocol):
    """Runs a callback once after a delay."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None: ...
