"""Filter-scoped, page-by-page accumulation of search results.

Pages are requested from an ``IAssetStore`` one at a time and appended to an
explicit accumulated list, so the set of loaded assets only grows until
:meth:`ResultAccumulator.reset` is called.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from georeview.domain.models import Asset, FilterCriteria, SearchPage
from georeview.domain.ports import IAssetStore
from georeview.errors import BusyError, FetchError

LOGGER = logging.getLogger(__name__)


class ResultAccumulator:
    """Stateful paginated result set.

    ``page`` is the next page to request. It only grows through
    :meth:`fetch_next` and is moved elsewhere only by :meth:`reset`.
    """

    def __init__(self, store: IAssetStore, criteria: FilterCriteria) -> None:
        self._store = store
        self._criteria = criteria

        # State
        self._items: List[Asset] = []
        self._ids: set[str] = set()
        self._page: int = 1
        self._has_next_page: bool = False
        self._fetched: bool = False
        self._generation: int = 0

        self._flight_lock = threading.Lock()
        self._inflight: Optional[Tuple[FilterCriteria, int]] = None

    # -- properties --------------------------------------------------------

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def items(self) -> List[Asset]:
        return list(self._items)

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._criteria.page_size

    @property
    def has_next_page(self) -> bool:
        return self._has_next_page

    @property
    def exhausted(self) -> bool:
        """True once a fetch since the last reset reported no further pages."""
        return self._fetched and not self._has_next_page

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None

    def __len__(self) -> int:
        return len(self._items)

    # -- public API --------------------------------------------------------

    def reset(self, criteria: Optional[FilterCriteria] = None, page: int = 1) -> None:
        """Drop every accumulated item and position the cursor at *page*.

        A fetch that is still in flight when the reset happens will discard
        its result instead of appending it to the new accumulation.
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if criteria is not None:
            self._criteria = criteria
        self._items.clear()
        self._ids.clear()
        self._page = page
        self._has_next_page = False
        self._fetched = False
        self._generation += 1
        LOGGER.debug("Accumulator reset to page %d (generation %d)", page, self._generation)

    def fetch_next(self) -> SearchPage:
        """Request the current page and **append** the unseen items.

        Returns the store's page; ``items`` only holds the assets that were
        actually appended. Raises :class:`FetchError` when the store fails,
        leaving the accumulation untouched, and :class:`BusyError` when
        another fetch is still running.
        """
        criteria = self._criteria
        page = self._page
        key = (criteria, page)
        with self._flight_lock:
            if self._inflight is not None:
                raise BusyError(f"A fetch is already in flight for page {self._inflight[1]}", key=self._inflight)
            self._inflight = key
            generation = self._generation

        try:
            try:
                result = self._store.search(criteria, page, criteria.page_size)
            except Exception as exc:
                LOGGER.error("Fetching page %d failed: %s", page, exc)
                raise FetchError(f"Failed to fetch page {page}: {exc}", page=page) from exc

            if generation != self._generation:
                LOGGER.debug("Discarding page %d fetched before a reset", page)
                return SearchPage(items=[], has_next_page=self._has_next_page)

            appended = self._append(result.items)
            self._has_next_page = bool(result.has_next_page)
            self._fetched = True
            self._page = page + 1
            LOGGER.debug(
                "Fetched page %d: %d returned, %d appended, has_next_page=%s",
                page,
                len(result.items),
                len(appended),
                self._has_next_page,
            )
            return SearchPage(items=appended, has_next_page=self._has_next_page)
        finally:
            with self._flight_lock:
                self._inflight = None

    # -- internal ----------------------------------------------------------

    def _append(self, assets: List[Asset]) -> List[Asset]:
        """Append assets whose ids are not yet accumulated, keeping store order."""
        appended: List[Asset] = []
        for asset in assets:
            if asset.id in self._ids:
                continue
            self._ids.add(asset.id)
            self._items.append(asset)
            appended.append(asset)
        return appended


__all__ = ["ResultAccumulator"]
