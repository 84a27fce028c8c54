"""Status-line ViewModel fed by review session events."""

from __future__ import annotations

from typing import Optional

from georeview.errors.handler import ErrorOccurredEvent
from georeview.events.bus import EventBus
from georeview.events.review_events import (
    AssetsHiddenEvent,
    AssetsUnhiddenEvent,
    EditsCommittedEvent,
    PageFetchedEvent,
)
from georeview.gui.viewmodels.base import BaseViewModel
from georeview.gui.viewmodels.review_viewmodel import ReviewViewModel
from georeview.gui.viewmodels.signal import ObservableProperty


class ReviewStatusViewModel(BaseViewModel):
    """Keeps a one-line summary of the latest session activity."""

    def __init__(self, event_bus: EventBus, review: Optional[ReviewViewModel] = None) -> None:
        super().__init__()
        self.message = ObservableProperty("")
        self.last_error = ObservableProperty(None)
        self.committed_total = ObservableProperty(0)
        self.busy = ObservableProperty(False)

        if review is not None:
            self.connect_signal(review.loading.changed, self._on_busy_changed)
            self.connect_signal(review.committing.changed, self._on_busy_changed)

        self.subscribe_event(event_bus, PageFetchedEvent, self._on_page_fetched)
        self.subscribe_event(event_bus, EditsCommittedEvent, self._on_committed)
        self.subscribe_event(event_bus, AssetsHiddenEvent, self._on_hidden)
        self.subscribe_event(event_bus, AssetsUnhiddenEvent, self._on_unhidden)
        self.subscribe_event(event_bus, ErrorOccurredEvent, self._on_error)

    def _on_busy_changed(self, active: bool, _previous: bool) -> None:
        self.busy.value = active
        if active:
            self.message.value = "Working..."

    def _on_page_fetched(self, event: PageFetchedEvent) -> None:
        more = "more available" if event.has_next_page else "no more pages"
        self.message.value = f"Loaded page {event.page}: {event.item_count} assets ({more})"

    def _on_committed(self, event: EditsCommittedEvent) -> None:
        self.committed_total.value = self.committed_total.value + len(event.committed_ids)
        text = f"Saved {len(event.committed_ids)} locations"
        if event.hidden_ids:
            text += f", hid {len(event.hidden_ids)}"
        # The store geocodes asynchronously, committed assets may linger briefly.
        self.message.value = text + ". Refresh if items still show without a location."

    def _on_hidden(self, event: AssetsHiddenEvent) -> None:
        self.message.value = f"Hid {len(event.asset_ids)} assets"

    def _on_unhidden(self, event: AssetsUnhiddenEvent) -> None:
        self.message.value = f"Restored {len(event.asset_ids)} hidden assets"

    def _on_error(self, event: ErrorOccurredEvent) -> None:
        self.last_error.value = event.error
        self.message.value = f"Error: {event.error}"
