from .bus import Event, EventBus, Subscription
from .review_events import (
    AssetsHiddenEvent,
    AssetsUnhiddenEvent,
    EditsCommittedEvent,
    PageFetchedEvent,
)

__all__ = [
    "AssetsHiddenEvent",
    "AssetsUnhiddenEvent",
    "EditsCommittedEvent",
    "Event",
    "EventBus",
    "PageFetchedEvent",
    "Subscription",
]
