"""In-process publish/subscribe bus for review session events.

A subscription to an event class also receives its subclasses, so a
subscriber of :class:`Event` observes everything a session publishes.
"""

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base class of everything published on the bus."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(eq=False)
class Subscription:
    """Handle returned by subscribe(); cancel() stops delivery immediately."""
    event_type: Type[Event]
    handler: Callable[[Event], None]
    async_: bool = False
    active: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def cancel(self) -> None:
        self.active = False

    def accepts(self, event: Event) -> bool:
        return self.active and isinstance(event, self.event_type)


class EventBus:
    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 2):
        self._logger = logger or logging.getLogger(__name__)
        self._subscriptions: List[Subscription] = []
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, async_=async_)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.cancel()
        with self._lock:
            self._subscriptions = [sub for sub in self._subscriptions if sub is not subscription]

    def subscriber_count(self, event_type: Type[Event]) -> int:
        with self._lock:
            return sum(1 for sub in self._subscriptions if sub.active and issubclass(event_type, sub.event_type))

    def publish(self, event: Event) -> None:
        """Deliver *event* inline to sync subscribers, via the pool to async ones."""
        for sub in self._matching(event):
            if sub.async_:
                self._pool().submit(self._deliver, sub, event)
            else:
                self._deliver(sub, event)

    def publish_async(self, event: Event) -> List[Future]:
        """Run every matching handler on the pool and return the futures."""
        return [self._pool().submit(self._deliver, sub, event) for sub in self._matching(event)]

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def _matching(self, event: Event) -> List[Subscription]:
        with self._lock:
            return [sub for sub in self._subscriptions if sub.accepts(event)]

    def _deliver(self, sub: Subscription, event: Event) -> None:
        # Re-checked here: an async delivery may run after cancel().
        if not sub.active:
            return
        try:
            sub.handler(event)
        except Exception as exc:
            self._logger.error("Handler for %s failed: %s", type(event).__name__, exc)

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="georeview-events"
                )
            return self._executor
