"""BaseViewModel with subscription and connection bookkeeping."""

from __future__ import annotations

from typing import Callable, List, Tuple, Type

from georeview.events.bus import EventBus, Subscription
from georeview.gui.viewmodels.signal import Signal


class BaseViewModel:
    """Tracks bus subscriptions and signal connections so ``dispose()`` drops them together."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._connections: List[Tuple[Signal, Callable]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        sub = event_bus.subscribe(event_type, handler)
        self._subscriptions.append(sub)
        return sub

    def connect_signal(self, signal: Signal, handler: Callable) -> Callable:
        signal.connect(handler)
        self._connections.append((signal, handler))
        return handler

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        for signal, handler in self._connections:
            if signal.is_connected(handler):
                signal.disconnect(handler)
        self._connections.clear()
        self._disposed = True
