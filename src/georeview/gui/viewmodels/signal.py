"""Pure Python signal system used by the review view models.

``Signal`` is a small observer list and ``ObservableProperty`` a value that
announces its changes, so presentation code can bind to review state without
the view models importing Qt.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Tuple

_logger = logging.getLogger(__name__)


class Signal:
    """Observer list with copy-on-write handler storage.

    Emitting never takes the lock, so handlers may connect or disconnect
    while an emission is running; the change applies to the next emit. A
    handler that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._handlers: Tuple[Callable, ...] = ()
        self._lock = threading.Lock()

    def connect(self, handler: Callable) -> Callable:
        with self._lock:
            if handler not in self._handlers:
                self._handlers = self._handlers + (handler,)
        return handler

    def disconnect(self, handler: Callable) -> None:
        with self._lock:
            if handler not in self._handlers:
                raise ValueError(f"{handler!r} is not connected")
            self._handlers = tuple(h for h in self._handlers if h != handler)

    def is_connected(self, handler: Callable) -> bool:
        return handler in self._handlers

    def disconnect_all(self) -> None:
        with self._lock:
            self._handlers = ()

    def emit(self, *args: Any, **kwargs: Any) -> int:
        """Call every handler; returns how many completed without raising."""
        delivered = 0
        for handler in self._handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error("Signal handler %r failed: %s", handler, exc)
            else:
                delivered += 1
        return delivered

    @property
    def handler_count(self) -> int:
        return len(self._handlers)


class ObservableProperty:
    """Value holder that emits ``changed(new_value, old_value)`` on change."""

    def __init__(self, initial_value: Any = None) -> None:
        self._value = initial_value
        self.changed = Signal()

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        if self._value == new_value:
            return
        old_value, self._value = self._value, new_value
        self.changed.emit(new_value, old_value)

    def __repr__(self) -> str:
        return f"ObservableProperty({self._value!r})"
