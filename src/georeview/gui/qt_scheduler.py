"""Qt event-loop scheduler for the delayed post-commit refetch."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer


class QtScheduler(QObject):
    """Runs callbacks on the Qt thread via :meth:`QTimer.singleShot`.

    Callbacks are bound to this object's lifetime: once it is destroyed,
    pending callbacks no longer fire.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), self, callback)


__all__ = ["QtScheduler"]
