"""Central reporting of review failures: log, publish, notify the UI."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from georeview.errors import BusyError, DomainError
from georeview.events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def default_severity(error: BaseException) -> ErrorSeverity:
    """Rejected user decisions are warnings, overlapping operations are informational."""
    if isinstance(error, BusyError):
        return ErrorSeverity.INFO
    if isinstance(error, DomainError):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)

    @property
    def operation(self) -> Optional[str]:
        return self.context.get("operation")


UICallback = Callable[[str, ErrorSeverity], None]


class ErrorHandler:
    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callbacks: List[UICallback] = []

    def register_ui_callback(self, callback: UICallback) -> None:
        if callback not in self._ui_callbacks:
            self._ui_callbacks.append(callback)

    def unregister_ui_callback(self, callback: UICallback) -> None:
        if callback in self._ui_callbacks:
            self._ui_callbacks.remove(callback)

    def handle(
        self,
        error: Exception,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> ErrorSeverity:
        severity = severity or default_severity(error)
        context = dict(context or {})

        log_method = getattr(self._logger, severity.value, self._logger.error)
        # ``extra`` keys must not collide with LogRecord attributes.
        log_method(
            "%s: %s",
            error.__class__.__name__,
            error,
            extra={"review_context": context},
            exc_info=error if severity is ErrorSeverity.CRITICAL else None,
        )

        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            for callback in list(self._ui_callbacks):
                callback(str(error), severity)
        return severity
