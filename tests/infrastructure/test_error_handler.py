import logging
from unittest.mock import Mock

import pytest

from georeview.errors import BusyError, CandidateNotPendingError, FetchError
from georeview.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity, default_severity
from georeview.events.bus import EventBus


def test_handle_error_logs_and_publishes():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    handler = ErrorHandler(logger, event_bus)

    error = FetchError("page 3 failed", page=3)
    handler.handle(error, ErrorSeverity.ERROR, {"operation": "fetch"})

    logger.error.assert_called_once()
    assert logger.error.call_args.kwargs["extra"] == {"review_context": {"operation": "fetch"}}

    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR
    assert event.context == {"operation": "fetch"}


def test_warning_uses_warning_level():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger, Mock(spec=EventBus))

    handler.handle(ValueError("odd"), ErrorSeverity.WARNING)

    logger.warning.assert_called_once()
    logger.error.assert_not_called()


def test_ui_callback():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger, Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(RuntimeError("ui error"), ErrorSeverity.CRITICAL)

    callback.assert_called_with("ui error", ErrorSeverity.CRITICAL)


def test_ignore_info_severity_in_ui():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(Exception("info"), ErrorSeverity.INFO)

    callback.assert_not_called()


def test_context_is_copied():
    context = {"page": 1}
    received = []
    bus = EventBus()
    bus.subscribe(ErrorOccurredEvent, received.append)
    handler = ErrorHandler(Mock(spec=logging.Logger), bus)

    handler.handle(ValueError("x"), context=context)
    context["page"] = 2

    assert received[0].context == {"page": 1}


@pytest.mark.parametrize(
    "error, expected",
    [
        (CandidateNotPendingError("x"), ErrorSeverity.WARNING),
        (BusyError("x"), ErrorSeverity.INFO),
        (FetchError("x", page=1), ErrorSeverity.ERROR),
        (ValueError("x"), ErrorSeverity.ERROR),
    ],
)
def test_default_severity(error, expected):
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))

    assert default_severity(error) is expected
    assert handler.handle(error) is expected


def test_every_ui_callback_is_notified_once():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    first, second = Mock(), Mock()
    handler.register_ui_callback(first)
    handler.register_ui_callback(first)
    handler.register_ui_callback(second)
    handler.unregister_ui_callback(second)

    handler.handle(RuntimeError("boom"))

    first.assert_called_once_with("boom", ErrorSeverity.ERROR)
    second.assert_not_called()
