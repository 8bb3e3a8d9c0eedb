import logging
from unittest.mock import MagicMock

from foreverPaws.errors import ImageLoadError
from foreverPaws.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from foreverPaws.events import EventBus


def _handler():
    logger = MagicMock(spec=logging.Logger)
    bus = EventBus()
    published = []
    bus.subscribe(ErrorOccurredEvent, published.append)
    return ErrorHandler(logger, bus), logger, published


def test_error_is_logged_published_and_shown():
    handler, logger, published = _handler()
    ui = MagicMock()
    handler.register_ui_callback(ui)
    error = ImageLoadError("Cannot decode image: rex.jpg")

    handler.handle(error, ErrorSeverity.ERROR, context={"path": "rex.jpg"})

    logger.error.assert_called_once()
    assert published[0].error is error
    assert published[0].context == {"path": "rex.jpg"}
    ui.assert_called_once_with("Cannot decode image: rex.jpg", ErrorSeverity.ERROR)


def test_warnings_do_not_reach_ui():
    handler, logger, published = _handler()
    ui = MagicMock()
    handler.register_ui_callback(ui)

    handler.handle(ValueError("odd"), ErrorSeverity.WARNING)

    logger.warning.assert_called_once()
    assert published[0].severity is ErrorSeverity.WARNING
    ui.assert_not_called()
