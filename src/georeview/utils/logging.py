"""Package-wide logger helpers."""

from __future__ import annotations

import logging
from typing import Optional

LOGGER_NAME = "georeview"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child of it when *name* is given."""

    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling this repeatedly only adjusts the level; the handler is installed
    once so command line invocations inside tests do not duplicate output.
    """

    logger = get_logger()
    logger.setLevel(level)
    if not any(getattr(h, "_georeview_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._georeview_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging", "get_logger"]
