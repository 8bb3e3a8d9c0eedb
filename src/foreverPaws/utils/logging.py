"""Logging helpers for Forever Paws."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None

LOGGER_NAME = "foreverPaws"


def get_logger(level: Optional[int] = None) -> logging.Logger:
    """Return the package logger, installing a stream handler on first use.

    The level defaults to ``INFO`` when the logger is first configured and is
    only changed afterwards when *level* is given.
    """

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(LOGGER_NAME)
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            handler.setFormatter(formatter)
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(logging.INFO)
    if level is not None:
        _LOGGER.setLevel(level)
    return _LOGGER
