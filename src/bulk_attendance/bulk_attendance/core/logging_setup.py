from __future__ import annotations

import logging

from .constants import LOG_FORMAT

# "<...>.bulk_attendance.core.logging_setup" -> "<...>.bulk_attendance"
PACKAGE_LOGGER = __name__.rsplit(".", 2)[0]


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Safe to call more than once (e.g. one Flask app per test).
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(getattr(h, "_bulk_attendance", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._bulk_attendance = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
