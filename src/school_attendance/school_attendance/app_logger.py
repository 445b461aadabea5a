from __future__ import annotations

import logging
import os

LOGGER_NAME = "school_attendance"
_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> logging.Logger:
    """Library-friendly: do NOT touch root or add real handlers.

    Ensure the package logger exists, set its level and add a NullHandler to
    avoid "no handler" warnings when imported outside the Flask app.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, _DEFAULT_LEVEL, logging.INFO))
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = True
    return logger


def configure_app_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger (used by create_app)."""
    logger = logging.getLogger(LOGGER_NAME)
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_school_attendance", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._school_attendance = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        # Own handler installed; do not print twice through root.
        logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(LOGGER_NAME)
    return base.getChild(name) if name else base


logger = setup_logging()
