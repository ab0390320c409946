from __future__ import annotations

import logging
import os

_LOGGER_NAME = "buildtree"
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Level comes from the argument, else BUILDTREE_LOG_LEVEL, else INFO. Safe to call repeatedly.
    """
    if level is None:
        level = os.getenv("BUILDTREE_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    if not any(getattr(h, "_buildtree", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._buildtree = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
