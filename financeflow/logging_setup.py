"""Logging for the ``financeflow`` package.

The Streamlit entry point calls :func:`configure_logging` once; every other
module only asks for a logger with ``get_logger(__name__)`` and never adds
handlers of its own. Until the app configures logging, package records are
dropped by a ``NullHandler`` instead of leaking into Streamlit's root logger.
"""

from __future__ import annotations

import logging
import os
from typing import Union

PACKAGE_LOGGER = "financeflow"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def _resolve_level(level: Union[int, str, None]) -> int:
    """Turn an int, a level name or a numeric string into a logging level.

    ``None`` falls back to ``FINANCEFLOW_LOG_LEVEL``; anything unrecognised
    means INFO.
    """
    if level is None:
        level = os.getenv("FINANCEFLOW_LOG_LEVEL")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        resolved = logging.getLevelName(name)
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


def configure_logging(level: Union[int, str, None] = None) -> None:
    """Send package records to stderr at ``level``. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(level))
    # Streamlit installs its own root handlers.
    logger.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    package = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not package.handlers:
        package.addHandler(logging.NullHandler())
    return logging.getLogger(name)
