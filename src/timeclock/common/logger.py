"""Centralized logging.

Every module asks for its logger through ``get_logger`` so handlers and format
are configured in exactly one place.
"""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "timeclock"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the package root logger (idempotent)."""
    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package root logger, e.g. ``timeclock.attendance``."""
    if name.startswith(_ROOT_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAME}.{name}")
