"""Process-wide logging setup for the checker."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Chatty at DEBUG: one line per HTTP connection to Home Assistant.
NOISY_LOGGERS = ("urllib3",)


def setup_logging(
    *,
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 5,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Log to stderr and, with `log_file`, to a size-rotated file.

    An unknown `level` falls back to INFO. Loggers named in `quiet` are
    held at WARNING regardless of `level`.
    """
    root = logging.getLogger()

    # Avoid duplicate handlers when setup runs more than once.
    for h in list(root.handlers):
        root.removeHandler(h)

    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
