"""Tests for the logging setup."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from logging_utils import LOG_FORMAT, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    urllib3_level = logging.getLogger("urllib3").level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.getLogger("urllib3").setLevel(urllib3_level)


def test_setup_logging_is_idempotent() -> None:
    """Repeated setup keeps a single stream handler."""
    setup_logging(level="debug")
    setup_logging(level="debug")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
    assert root.handlers[0].formatter._fmt == LOG_FORMAT  # pylint: disable=protected-access


def test_setup_logging_unknown_level_falls_back_to_info() -> None:
    """A typo in LOG_LEVEL does not break startup."""
    setup_logging(level="chatty")

    assert logging.getLogger().level == logging.INFO


def test_setup_logging_writes_rotating_file(tmp_path: Path) -> None:
    """--log-file adds a rotating file handler, creating the directory."""
    log_file = tmp_path / "logs" / "checker.log"

    setup_logging(log_file=str(log_file))
    logging.getLogger("poll_loop").info("fetched products total=3 new=1")
    for h in logging.getLogger().handlers:
        h.flush()

    assert any(isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers)
    assert "fetched products total=3 new=1" in log_file.read_text(encoding="utf-8")


def test_setup_logging_quiets_http_client_logs() -> None:
    """urllib3 stays at WARNING even when the checker runs at DEBUG."""
    setup_logging(level="DEBUG")

    assert logging.getLogger("urllib3").level == logging.WARNING
