"""Tests for dbinfo.log."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dbinfo.log import configure_logging


@pytest.fixture
def dbinfo_logger():
    logger = logging.getLogger("dbinfo")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_configure_logging_does_not_duplicate_handlers(dbinfo_logger) -> None:
    configure_logging()
    configure_logging(verbose=True)

    assert len(dbinfo_logger.handlers) == 1
    assert dbinfo_logger.level == logging.DEBUG


def test_configure_logging_writes_log_file(dbinfo_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "dbinfo.log"

    configure_logging(log_file=log_file)
    logging.getLogger("dbinfo.runner").info("Java files: %d", 3)
    for handler in dbinfo_logger.handlers:
        handler.flush()

    assert "INFO dbinfo.runner: Java files: 3" in log_file.read_text(encoding="utf-8")
