from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from spacescan.log import PACKAGE_LOGGER, configure_logging


@pytest.fixture
def clean_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = list(logger.handlers), logger.level
    yield logger
    for h in list(logger.handlers):
        if h not in saved[0]:
            logger.removeHandler(h)
            h.close()
    logger.setLevel(saved[1])
    if hasattr(logger, "_spacescan_configured"):
        delattr(logger, "_spacescan_configured")


def test_configure_is_idempotent(clean_logger: logging.Logger) -> None:
    configure_logging("debug")
    count = len(clean_logger.handlers)
    configure_logging(logging.WARNING)

    assert len(clean_logger.handlers) == count
    assert clean_logger.level == logging.DEBUG


def test_force_replaces_handlers_and_adds_file(clean_logger: logging.Logger, tmp_path: Path) -> None:
    configure_logging()
    before = len(clean_logger.handlers)
    log_file = tmp_path / "logs" / "spacescan.log"
    configure_logging(logging.INFO, log_file=str(log_file), force=True)

    assert len(clean_logger.handlers) == before + 1
    logging.getLogger("spacescan.engine").info("hello from the engine")
    for h in clean_logger.handlers:
        h.flush()
    assert "hello from the engine" in log_file.read_text(encoding="utf-8")


def test_package_exports_setup_hook(clean_logger: logging.Logger) -> None:
    import spacescan

    assert spacescan.configure_logging is configure_logging
    assert spacescan.configure_logging("info") is clean_logger
    assert getattr(clean_logger, "_spacescan_configured", False)
