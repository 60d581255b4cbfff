"""Tests for tapdocs.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tapdocs.logging import configure_logging, get_logger, resolve_level, server_log_level


def test_get_logger_nests_under_tapdocs() -> None:
    assert get_logger("watcher").name == "tapdocs.watcher"
    assert get_logger().name == "tapdocs"


@pytest.mark.parametrize(
    ("verbose", "quiet", "expected"),
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_resolve_level(verbose: bool, quiet: bool, expected: int) -> None:
    assert resolve_level(verbose=verbose, quiet=quiet) == expected


def test_repeated_configuration_keeps_one_console_handler() -> None:
    configure_logging()
    logger = configure_logging(quiet=True)

    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert server_log_level(logger) == "warning"


def test_log_file_receives_debug_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "tapdocs.log"
    configure_logging(quiet=True, log_file=log_file)

    get_logger("test").debug("detail for the file")
    for handler in logging.getLogger("tapdocs").handlers:
        handler.flush()

    assert "DEBUG tapdocs.test: detail for the file" in log_file.read_text(encoding="utf-8")
    assert server_log_level() == "warning"
