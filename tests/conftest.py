from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tests._fixtures.tap_builder import TapBuilder

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tap_builder(tmp_path: Path) -> TapBuilder:
    """Provide a reusable tap builder rooted at the pytest tmp_path."""
    return TapBuilder(tmp_path)


@pytest.fixture
def fixed_clock():
    """Clock pinned to a known instant so time-dependent output is stable."""
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def _reset_tapdocs_logger():
    """Remove handlers installed by CLI runs."""
    yield
    logger = logging.getLogger("tapdocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
