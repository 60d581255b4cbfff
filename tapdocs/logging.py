"""Logging setup shared by the tapdocs CLI and preview server."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "tapdocs"
CONSOLE_FORMAT = "[tapdocs] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``tapdocs.<component>`` (or the root tapdocs logger)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}" if component else ROOT_LOGGER)


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optionally file) handlers on the tapdocs logger.

    Existing handlers are replaced, so calling this once per command is safe
    even when several commands run in the same interpreter.
    """
    level = resolve_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        # The file keeps debug detail even when the console is quiet.
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)
        logger.setLevel(logging.DEBUG)

    return logger


def server_log_level(logger: logging.Logger | None = None) -> str:
    """Map the tapdocs console level onto a uvicorn ``log_level`` name."""
    logger = logger or logging.getLogger(ROOT_LOGGER)
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            return logging.getLevelName(handler.level).lower()
    return logging.getLevelName(logger.getEffectiveLevel()).lower()


__all__ = [
    "CONSOLE_FORMAT",
    "ROOT_LOGGER",
    "configure_logging",
    "get_logger",
    "resolve_level",
    "server_log_level",
]
