"""Logging for ``ledger_sync``.

Modules log through ``get_logger("ledger_sync.<module>")`` and never add
handlers of their own. The CLI calls :func:`configure_logging` at the start of
every command; a host application embedding the package routes the
``ledger_sync`` logger however it likes.
"""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "ledger_sync"
LOG_LEVEL_ENV = "LEDGER_SYNC_LOG_LEVEL"

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_handler: logging.Handler | None = None

# Silent until configured
logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def resolve_level(level: int | str | None = None) -> int:
    """Level from the argument, else ``LEDGER_SYNC_LOG_LEVEL``, else INFO.

    Accepts level names in any case and numeric strings; raises ``ValueError``
    for anything else.
    """

    value = level if level is not None else os.getenv(LOG_LEVEL_ENV) or "INFO"
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelNamesMapping().get(name)
    if resolved is None:
        raise ValueError(f"Unknown log level: {value!r}")
    return resolved


def configure_logging(level: int | str | None = None) -> None:
    """Print ``ledger_sync`` records to the current stderr at ``level``.

    A repeated call replaces the handler installed by the previous one.
    """

    global _handler
    logger = logging.getLogger(ROOT_LOGGER)
    resolved = resolve_level(level)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(resolved)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
