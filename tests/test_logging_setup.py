from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest

from ledger_sync import logging_setup


@pytest.fixture
def root_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    logger = logging.getLogger(logging_setup.ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_handler", None)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("15", 15), (logging.ERROR, logging.ERROR)],
)
def test_resolve_level_accepts_names_and_numbers(level, expected):
    assert logging_setup.resolve_level(level) == expected


def test_resolve_level_falls_back_to_env_then_info(monkeypatch: pytest.MonkeyPatch):
    assert logging_setup.resolve_level() == logging.INFO
    monkeypatch.setenv("LEDGER_SYNC_LOG_LEVEL", "error")
    assert logging_setup.resolve_level() == logging.ERROR
    assert logging_setup.resolve_level("debug") == logging.DEBUG


def test_resolve_level_rejects_unknown_names():
    with pytest.raises(ValueError):
        logging_setup.resolve_level("chatty")


def test_configure_logging_writes_to_current_stderr(root_logger, monkeypatch: pytest.MonkeyPatch):
    first, second = io.StringIO(), io.StringIO()

    monkeypatch.setattr("sys.stderr", first)
    logging_setup.configure_logging("info")
    monkeypatch.setattr("sys.stderr", second)
    logging_setup.configure_logging("warning")

    logging_setup.get_logger("ledger_sync.test").warning("sheet sorted")

    assert first.getvalue() == ""
    assert "ledger_sync.test: sheet sorted" in second.getvalue()
    assert root_logger.level == logging.WARNING
    assert not root_logger.propagate
    stream_handlers = [h for h in root_logger.handlers if type(h) is logging.StreamHandler]
    assert len(stream_handlers) == 1


def test_bad_level_leaves_logging_untouched(root_logger):
    before = list(root_logger.handlers)
    with pytest.raises(ValueError):
        logging_setup.configure_logging("loud")
    assert root_logger.handlers == before
