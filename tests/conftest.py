"""Pytest configuration for test isolation.

The CLI and config helpers read ``LEDGER_SYNC_*`` environment variables (and
a ``.env`` from the working directory). To keep tests hermetic, every test
starts with those variables cleared and runs from its own temporary directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

_ENV_VARS = (
    "LEDGER_SYNC_SOURCE_FOLDER",
    "LEDGER_SYNC_WORKBOOK",
    "LEDGER_SYNC_ENCODING",
    "LEDGER_SYNC_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
