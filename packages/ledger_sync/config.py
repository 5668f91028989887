"""Central configuration: table names, schema labels and environment lookups.

Environment variables (a local ``.env`` is loaded by the CLI):

- ``LEDGER_SYNC_SOURCE_FOLDER``: folder holding exported CSV files. Treated as
  a secret and never committed.
- ``LEDGER_SYNC_WORKBOOK``: path of the ``.xlsx`` workbook (``ledger.xlsx``).
- ``LEDGER_SYNC_ENCODING``: text encoding of the CSV exports (``shift_jis``).
"""

from __future__ import annotations

import os
from pathlib import Path

IMPORT_STATE_TABLE = "0_ImportState"
CATEGORY_TABLE = "0_Category"
PERIOD_TABLE_PREFIX = "Import_"

SUMMARY_TABLE = "Z_Summary"
CATEGORY_SUMMARY_TABLE = "Z_Category"
ALL_ITEMS_TABLE = "Z_All"
ALL_ITEMS_REPEATED_TABLE = "Z_AllRepeated"

DEFAULT_ENCODING = "shift_jis"
DEFAULT_WORKBOOK = "ledger.xlsx"

# Column width bounds (pixels) applied after each import
MIN_COLUMN_WIDTH = 50
MAX_COLUMN_WIDTH = 300

CATEGORY_SEPARATOR = "_"

MONEYFORWARD_CSV_URL = "https://moneyforward.com/cf/csv?from={year}%2F{month:02d}%2F01&month={month:02d}&year={year}"


def source_folder(override: str | None = None) -> Path:
    """Return the configured source folder, preferring ``override``."""

    value = override or os.getenv("LEDGER_SYNC_SOURCE_FOLDER")
    if not value or not value.strip():
        raise RuntimeError("LEDGER_SYNC_SOURCE_FOLDER is not set; cannot locate exported CSV files")
    return Path(value.strip()).expanduser()


def workbook_path(override: str | os.PathLike[str] | None = None) -> Path:
    value = override or os.getenv("LEDGER_SYNC_WORKBOOK") or DEFAULT_WORKBOOK
    return Path(value).expanduser()


def source_encoding(override: str | None = None) -> str:
    return (override or os.getenv("LEDGER_SYNC_ENCODING") or DEFAULT_ENCODING).strip()


__all__ = [
    "IMPORT_STATE_TABLE",
    "CATEGORY_TABLE",
    "PERIOD_TABLE_PREFIX",
    "SUMMARY_TABLE",
    "CATEGORY_SUMMARY_TABLE",
    "ALL_ITEMS_TABLE",
    "ALL_ITEMS_REPEATED_TABLE",
    "DEFAULT_ENCODING",
    "DEFAULT_WORKBOOK",
    "MIN_COLUMN_WIDTH",
    "MAX_COLUMN_WIDTH",
    "CATEGORY_SEPARATOR",
    "MONEYFORWARD_CSV_URL",
    "source_folder",
    "workbook_path",
    "source_encoding",
]
