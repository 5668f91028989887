"""Per-file import state stored in the ``0_ImportState`` table.

Table layout (row 1 is the header)::

    | File | LastModified (ISO 8601) | Status                          |
    | ...  | ...                     | finished / processing / error   |

Only the import loop writes this table. An entry is written as
``processing`` before a file is imported and as ``finished`` afterwards; an
entry left in ``processing`` (crash, timeout, format error) is re-imported on
the next run. Re-import is idempotent, so this is the only retry mechanism.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from .config import IMPORT_STATE_TABLE
from .logging_setup import get_logger
from .models import ImportStateEntry, cell_text
from .source import SourceFile
from .store import Spreadsheet

_logger = get_logger("ledger_sync.state")

STATE_HEADER = ["File", "LastModified", "Status"]


class ImportDecision(enum.Enum):
    NEW = "new"
    STALE = "stale"
    UP_TO_DATE = "up_to_date"


class ImportStateTracker:
    def __init__(self, store: Spreadsheet, *, table: str = IMPORT_STATE_TABLE) -> None:
        self.store = store
        self.table = table
        self.store.ensure_table(table)
        if self.store.last_row(table) == 0:
            self.store.set_row(table, 1, STATE_HEADER)

    def load(self) -> dict[str, ImportStateEntry]:
        """Return ``{file name: entry}`` for every data row."""

        entries: dict[str, ImportStateEntry] = {}
        for i, row in enumerate(self.store.get_values(self.table)[1:], start=2):
            cells = list(row) + [None] * (3 - len(row))
            name = cell_text(cells[0])
            if not name:
                continue
            entries[name] = ImportStateEntry(file=name, modified_at=cells[1], status=cells[2], row=i)
        return entries

    def save(self, entry: ImportStateEntry) -> ImportStateEntry:
        """Overwrite the entry's row, or append it when it has none yet."""

        _logger.debug("Import state %s -> %s", entry.file, entry.status)
        if entry.row is None:
            row = self.store.append_row(self.table, entry.to_row())
            return entry.model_copy(update={"row": row})
        self.store.set_row(self.table, entry.row, entry.to_row())
        return entry

    @staticmethod
    def new_entry(file: SourceFile) -> ImportStateEntry:
        return ImportStateEntry(file=file.name, modified_at=file.modified_at, status="processing")

    @staticmethod
    def decide(file: SourceFile, entries: dict[str, ImportStateEntry]) -> ImportDecision:
        last = entries.get(file.name)
        if last is None:
            return ImportDecision.NEW
        if last.status != "finished" or last.modified_at < _aware(file.modified_at):
            return ImportDecision.STALE
        return ImportDecision.UP_TO_DATE


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


__all__ = ["ImportDecision", "ImportStateTracker", "STATE_HEADER"]
