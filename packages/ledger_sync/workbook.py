"""``.xlsx`` workbook implementation of the spreadsheet store (openpyxl).

The workbook is loaded once and written back on :meth:`WorkbookSpreadsheet.flush`.
The import loop flushes after each import-state transition, so an interrupted
run keeps every file that was already committed.
"""

from __future__ import annotations

from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Protection
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .logging_setup import get_logger
from .store import sort_key

_logger = get_logger("ledger_sync.workbook")

# Rough pixel width of one character in the default font
_PX_PER_CHAR = 7
_PADDING_PX = 10


def _trim(row: Sequence[Any]) -> list[Any]:
    cells = list(row)
    while cells and cells[-1] is None:
        cells.pop()
    return cells


class WorkbookSpreadsheet:
    """Spreadsheet store persisted as an ``.xlsx`` file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        if self.path.exists():
            self._wb = load_workbook(self.path)
            _logger.debug("Loaded workbook %s (%d sheets)", self.path, len(self._wb.sheetnames))
        else:
            self._wb = Workbook()
            # Drop the default "Sheet"; tables are created on demand
            self._wb.remove(self._wb.active)
            _logger.info("Creating new workbook %s", self.path)
        # Used-range height per sheet, filled on first use and kept current by writes
        self._last_rows: dict[str, int] = {}

    def _ws(self, name: str) -> Worksheet:
        if name not in self._wb.sheetnames:
            raise KeyError(f"No such table: {name!r}")
        return self._wb[name]

    def table_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def has_table(self, name: str) -> bool:
        return name in self._wb.sheetnames

    def ensure_table(self, name: str) -> bool:
        if self.has_table(name):
            return False
        self._wb.create_sheet(title=name)
        _logger.debug("Created sheet %s", name)
        return True

    def get_values(self, name: str) -> list[list[Any]]:
        rows = [_trim(r) for r in self._ws(name).iter_rows(values_only=True)]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def last_row(self, name: str) -> int:
        if name not in self._last_rows:
            self._last_rows[name] = len(self.get_values(name))
        return self._last_rows[name]

    def set_row(self, name: str, row: int, values: Sequence[Any], *, start_col: int = 1) -> None:
        if row < 1 or start_col < 1:
            raise ValueError("row and start_col are 1-based")
        ws = self._ws(name)
        for offset, value in enumerate(values):
            ws.cell(row=row, column=start_col + offset, value=value)
        if name not in self._last_rows:
            return
        if any(v is not None for v in values):
            self._last_rows[name] = max(self._last_rows[name], row)
        elif row == self._last_rows[name]:
            # The last row may have been blanked out
            del self._last_rows[name]

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        row = self.last_row(name) + 1
        self.set_row(name, row, values)
        return row

    def clear_table(self, name: str) -> None:
        ws = self._ws(name)
        if ws.max_row:
            ws.delete_rows(1, ws.max_row)
        self._last_rows[name] = 0

    def sort_rows(self, name: str, *, key_col: int, start_row: int = 2) -> None:
        ws = self._ws(name)
        rows = self.get_values(name)
        body = rows[start_row - 1 :]
        if len(body) < 2:
            return
        width = max(len(r) for r in body)
        body.sort(key=lambda r: sort_key(r[key_col] if key_col < len(r) else None))
        for i, values in enumerate(body):
            padded = values + [None] * (width - len(values))
            for j, value in enumerate(padded):
                ws.cell(row=start_row + i, column=j + 1, value=value)
        self._last_rows.pop(name, None)

    def sort_tables(self) -> bool:
        names = list(self._wb.sheetnames)
        ordered = sorted(names)
        if names == ordered:
            return False
        for target, name in enumerate(ordered):
            current = self._wb.sheetnames.index(name)
            if current != target:
                self._wb.move_sheet(name, offset=target - current)
        return True

    def protect_columns(self, name: str, n_cols: int) -> None:
        """Lock the first ``n_cols`` columns and turn on sheet protection.

        Cells to the right stay editable. Filtering, sorting and column
        resizing remain allowed on the protected sheet.
        """

        ws = self._ws(name)
        for row in ws.iter_rows(min_row=1, max_row=ws.max_row, max_col=ws.max_column):
            for cell in row:
                cell.protection = Protection(locked=cell.column <= n_cols)
        ws.protection.autoFilter = False
        ws.protection.sort = False
        ws.protection.formatColumns = False
        ws.protection.enable()

    def reset_filter(self, name: str) -> None:
        ws = self._ws(name)
        ws.auto_filter.ref = None
        rows = self.get_values(name)
        if not rows:
            return
        width = max(len(r) for r in rows) or 1
        ws.auto_filter.ref = f"A1:{get_column_letter(width)}{len(rows)}"

    def auto_resize_columns(self, name: str, *, min_width: int, max_width: int) -> None:
        ws = self._ws(name)
        widths: dict[int, int] = {}
        for row in self.get_values(name):
            for j, value in enumerate(row):
                text = "" if value is None else str(value)
                widths[j] = max(widths.get(j, 0), len(text))
        for j, chars in widths.items():
            px = chars * _PX_PER_CHAR + _PADDING_PX
            if min_width > 0 and px < min_width:
                px = min_width
            elif max_width > 0 and px > max_width:
                px = max_width
            ws.column_dimensions[get_column_letter(j + 1)].width = px / _PX_PER_CHAR

    def flush(self) -> None:
        if not self._wb.sheetnames:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._wb.save(self.path)


__all__ = ["WorkbookSpreadsheet"]
