"""CSV import and reconciliation into period tables.

Contract
--------
- The source file name must look like ``<prefix>_<YYYY-MM-DD>_<YYYY-MM-DD>.<ext>``
  with both dates in the same calendar month (e.g.
  ``収入・支出詳細_2021-11-01_2021-11-30.csv``). Rows go to the period table
  ``Import_<YYYY>_<MM>``, created on first use.
- The content is decoded with the configured encoding (Shift-JIS for
  MoneyForward exports) and read with :mod:`csv`. The first row is the header
  and every row must have exactly ten cells.
- Rows are upserted by ID, append-only: a row whose ID is already in the table
  is left untouched, so hand-edited extension cells survive re-imports and an
  unchanged file re-imports as a no-op.

Appends are immediate. When a malformed row aborts an import, rows appended
before it stay in the table; re-importing the fixed file only adds the rest.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date

from .categories import CategoryRegistry
from .config import DEFAULT_ENCODING, MAX_COLUMN_WIDTH, MIN_COLUMN_WIDTH, PERIOD_TABLE_PREFIX
from .errors import FormatError
from .logging_setup import get_logger
from .models import (
    COLUMN,
    EXTENSION_HEADERS,
    FIXED_FIELD_COUNT,
    ImportedRecord,
    TableHeader,
    cell_text,
)
from .source import SourceFile
from .store import Spreadsheet

_logger = get_logger("ledger_sync.importer")

_FILENAME_RE = re.compile(
    r"^.+_(?P<start>\d{4}-\d{2}-\d{2})_(?P<end>\d{4}-\d{2}-\d{2})\.[A-Za-z0-9]+$"
)


@dataclass(frozen=True, slots=True)
class Period:
    year: int
    month: int

    @property
    def table_name(self) -> str:
        return f"{PERIOD_TABLE_PREFIX}{self.year}_{self.month:02d}"


@dataclass(frozen=True, slots=True)
class ImportResult:
    file: str
    table_name: str
    appended: int
    skipped: int


def parse_period(filename: str) -> Period:
    """Return the calendar month covered by an export file name.

    Raises ``FormatError`` when the name does not match or the two dates fall
    in different months.
    """

    m = _FILENAME_RE.match(filename)
    if m is None:
        raise FormatError(f"Invalid file name format: {filename}", file=filename)
    try:
        start = date.fromisoformat(m.group("start"))
        end = date.fromisoformat(m.group("end"))
    except ValueError:
        raise FormatError(f"Invalid file name format: {filename}", file=filename) from None
    if (start.year, start.month) != (end.year, end.month):
        raise FormatError(
            f"Invalid file name format: {filename} spans more than one month", file=filename
        )
    return Period(start.year, start.month)


def decode_csv(
    data: bytes, *, file: str, encoding: str = DEFAULT_ENCODING
) -> tuple[TableHeader, Iterator[ImportedRecord]]:
    """Split an export into its header and a lazy stream of records.

    Width and value errors surface as ``FormatError`` while iterating, naming
    the file and the row index (the header is row 0).
    """

    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise FormatError(f"Cannot decode {file} as {encoding}: {e}", file=file) from e

    reader = csv.reader(io.StringIO(text, newline=""))
    first = next(reader, None)
    if first is None:
        raise FormatError(f"CSV appears to have no header row: {file}", file=file, row=0)
    header = TableHeader.from_cells(first, file=file)

    def _records() -> Iterator[ImportedRecord]:
        for i, cells in enumerate(reader, start=1):
            if not cells:
                continue
            yield ImportedRecord.from_csv_row(cells, file=file, row=i)

    return header, _records()


class CsvImporter:
    """Upsert export files into period tables and refresh the category registry."""

    def __init__(
        self,
        store: Spreadsheet,
        *,
        registry: CategoryRegistry | None = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.store = store
        self.registry = registry or CategoryRegistry(store)
        self.encoding = encoding

    def _index_ids(self, table: str) -> dict[str, int]:
        id_col = COLUMN["id"]
        index: dict[str, int] = {}
        for row_no, row in enumerate(self.store.get_values(table)[1:], start=2):
            if id_col < len(row):
                index.setdefault(cell_text(row[id_col]), row_no)
        return index

    def import_file(self, file: SourceFile) -> ImportResult:
        period = parse_period(file.name)
        table = period.table_name
        if self.store.ensure_table(table):
            _logger.info("Created period table %s", table)

        id_to_row = self._index_ids(table)
        header, records = decode_csv(file.read(), file=file.name, encoding=self.encoding)
        if self.store.last_row(table) == 0:
            self.store.set_row(table, 1, header.extended())

        appended = skipped = 0
        for record in records:
            if record.id in id_to_row:
                skipped += 1
                continue
            id_to_row[record.id] = self.store.append_row(table, record.to_fixed_row())
            appended += 1

        self._update_table_settings(table)
        self.registry.upsert(table)

        _logger.info("Imported %s into %s: %d appended, %d unchanged", file.name, table, appended, skipped)
        return ImportResult(file=file.name, table_name=table, appended=appended, skipped=skipped)

    def _update_table_settings(self, table: str) -> None:
        """Label extension columns, protect imported columns, refresh filter and widths."""

        self.store.set_row(table, 1, EXTENSION_HEADERS, start_col=FIXED_FIELD_COUNT + 1)
        self.store.protect_columns(table, FIXED_FIELD_COUNT)
        self.store.reset_filter(table)
        self.store.auto_resize_columns(table, min_width=MIN_COLUMN_WIDTH, max_width=MAX_COLUMN_WIDTH)


__all__ = ["Period", "ImportResult", "parse_period", "decode_csv", "CsvImporter"]
