"""Spreadsheet store abstraction.

All persistent state (period tables, import state, category registry and the
derived views) lives in named tables of a spreadsheet. Components receive a
:class:`Spreadsheet` instead of reaching for a global workbook, which keeps
them testable against :class:`MemorySpreadsheet`.

Conventions
-----------
- Row numbers are 1-based and row 1 is the header.
- Column positions passed to ``sort_rows`` are 0-based.
- ``get_values`` returns the used range only (no trailing empty rows).
- Presentation hooks (``protect_columns``, ``reset_filter``,
  ``auto_resize_columns``) carry no data semantics.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from .logging_setup import get_logger

_logger = get_logger("ledger_sync.store")


@runtime_checkable
class Spreadsheet(Protocol):
    def table_names(self) -> list[str]: ...

    def has_table(self, name: str) -> bool: ...

    def ensure_table(self, name: str) -> bool:
        """Create ``name`` when missing. Returns ``True`` when created."""
        ...

    def get_values(self, name: str) -> list[list[Any]]: ...

    def last_row(self, name: str) -> int: ...

    def set_row(self, name: str, row: int, values: Sequence[Any], *, start_col: int = 1) -> None: ...

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        """Append ``values`` after the last used row and return its row number."""
        ...

    def clear_table(self, name: str) -> None: ...

    def sort_rows(self, name: str, *, key_col: int, start_row: int = 2) -> None: ...

    def sort_tables(self) -> bool:
        """Order tables by name. Returns ``True`` when the order changed."""
        ...

    def protect_columns(self, name: str, n_cols: int) -> None: ...

    def reset_filter(self, name: str) -> None: ...

    def auto_resize_columns(self, name: str, *, min_width: int, max_width: int) -> None: ...

    def flush(self) -> None: ...


def sort_key(value: Any) -> str:
    """Lexicographic key on the cell's string form (blank cells sort first)."""

    return "" if value is None else str(value)


class MemorySpreadsheet:
    """Dict-of-lists implementation of :class:`Spreadsheet`.

    Presentation calls are recorded on ``protected``, ``filters`` and
    ``widths`` so callers can assert on them.
    """

    def __init__(self, tables: dict[str, list[list[Any]]] | None = None) -> None:
        self._tables: dict[str, list[list[Any]]] = {}
        for name, rows in (tables or {}).items():
            self._tables[name] = [list(r) for r in rows]
        self.protected: dict[str, int] = {}
        self.filters: dict[str, tuple[int, int]] = {}
        self.widths: dict[str, tuple[int, int]] = {}
        self.flush_count = 0

    def _table(self, name: str) -> list[list[Any]]:
        try:
            return self._tables[name]
        except KeyError:
            raise KeyError(f"No such table: {name!r}") from None

    def table_names(self) -> list[str]:
        return list(self._tables)

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def ensure_table(self, name: str) -> bool:
        if name in self._tables:
            return False
        self._tables[name] = []
        _logger.debug("Created table %s", name)
        return True

    def get_values(self, name: str) -> list[list[Any]]:
        return [list(r) for r in self._table(name)]

    def last_row(self, name: str) -> int:
        return len(self._table(name))

    def set_row(self, name: str, row: int, values: Sequence[Any], *, start_col: int = 1) -> None:
        if row < 1 or start_col < 1:
            raise ValueError("row and start_col are 1-based")
        rows = self._table(name)
        while len(rows) < row:
            rows.append([])
        target = rows[row - 1]
        end = start_col - 1 + len(values)
        if len(target) < end:
            target.extend([None] * (end - len(target)))
        target[start_col - 1 : end] = list(values)

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        rows = self._table(name)
        rows.append(list(values))
        return len(rows)

    def clear_table(self, name: str) -> None:
        self._table(name).clear()

    def sort_rows(self, name: str, *, key_col: int, start_row: int = 2) -> None:
        rows = self._table(name)
        head, body = rows[: start_row - 1], rows[start_row - 1 :]
        body.sort(key=lambda r: sort_key(r[key_col] if key_col < len(r) else None))
        rows[:] = head + body

    def sort_tables(self) -> bool:
        names = list(self._tables)
        ordered = sorted(names)
        if names == ordered:
            return False
        self._tables = {n: self._tables[n] for n in ordered}
        return True

    def protect_columns(self, name: str, n_cols: int) -> None:
        self._table(name)
        self.protected[name] = n_cols

    def reset_filter(self, name: str) -> None:
        rows = self._table(name)
        self.filters[name] = (len(rows), max((len(r) for r in rows), default=0))

    def auto_resize_columns(self, name: str, *, min_width: int, max_width: int) -> None:
        self._table(name)
        self.widths[name] = (min_width, max_width)

    def flush(self) -> None:
        self.flush_count += 1


__all__ = ["Spreadsheet", "MemorySpreadsheet", "sort_key"]
