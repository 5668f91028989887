"""Category registry kept in the ``0_Category`` table.

The registry is the sorted, de-duplicated set of (category, subcategory)
pairs observed across all period tables::

    | Category | SubCategory | Category_SubCategory |

Rows are only ever appended; after each upsert the data rows are re-sorted by
the concatenated key.
"""

from __future__ import annotations

from .config import CATEGORY_TABLE
from .errors import SchemaAssumptionError
from .logging_setup import get_logger
from .models import COLUMN, CategoryEntry
from .store import Spreadsheet

_logger = get_logger("ledger_sync.categories")

CATEGORY_HEADER = ["Category", "SubCategory", "Category_SubCategory"]
_KEY_COL = CATEGORY_HEADER.index("Category_SubCategory")


def _check_column_order() -> None:
    if COLUMN["category"] + 1 != COLUMN["subcategory"]:
        raise SchemaAssumptionError("Unexpected column order: subcategory must follow category")
    if CATEGORY_HEADER.index("Category") + 1 != CATEGORY_HEADER.index("SubCategory"):
        raise SchemaAssumptionError("Unexpected registry column order")


class CategoryRegistry:
    def __init__(self, store: Spreadsheet, *, table: str = CATEGORY_TABLE) -> None:
        _check_column_order()
        self.store = store
        self.table = table

    def _ensure(self) -> None:
        self.store.ensure_table(self.table)
        self.store.set_row(self.table, 1, CATEGORY_HEADER)

    def entries(self) -> list[CategoryEntry]:
        if not self.store.has_table(self.table):
            return []
        return [
            CategoryEntry.of(*(list(row) + [None, None])[:2])
            for row in self.store.get_values(self.table)[1:]
        ]

    def upsert(self, period_table: str) -> int:
        """Add the pairs of ``period_table`` missing from the registry.

        Returns the number of pairs appended.
        """

        self._ensure()
        existing = {e.key for e in self.entries()}

        cat, sub = COLUMN["category"], COLUMN["subcategory"]
        added = 0
        for row in self.store.get_values(period_table)[1:]:
            cells = list(row) + [None] * (sub + 1 - len(row))
            entry = CategoryEntry.of(cells[cat], cells[sub])
            if entry.key in existing:
                continue
            self.store.append_row(self.table, entry.to_row())
            existing.add(entry.key)
            added += 1

        if self.store.last_row(self.table) > 1:
            self.store.sort_rows(self.table, key_col=_KEY_COL, start_row=2)
        if added:
            _logger.info("Added %d categories from %s", added, period_table)
        return added


__all__ = ["CategoryRegistry", "CATEGORY_HEADER"]
