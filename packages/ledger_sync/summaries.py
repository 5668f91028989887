"""Derived summary views.

Totals are described declaratively as :class:`AggregateSpec` values (group
key, filter predicate, value, sign) and evaluated in Python over the records
of each period table; results are written to the store as plain values.

Views
-----
- ``Z_Summary``: income / expense / balance per period table.
- ``Z_Category``: expense per period table and (category, subcategory).
- ``Z_All``: every expense item with its installment amount and repeat count.
- ``Z_AllRepeated``: the expanded installment ledger.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .config import (
    ALL_ITEMS_REPEATED_TABLE,
    ALL_ITEMS_TABLE,
    CATEGORY_SUMMARY_TABLE,
    SUMMARY_TABLE,
)
from .expansion import expand, installment_amount, list_expense_items, period_tables, read_records
from .logging_setup import get_logger
from .models import ALL_COLUMNS, EXTENSION_HEADERS, FIXED_COLUMNS, ImportedRecord
from .store import Spreadsheet

_logger = get_logger("ledger_sync.summaries")

SUMMARY_HEADER = ["Year", "Month", "Year/Month", "Income", "Expense", "Balance"]
CATEGORY_SUMMARY_HEADER = ["Year", "Month", "Year/Month", "Category", "SubCategory", "Expense"]
ALL_ITEMS_EXTRA_HEADER = ["EffectiveExpense", "RepeatCount"]
ALL_ITEMS_REPEATED_HEADER = ["ID", "RepeatIndex", "PayMonth", "Category", "SubCategory", "Expense"]
_FALLBACK_LABELS = FIXED_COLUMNS + EXTENSION_HEADERS


@dataclass(frozen=True, slots=True)
class AggregateSpec:
    """Sum of ``value`` over records matching ``predicate``, grouped by ``group_key``."""

    group_key: Callable[[ImportedRecord], Hashable]
    predicate: Callable[[ImportedRecord], bool]
    value: Callable[[ImportedRecord], Decimal] = lambda r: r.amount
    sign: int = 1


def evaluate(spec: AggregateSpec, records: Iterable[ImportedRecord]) -> dict[Hashable, Decimal]:
    """Group totals in first-seen order."""

    totals: dict[Hashable, Decimal] = {}
    for r in records:
        if not spec.predicate(r):
            continue
        key = spec.group_key(r)
        totals[key] = totals.get(key, Decimal(0)) + spec.value(r)
    return {k: v * spec.sign for k, v in totals.items()}


def _counted(r: ImportedRecord) -> bool:
    return r.calc_target > 0 and r.transfer == 0


def _whole(r: ImportedRecord) -> Hashable:
    return None


INCOME = AggregateSpec(group_key=_whole, predicate=lambda r: _counted(r) and r.amount > 0)
EXPENSE = AggregateSpec(group_key=_whole, predicate=lambda r: _counted(r) and r.amount < 0, sign=-1)
BALANCE = AggregateSpec(group_key=_whole, predicate=_counted)
CATEGORY_EXPENSE = AggregateSpec(
    group_key=lambda r: (r.category, r.subcategory),
    predicate=lambda r: _counted(r) and r.amount < 0,
    sign=-1,
)


def _year_month(table: str) -> tuple[str, str]:
    _, year, month = table.split("_")
    return year, month


def _total(spec: AggregateSpec, records: list[ImportedRecord]) -> Decimal:
    return evaluate(spec, records).get(None, Decimal(0))


def _write(store: Spreadsheet, name: str, rows: list[list[Any]]) -> None:
    store.ensure_table(name)
    store.clear_table(name)
    for row in rows:
        store.append_row(name, row)


def _skip(store: Spreadsheet, name: str, rebuild: bool) -> bool:
    return store.has_table(name) and not rebuild


def build_summary(store: Spreadsheet, *, rebuild: bool = False) -> bool:
    if _skip(store, SUMMARY_TABLE, rebuild):
        return False
    rows: list[list[Any]] = [SUMMARY_HEADER]
    for table in period_tables(store):
        records = read_records(store, table)
        year, month = _year_month(table)
        rows.append(
            [
                year,
                month,
                f"{year}/{month}",
                _total(INCOME, records),
                _total(EXPENSE, records),
                _total(BALANCE, records),
            ]
        )
    _write(store, SUMMARY_TABLE, rows)
    return True


def build_category_summary(store: Spreadsheet, *, rebuild: bool = False) -> bool:
    if _skip(store, CATEGORY_SUMMARY_TABLE, rebuild):
        return False
    rows: list[list[Any]] = [CATEGORY_SUMMARY_HEADER]
    for table in period_tables(store):
        year, month = _year_month(table)
        totals = evaluate(CATEGORY_EXPENSE, read_records(store, table))
        for (category, subcategory), expense in sorted(totals.items(), key=lambda kv: kv[0]):
            rows.append([year, month, f"{year}/{month}", category, subcategory, expense])
    _write(store, CATEGORY_SUMMARY_TABLE, rows)
    return True


def _all_items_header(store: Spreadsheet, tables: list[str]) -> list[Any]:
    if tables:
        head = store.get_values(tables[0])[:1]
        if head and head[0]:
            labels = list(head[0])[: len(ALL_COLUMNS)]
            missing = list(_FALLBACK_LABELS)[len(labels) :]
            return labels + missing + ALL_ITEMS_EXTRA_HEADER
    return list(_FALLBACK_LABELS) + ALL_ITEMS_EXTRA_HEADER


def build_all_items(store: Spreadsheet, *, rebuild: bool = False) -> bool:
    if _skip(store, ALL_ITEMS_TABLE, rebuild):
        return False
    rows: list[list[Any]] = [_all_items_header(store, period_tables(store))]
    for r in list_expense_items(store):
        rows.append(r.to_row() + [installment_amount(r), r.split_count])
    _write(store, ALL_ITEMS_TABLE, rows)
    store.reset_filter(ALL_ITEMS_TABLE)
    return True


def build_all_items_repeated(store: Spreadsheet, *, rebuild: bool = False) -> bool:
    if _skip(store, ALL_ITEMS_REPEATED_TABLE, rebuild):
        return False
    rows: list[list[Any]] = [ALL_ITEMS_REPEATED_HEADER]
    rows.extend(item.to_row() for item in expand(list_expense_items(store)))
    _write(store, ALL_ITEMS_REPEATED_TABLE, rows)
    return True


_BUILDERS: tuple[tuple[str, Callable[..., bool]], ...] = (
    (SUMMARY_TABLE, build_summary),
    (CATEGORY_SUMMARY_TABLE, build_category_summary),
    (ALL_ITEMS_TABLE, build_all_items),
    (ALL_ITEMS_REPEATED_TABLE, build_all_items_repeated),
)


def rebuild_all(store: Spreadsheet, *, rebuild: bool = True) -> list[str]:
    """Build every view; returns the names of the views written."""

    built = [name for name, build in _BUILDERS if build(store, rebuild=rebuild)]
    _logger.info("Rebuilt summary views: %s", ", ".join(built) or "none")
    return built


__all__ = [
    "AggregateSpec",
    "evaluate",
    "INCOME",
    "EXPENSE",
    "BALANCE",
    "CATEGORY_EXPENSE",
    "build_summary",
    "build_category_summary",
    "build_all_items",
    "build_all_items_repeated",
    "rebuild_all",
]
