"""Recurring / split expense expansion.

An expense row with pseudo-split count ``n`` is charged in ``n`` equal
installments, one per month, starting the month after its date. With the
shared-payment flag set and a payer ratio ``r``, the amount is scaled by
``1/r`` before splitting. The installment amount is sign-flipped so that
expenses are positive in the expanded ledger.

Only expense items take part: calc-target set, negative amount, not a
transfer, non-empty ID.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from datetime import date
from decimal import Decimal

from .config import PERIOD_TABLE_PREFIX
from .models import ExpandedItem, ImportedRecord
from .store import Spreadsheet

_PERIOD_TABLE_RE = re.compile(rf"{re.escape(PERIOD_TABLE_PREFIX)}\d{{4}}_\d{{2}}")


def period_tables(store: Spreadsheet) -> list[str]:
    """Names of the ``Import_<YYYY>_<MM>`` tables, sorted; other tables are ignored."""

    return sorted(n for n in store.table_names() if _PERIOD_TABLE_RE.fullmatch(n))


def read_records(store: Spreadsheet, table: str) -> list[ImportedRecord]:
    records = (ImportedRecord.from_table_row(row) for row in store.get_values(table)[1:])
    return [r for r in records if r is not None]


def list_expense_items(store: Spreadsheet) -> list[ImportedRecord]:
    """All expense items across period tables, tables in name order."""

    return [r for table in period_tables(store) for r in read_records(store, table) if r.is_expense_item]


def pay_month(d: date, offset: int) -> date:
    """First day of the month ``offset`` months after the month of ``d``."""

    index = d.year * 12 + (d.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def installment_amount(record: ImportedRecord) -> Decimal:
    amount = record.amount
    if record.shared_pay and record.payer_ratio is not None:
        amount = amount / record.payer_ratio
    return amount / record.split_count * -1


def expand(records: Iterable[ImportedRecord]) -> Iterator[ExpandedItem]:
    """Yield ``split_count`` installments per record, in input order."""

    for record in records:
        amount = installment_amount(record)
        for i in range(record.split_count):
            yield ExpandedItem(
                id=record.id,
                repeat_index=i + 1,
                pay_month=pay_month(record.date, i + 1),
                category=record.category,
                subcategory=record.subcategory,
                expense=amount,
            )


__all__ = [
    "period_tables",
    "read_records",
    "list_expense_items",
    "pay_month",
    "installment_amount",
    "expand",
]
