"""Data models for ``ledger_sync``.

Column layout of a period table (``Import_<YYYY>_<MM>``):

- positions 0..9 hold the fixed fields exported by the source system, in the
  exact order of :data:`FIXED_COLUMNS`;
- positions 10..12 hold the extension fields of :data:`EXTENSION_COLUMNS`,
  which are entered by hand and never written by the importer.

Row 1 of every table is the header. Headers are modelled separately
(:class:`TableHeader`) and are never part of a record sequence.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from .config import CATEGORY_SEPARATOR
from .errors import FormatError

# ---------------------------------------------------------------------------
# Column schema
# ---------------------------------------------------------------------------

FIXED_COLUMNS: tuple[str, ...] = (
    "calc_target",
    "date",
    "content",
    "amount",
    "source",
    "category",
    "subcategory",
    "memo",
    "transfer",
    "id",
)
EXTENSION_COLUMNS: tuple[str, ...] = ("split_count", "shared_pay", "payer_ratio")
ALL_COLUMNS: tuple[str, ...] = FIXED_COLUMNS + EXTENSION_COLUMNS

FIXED_FIELD_COUNT = len(FIXED_COLUMNS)
EXTENDED_FIELD_COUNT = len(ALL_COLUMNS)

EXTENSION_HEADERS: tuple[str, ...] = ("PseudoSplitCount", "SharedPayment", "PayerRatio")

# Zero-based positions, e.g. ``COLUMN["id"] == 9``
COLUMN: dict[str, int] = {name: i for i, name in enumerate(ALL_COLUMNS)}

type Cells = Sequence[Any]
"""One spreadsheet row as a sequence of raw cell values."""


# ---------------------------------------------------------------------------
# Cell coercion helpers
# ---------------------------------------------------------------------------

_DATE_FORMATS = ("%Y/%m/%d", "%Y-%m-%d", "%Y/%m/%d %H:%M:%S", "%Y-%m-%d %H:%M:%S")


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip().replace(",", "")
    if not s:
        return None
    try:
        d = Decimal(s)
    except (InvalidOperation, ValueError):
        return None
    # "inf" and "nan" parse but are not amounts
    return d if d.is_finite() else None


def to_flag(value: Any) -> int:
    """Interpret a bool-as-number cell: blank/0/false → 0, anything numeric non-zero/true → 1."""

    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    s = str(value).strip().lower()
    if s in {"", "0", "false", "no"}:
        return 0
    if s in {"true", "yes"}:
        return 1
    d = to_decimal(s)
    return 1 if d is not None and d != 0 else 0


def to_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def _split_count(value: Any) -> int:
    d = to_decimal(value)
    if d is None:
        return 1
    n = int(d)
    # Non-positive counts mean "no split"
    return n if n >= 1 else 1


def _payer_ratio(value: Any) -> Decimal | None:
    d = to_decimal(value)
    if d is None or d <= 0 or d > 1:
        return None
    return d


# ---------------------------------------------------------------------------
# Header and record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TableHeader:
    """Header row of a period table: the ten labels from the source export."""

    labels: tuple[str, ...]

    @classmethod
    def from_cells(cls, cells: Cells, *, file: str | None = None) -> TableHeader:
        if len(cells) != FIXED_FIELD_COUNT:
            raise FormatError(
                f"Invalid CSV format: {file} header has {len(cells)} columns "
                f"(expected {FIXED_FIELD_COUNT})",
                file=file,
                row=0,
            )
        return cls(tuple(cell_text(c) for c in cells))

    def extended(self) -> list[str]:
        return list(self.labels) + list(EXTENSION_HEADERS)


@dataclass(frozen=True, slots=True)
class ImportedRecord:
    """One transaction row of a period table.

    Fixed fields come from the source export and identify the row by ``id``.
    ``split_count``, ``shared_pay`` and ``payer_ratio`` are the hand-edited
    extension cells; they default to "no split, self-paid".
    """

    calc_target: int
    date: date
    content: str
    amount: Decimal
    source: str
    category: str
    subcategory: str
    memo: str
    transfer: int
    id: str
    split_count: int = 1
    shared_pay: bool = False
    payer_ratio: Decimal | None = None

    @classmethod
    def from_csv_row(
        cls, cells: Cells, *, file: str | None = None, row: int | None = None
    ) -> ImportedRecord:
        """Parse the ten text cells of one decoded CSV row.

        Raises ``FormatError`` when the width, date or amount is invalid.
        """

        if len(cells) != FIXED_FIELD_COUNT:
            raise FormatError(
                f"Invalid CSV format: {file} row {row} has {len(cells)} columns\n{list(cells)}",
                file=file,
                row=row,
            )
        values = dict(zip(FIXED_COLUMNS, cells, strict=True))
        d = to_date(values["date"])
        if d is None:
            raise FormatError(
                f"Invalid date in {file} row {row}: {values['date']!r}", file=file, row=row
            )
        amount = to_decimal(values["amount"])
        if amount is None:
            raise FormatError(
                f"Invalid amount in {file} row {row}: {values['amount']!r}", file=file, row=row
            )
        return cls(
            calc_target=to_flag(values["calc_target"]),
            date=d,
            content=cell_text(values["content"]),
            amount=amount,
            source=cell_text(values["source"]),
            category=cell_text(values["category"]),
            subcategory=cell_text(values["subcategory"]),
            memo=cell_text(values["memo"]),
            transfer=to_flag(values["transfer"]),
            id=cell_text(values["id"]),
        )

    @classmethod
    def from_table_row(cls, cells: Cells) -> ImportedRecord | None:
        """Parse a stored table row, extension cells included.

        Returns ``None`` for rows that cannot be a transaction (no parsable
        date), e.g. blank rows left behind by manual edits.
        """

        padded = list(cells) + [None] * (EXTENDED_FIELD_COUNT - len(cells))
        values = dict(zip(ALL_COLUMNS, padded[:EXTENDED_FIELD_COUNT], strict=True))
        d = to_date(values["date"])
        if d is None:
            return None
        return cls(
            calc_target=to_flag(values["calc_target"]),
            date=d,
            content=cell_text(values["content"]),
            amount=to_decimal(values["amount"]) or Decimal(0),
            source=cell_text(values["source"]),
            category=cell_text(values["category"]),
            subcategory=cell_text(values["subcategory"]),
            memo=cell_text(values["memo"]),
            transfer=to_flag(values["transfer"]),
            id=cell_text(values["id"]),
            split_count=_split_count(values["split_count"]),
            shared_pay=bool(to_flag(values["shared_pay"])),
            payer_ratio=_payer_ratio(values["payer_ratio"]),
        )

    def to_fixed_row(self) -> list[Any]:
        """Cell values written when the row is first appended."""

        return [
            self.calc_target,
            self.date,
            self.content,
            self.amount,
            self.source,
            self.category,
            self.subcategory,
            self.memo,
            self.transfer,
            self.id,
        ]

    def to_row(self) -> list[Any]:
        return self.to_fixed_row() + [
            self.split_count,
            int(self.shared_pay),
            self.payer_ratio if self.payer_ratio is not None else "",
        ]

    @property
    def is_expense_item(self) -> bool:
        """Counts toward totals, is an outflow, is not a transfer and has an ID."""

        return self.calc_target > 0 and self.amount < 0 and self.transfer == 0 and self.id != ""


# ---------------------------------------------------------------------------
# Import state
# ---------------------------------------------------------------------------

ImportStatus = Literal["finished", "processing", "error"]

_EPOCH_MIN = datetime.min.replace(tzinfo=UTC)


class ImportStateEntry(BaseModel):
    """Import bookkeeping for one source file, stored as one state-table row.

    ``row`` is the 1-based position in the state table, ``None`` until saved.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    file: str
    modified_at: datetime
    status: ImportStatus = "processing"
    row: int | None = None

    @field_validator("modified_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: Any) -> datetime:
        if isinstance(v, datetime):
            dt = v
        else:
            try:
                dt = datetime.fromisoformat(str(v).strip())
            except ValueError:
                # Unreadable timestamps force a re-import
                return _EPOCH_MIN
        return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, v: Any) -> str:
        s = str(v or "").strip().lower()
        return s if s in {"finished", "processing", "error"} else "error"

    def to_row(self) -> list[str]:
        return [self.file, self.modified_at.isoformat(), self.status]


# ---------------------------------------------------------------------------
# Category registry and expansion output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryEntry:
    category: str
    subcategory: str
    key: str

    @classmethod
    def of(cls, category: Any, subcategory: Any) -> CategoryEntry:
        c, s = cell_text(category), cell_text(subcategory)
        return cls(c, s, category_key(c, s))

    def to_row(self) -> list[str]:
        return [self.category, self.subcategory, self.key]


def category_key(category: str, subcategory: str) -> str:
    return f"{category}{CATEGORY_SEPARATOR}{subcategory}"


@dataclass(frozen=True, slots=True)
class ExpandedItem:
    """One installment of an expense spread over future charge months."""

    id: str
    repeat_index: int
    pay_month: date
    category: str
    subcategory: str
    expense: Decimal

    def to_row(self) -> list[Any]:
        return [
            self.id,
            self.repeat_index,
            self.pay_month,
            self.category,
            self.subcategory,
            self.expense,
        ]


__all__ = [
    "FIXED_COLUMNS",
    "EXTENSION_COLUMNS",
    "ALL_COLUMNS",
    "FIXED_FIELD_COUNT",
    "EXTENDED_FIELD_COUNT",
    "EXTENSION_HEADERS",
    "COLUMN",
    "Cells",
    "cell_text",
    "to_decimal",
    "to_flag",
    "to_date",
    "TableHeader",
    "ImportedRecord",
    "ImportStatus",
    "ImportStateEntry",
    "CategoryEntry",
    "category_key",
    "ExpandedItem",
]
