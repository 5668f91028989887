from __future__ import annotations

import pytest

from ledger_sync import categories
from ledger_sync.categories import CATEGORY_HEADER, CategoryRegistry
from ledger_sync.errors import SchemaAssumptionError
from ledger_sync.importer import CsvImporter
from ledger_sync.models import CategoryEntry
from ledger_sync.store import MemorySpreadsheet
from tests.helpers.exports import HEADER, row, source_file


def _period(*pairs: tuple[str, str]) -> list[list[str]]:
    return [HEADER] + [row(f"id{i}", category=c, subcategory=s) for i, (c, s) in enumerate(pairs)]


def test_upsert_collects_sorted_unique_pairs():
    store = MemorySpreadsheet(
        {"Import_2021_01": _period(("Housing", "Rent"), ("Food", "Lunch"), ("Food", "Lunch"))}
    )
    registry = CategoryRegistry(store)

    assert registry.upsert("Import_2021_01") == 2
    assert store.get_values("0_Category") == [
        CATEGORY_HEADER,
        ["Food", "Lunch", "Food_Lunch"],
        ["Housing", "Rent", "Housing_Rent"],
    ]


def test_pair_seen_in_two_periods_is_registered_once():
    store = MemorySpreadsheet()
    importer = CsvImporter(store)
    importer.import_file(source_file("X_2021-01-01_2021-01-31.csv", [row("a1")]))
    importer.import_file(
        source_file("X_2021-02-01_2021-02-28.csv", [row("b1", date="2021/02/03"), row("b2", category="Car")])
    )

    keys = [e.key for e in CategoryRegistry(store).entries()]
    assert keys == ["Car_Lunch", "Food_Lunch"]


def test_upsert_keeps_existing_rows_and_resorts():
    store = MemorySpreadsheet(
        {
            "0_Category": [CATEGORY_HEADER, ["Travel", "Hotel", "Travel_Hotel"]],
            "Import_2021_01": _period(("Food", "Lunch"), ("Travel", "Hotel")),
        }
    )
    added = CategoryRegistry(store).upsert("Import_2021_01")

    assert added == 1
    assert [r[2] for r in store.get_values("0_Category")[1:]] == ["Food_Lunch", "Travel_Hotel"]


def test_blank_category_cells_still_form_a_key():
    store = MemorySpreadsheet({"Import_2021_01": _period(("", ""))})
    CategoryRegistry(store).upsert("Import_2021_01")
    assert CategoryRegistry(store).entries() == [CategoryEntry("", "", "_")]


def test_entries_is_empty_before_first_upsert():
    assert CategoryRegistry(MemorySpreadsheet()).entries() == []


def test_unexpected_column_order_fails_fast(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setitem(categories.COLUMN, "subcategory", categories.COLUMN["category"] + 2)
    with pytest.raises(SchemaAssumptionError):
        CategoryRegistry(MemorySpreadsheet())
