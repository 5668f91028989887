"""Public interface for the ``ledger_sync`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import ImportReport, import_from_source, rebuild_summaries
from .categories import CategoryRegistry
from .errors import FormatError, SchemaAssumptionError
from .expansion import expand, list_expense_items, pay_month
from .importer import CsvImporter, ImportResult, parse_period
from .models import (
    CategoryEntry,
    ExpandedItem,
    ImportedRecord,
    ImportStateEntry,
    TableHeader,
)
from .source import LocalFolder, SourceFile
from .state import ImportDecision, ImportStateTracker
from .store import MemorySpreadsheet, Spreadsheet

__all__ = [
    # API
    "import_from_source",
    "rebuild_summaries",
    "ImportReport",
    # Components
    "CsvImporter",
    "ImportResult",
    "parse_period",
    "CategoryRegistry",
    "ImportStateTracker",
    "ImportDecision",
    "expand",
    "list_expense_items",
    "pay_month",
    # Store / source
    "Spreadsheet",
    "MemorySpreadsheet",
    "SourceFile",
    "LocalFolder",
    # Models / errors
    "ImportedRecord",
    "TableHeader",
    "ImportStateEntry",
    "CategoryEntry",
    "ExpandedItem",
    "FormatError",
    "SchemaAssumptionError",
]
