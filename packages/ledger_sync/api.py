"""Public entry points: incremental import and summary rebuild.

Both functions take the spreadsheet store and the source folder as arguments;
the CLI wires them to an ``.xlsx`` workbook and a local folder.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import DEFAULT_ENCODING
from .errors import FormatError
from .importer import CsvImporter, ImportResult
from .logging_setup import get_logger
from .source import SourceFolder
from .state import ImportDecision, ImportStateTracker
from .store import Spreadsheet
from .summaries import rebuild_all

_logger = get_logger("ledger_sync.api")


@dataclass(slots=True)
class ImportReport:
    imported: list[ImportResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def import_from_source(
    store: Spreadsheet,
    source: SourceFolder,
    *,
    encoding: str = DEFAULT_ENCODING,
) -> ImportReport:
    """Import new and updated CSV files, then sort tables by name.

    A file is imported when it has no state entry, when its entry is not
    ``finished``, or when it was modified after the recorded timestamp. The
    entry is saved as ``processing`` before the import and as ``finished``
    after it; on a ``FormatError`` it stays ``processing``, the failure is
    logged and the loop moves on. Any other exception aborts the run.
    """

    tracker = ImportStateTracker(store)
    importer = CsvImporter(store, encoding=encoding)
    already_imported = tracker.load()
    report = ImportReport()

    for csv_file in source.list_csv_files():
        decision = tracker.decide(csv_file, already_imported)
        if decision is ImportDecision.UP_TO_DATE:
            _logger.info("Skip since not updated: %s", csv_file.name)
            report.skipped.append(csv_file.name)
            continue

        if decision is ImportDecision.NEW:
            _logger.info("Importing new file %s", csv_file.name)
            entry = tracker.new_entry(csv_file)
        else:
            _logger.info("Importing updated file %s", csv_file.name)
            entry = already_imported[csv_file.name].model_copy(
                update={"modified_at": csv_file.modified_at, "status": "processing"}
            )

        entry = tracker.save(entry)
        already_imported[csv_file.name] = entry
        store.flush()
        try:
            result = importer.import_file(csv_file)
        except FormatError as e:
            _logger.error("Failed to import %s: %s", csv_file.name, e)
            report.failed[csv_file.name] = str(e)
            store.flush()
            continue

        already_imported[csv_file.name] = tracker.save(entry.model_copy(update={"status": "finished"}))
        store.flush()
        report.imported.append(result)

    if store.sort_tables():
        _logger.info("Sorted sheets")
    else:
        _logger.info("Skip sorting sheets. Already sorted.")
    store.flush()
    return report


def rebuild_summaries(store: Spreadsheet) -> list[str]:
    """Force-rebuild all summary views and sort tables by name."""

    built = rebuild_all(store, rebuild=True)
    store.sort_tables()
    store.flush()
    return built


__all__ = ["ImportReport", "import_from_source", "rebuild_summaries"]
