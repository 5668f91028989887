from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from ledger_sync import cli, logging_setup
from ledger_sync.workbook import WorkbookSpreadsheet
from tests.helpers.exports import csv_bytes, row

runner = CliRunner()

JAN = "export_2021-01-01_2021-01-31.csv"


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # Logging is process-global; keep CLI runs from binding handlers to captured streams
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)
    yield
    # Values loaded from a test's .env must not leak into later tests
    os.environ.pop("LEDGER_SYNC_SOURCE_FOLDER", None)


def _exports(folder: Path, files: dict[str, list[list[str]]]) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    for name, rows in files.items():
        (folder / name).write_bytes(csv_bytes(rows))
    return folder


def test_export_urls_lists_each_month():
    result = runner.invoke(cli.app, ["export-urls", "--start-year", "2021", "--end-year", "2022"])

    assert result.exit_code == 0
    urls = result.stdout.strip().splitlines()
    assert len(urls) == 24
    assert "year=2021" in urls[0] and "month=01" in urls[0]
    assert "year=2022" in urls[-1] and "month=12" in urls[-1]


def test_export_urls_rejects_reversed_range():
    result = runner.invoke(cli.app, ["export-urls", "--start-year", "2022", "--end-year", "2021"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_export_urls_open_launches_browser(monkeypatch: pytest.MonkeyPatch):
    opened: list[str] = []
    monkeypatch.setattr(typer, "launch", lambda url, **_: opened.append(url) or 0)

    result = runner.invoke(cli.app, ["export-urls", "--start-year", "2021", "--open"])

    assert result.exit_code == 0
    assert len(opened) == 12


def test_unknown_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cli, "configure_logging", logging_setup.configure_logging)

    result = runner.invoke(cli.app, ["--log-level", "chatty", "export-urls", "--start-year", "2021"])

    assert result.exit_code == 1
    assert "Unknown log level" in result.output


def test_import_without_source_folder_fails():
    result = runner.invoke(cli.app, ["import-from-source"])
    assert result.exit_code == 1
    assert "LEDGER_SYNC_SOURCE_FOLDER" in result.output


def test_import_with_missing_source_folder_fails(tmp_path: Path):
    result = runner.invoke(cli.app, ["import-from-source", "--source-folder", str(tmp_path / "nope")])
    assert result.exit_code == 1
    assert "Source folder not found" in result.output


def test_import_reads_source_folder_from_dotenv(tmp_path: Path):
    _exports(tmp_path / "exports", {JAN: [row("a1"), row("a2")]})
    (tmp_path / ".env").write_text(f"LEDGER_SYNC_SOURCE_FOLDER={tmp_path / 'exports'}\n")

    result = runner.invoke(cli.app, ["import-from-source"])

    assert result.exit_code == 0, result.output
    assert f"{JAN}\tImport_2021_01\t+2" in result.stdout
    store = WorkbookSpreadsheet(tmp_path / "ledger.xlsx")
    assert store.last_row("Import_2021_01") == 3


def test_import_reports_format_errors_with_nonzero_exit(tmp_path: Path):
    folder = _exports(
        tmp_path / "exports",
        {JAN: [row("a1")], "export_2021-02-01_2021-02-28.csv": [row("b1", date="2021/02/01")[:3]]},
    )
    workbook = tmp_path / "books" / "mine.xlsx"

    result = runner.invoke(
        cli.app, ["import-from-source", "--source-folder", str(folder), "--workbook", str(workbook)]
    )

    assert result.exit_code == 1
    assert "Error: export_2021-02-01_2021-02-28.csv" in result.output
    assert f"{JAN}\tImport_2021_01\t+1" in result.stdout
    assert workbook.exists()


def test_rebuild_summaries_requires_existing_workbook():
    result = runner.invoke(cli.app, ["rebuild-summaries"])
    assert result.exit_code == 1
    assert "Workbook not found" in result.output


def test_rebuild_summaries_prints_built_views(tmp_path: Path):
    folder = _exports(tmp_path / "exports", {JAN: [row("a1")]})
    assert cli.cmd_import_from_source(source_folder=str(folder)) == 0

    result = runner.invoke(cli.app, ["rebuild-summaries", "--workbook", "ledger.xlsx"])

    assert result.exit_code == 0
    assert result.stdout.split() == ["Z_Summary", "Z_Category", "Z_All", "Z_AllRepeated"]
    assert "Z_Summary" in WorkbookSpreadsheet(tmp_path / "ledger.xlsx").table_names()
