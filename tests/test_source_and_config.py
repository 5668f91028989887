from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from ledger_sync import config
from ledger_sync.source import LocalFolder, export_urls


def test_local_folder_lists_csv_files_in_name_order(tmp_path: Path):
    (tmp_path / "b_2021-02-01_2021-02-28.csv").write_bytes(b"b")
    (tmp_path / "a_2021-01-01_2021-01-31.CSV").write_bytes(b"a")
    (tmp_path / "notes.txt").write_text("ignore me")
    (tmp_path / "sub.csv").mkdir()
    stamp = datetime(2021, 3, 1, 12, 0, tzinfo=UTC).timestamp()
    os.utime(tmp_path / "a_2021-01-01_2021-01-31.CSV", (stamp, stamp))

    files = list(LocalFolder(tmp_path).list_csv_files())

    assert [f.name for f in files] == ["a_2021-01-01_2021-01-31.CSV", "b_2021-02-01_2021-02-28.csv"]
    assert files[0].modified_at == datetime(2021, 3, 1, 12, 0, tzinfo=UTC)
    assert files[0].read() == b"a"


def test_local_folder_missing_directory_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        list(LocalFolder(tmp_path / "missing").list_csv_files())


def test_export_urls_defaults_to_single_year():
    urls = export_urls(2020)
    assert len(urls) == 12
    assert urls[1] == "https://moneyforward.com/cf/csv?from=2020%2F02%2F01&month=02&year=2020"


def test_source_folder_requires_configuration(monkeypatch: pytest.MonkeyPatch):
    with pytest.raises(RuntimeError):
        config.source_folder()
    monkeypatch.setenv("LEDGER_SYNC_SOURCE_FOLDER", "  /data/exports ")
    assert config.source_folder() == Path("/data/exports")
    assert config.source_folder("/other") == Path("/other")


def test_workbook_and_encoding_defaults(monkeypatch: pytest.MonkeyPatch):
    assert config.workbook_path() == Path("ledger.xlsx")
    assert config.source_encoding() == "shift_jis"

    monkeypatch.setenv("LEDGER_SYNC_WORKBOOK", "books/family.xlsx")
    monkeypatch.setenv("LEDGER_SYNC_ENCODING", "utf-8")
    assert config.workbook_path() == Path("books/family.xlsx")
    assert config.source_encoding() == "utf-8"
    assert config.source_encoding("cp932") == "cp932"
