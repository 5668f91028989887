"""Source folder listing (the "drive" collaborator).

The importer only needs a name, a last-modified timestamp and the raw bytes of
each exported CSV file. :class:`LocalFolder` serves them from a directory on
disk, typically a synced cloud-drive folder.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from os import PathLike
from pathlib import Path
from typing import Protocol

from .config import MONEYFORWARD_CSV_URL


@dataclass(frozen=True, slots=True)
class SourceFile:
    """One exported CSV file. ``read`` returns its undecoded bytes."""

    name: str
    modified_at: datetime
    read: Callable[[], bytes] = field(repr=False, compare=False)


class SourceFolder(Protocol):
    def list_csv_files(self) -> Iterator[SourceFile]: ...


class LocalFolder:
    """CSV files directly inside ``path``, listed in name order."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)

    def list_csv_files(self) -> Iterator[SourceFile]:
        if not self.path.is_dir():
            raise FileNotFoundError(f"Source folder not found: {self.path}")
        for p in sorted(self.path.iterdir()):
            if not p.is_file() or p.suffix.lower() != ".csv":
                continue
            mtime = datetime.fromtimestamp(p.stat().st_mtime, tz=UTC)
            yield SourceFile(name=p.name, modified_at=mtime, read=p.read_bytes)


def export_urls(start_year: int, end_year: int | None = None) -> list[str]:
    """MoneyForward CSV export URLs for every month from January of
    ``start_year`` through December of ``end_year`` (inclusive)."""

    last = start_year if end_year is None else end_year
    if last < start_year:
        raise ValueError(f"end_year {last} is before start_year {start_year}")
    return [
        MONEYFORWARD_CSV_URL.format(year=year, month=month)
        for year in range(start_year, last + 1)
        for month in range(1, 13)
    ]


__all__ = ["SourceFile", "SourceFolder", "LocalFolder", "export_urls"]
