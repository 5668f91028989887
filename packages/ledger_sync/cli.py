"""CLI for the ``ledger_sync`` package.

This module exposes callable command handlers (``cmd_import_from_source``,
``cmd_rebuild_summaries``, ``cmd_export_urls``) and a Typer-based console
interface. Environment variables (notably ``LEDGER_SYNC_SOURCE_FOLDER``) are
loaded from a local ``.env`` using ``python-dotenv`` before delegating to the
command logic in :mod:`ledger_sync.api`.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from dotenv import load_dotenv

from .logging_setup import configure_logging


def cmd_import_from_source(
    *,
    workbook: str | None = None,
    source_folder: str | None = None,
    encoding: str | None = None,
) -> int:
    """Import new/updated CSV exports from the source folder into the workbook.

    Returns ``0`` when every file was imported or skipped, ``1`` when a file
    failed with a format error (other files are still imported) or when the
    configuration is incomplete.
    """

    from . import config
    from .api import import_from_source
    from .source import LocalFolder
    from .workbook import WorkbookSpreadsheet

    try:
        folder = config.source_folder(source_folder)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not folder.is_dir():
        print(f"Error: Source folder not found: {folder}", file=sys.stderr)
        return 1

    store = WorkbookSpreadsheet(config.workbook_path(workbook))
    report = import_from_source(store, LocalFolder(folder), encoding=config.source_encoding(encoding))

    for result in report.imported:
        print(f"{result.file}\t{result.table_name}\t+{result.appended}")
    for name, reason in report.failed.items():
        print(f"Error: {name}: {reason}", file=sys.stderr)
    return 0 if report.ok else 1


def cmd_rebuild_summaries(*, workbook: str | None = None) -> int:
    """Force-rebuild every summary view of the workbook."""

    from . import config
    from .api import rebuild_summaries
    from .workbook import WorkbookSpreadsheet

    path = config.workbook_path(workbook)
    if not path.exists():
        print(f"Error: Workbook not found: {path}", file=sys.stderr)
        return 1
    built = rebuild_summaries(WorkbookSpreadsheet(path))
    for name in built:
        print(name)
    return 0


def cmd_export_urls(start_year: int, end_year: int | None = None, *, open_browser: bool = False) -> int:
    """Print (or open) the MoneyForward CSV export URL for each month."""

    from .source import export_urls

    try:
        urls = export_urls(start_year, end_year)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for url in urls:
        if open_browser:
            typer.launch(url)
        else:
            print(url)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank/expense CSV exports into a spreadsheet workbook and rebuild "
        "summary views. Loads settings from a local .env before running."
    ),
)


@app.command("import-from-source")
def import_from_source_cmd(
    *,
    workbook: str | None = typer.Option(
        None, help="Workbook path (falls back to LEDGER_SYNC_WORKBOOK, then ledger.xlsx)."
    ),
    source_folder: str | None = typer.Option(
        None, help="Folder of exported CSV files (falls back to LEDGER_SYNC_SOURCE_FOLDER)."
    ),
    encoding: str | None = typer.Option(
        None, help="Text encoding of the exports (falls back to LEDGER_SYNC_ENCODING, then shift_jis)."
    ),
) -> None:
    """Run the incremental import, then sort sheets by name."""

    code = cmd_import_from_source(workbook=workbook, source_folder=source_folder, encoding=encoding)
    raise typer.Exit(code)


@app.command("rebuild-summaries")
def rebuild_summaries_cmd(
    *,
    workbook: str | None = typer.Option(
        None, help="Workbook path (falls back to LEDGER_SYNC_WORKBOOK, then ledger.xlsx)."
    ),
) -> None:
    """Force-rebuild the summary, category and all-items views."""

    raise typer.Exit(cmd_rebuild_summaries(workbook=workbook))


@app.command("export-urls")
def export_urls_cmd(
    *,
    start_year: int = typer.Option(..., help="First year to list."),
    end_year: int | None = typer.Option(None, help="Last year to list (defaults to start year)."),
    open_browser: bool = typer.Option(False, "--open", help="Open each URL in the browser."),
) -> None:
    """List the MoneyForward CSV export URL of every month in a year range."""

    raise typer.Exit(cmd_export_urls(start_year, end_year, open_browser=open_browser))


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to LEDGER_SYNC_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    try:
        configure_logging(log_level)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from None

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
