"""Exception types raised by ``ledger_sync``.

- ``FormatError``: a source file name or its content does not have the
  expected shape. Fatal for that file only; the import loop logs it and moves
  on to the next file.
- ``SchemaAssumptionError``: an internal column-ordering assumption does not
  hold. Aborts the whole run.
"""

from __future__ import annotations


class FormatError(ValueError):
    """Source file name or content does not match the expected format."""

    def __init__(self, message: str, *, file: str | None = None, row: int | None = None) -> None:
        super().__init__(message)
        self.file = file
        self.row = row


class SchemaAssumptionError(RuntimeError):
    """Expected column ordering does not hold."""


__all__ = ["FormatError", "SchemaAssumptionError"]
