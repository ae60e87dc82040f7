"""Typed exceptions for the item loader.

Design intent:
    - Domain outcomes like "definition has no external id" are represented
      by ``None`` return values, not exceptions.
    - Infrastructure failures (unreadable files, ledger write failures) raise
      typed exceptions so the pipeline can catch them at a single seam, log a
      warning, and degrade instead of aborting the run.
"""

from __future__ import annotations

from pathlib import Path


class ItemLoaderError(RuntimeError):
    """Base exception for item loader failures."""


class SourceReadError(ItemLoaderError):
    """A read-only lookup source could not be read or parsed.

    Args:
        path: File (or logical source name) that failed.
        cause: Optional underlying exception.
    """

    def __init__(self, path: Path | str, cause: Exception | None = None) -> None:
        message = f"Failed to read {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path
        self.cause = cause


class LedgerWriteError(ItemLoaderError):
    """Raised when a ledger append fails due to a filesystem or encoding error.

    Callers must catch this exception, log a warning, and continue the run.
    A ledger failure only loses the audit record, never the item.
    """
