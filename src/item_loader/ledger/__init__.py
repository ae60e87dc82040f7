"""Ledger package: append-only JSONL record of pipeline runs.

Public surface
--------------
- :class:`JsonlRunLedger`    run-scoped ledger passed to the pipeline.
- :func:`append_event`       append a single event to a run's ledger file.
- :func:`verify_run_ledger`  check integrity of the last event in a ledger.
- :class:`LedgerVerifyResult`

Usage example
-------------
::

    from item_loader.ledger import JsonlRunLedger

    ledger = JsonlRunLedger(config.paths.ledger_path)
    summary = load_items(items_dir, cloner=cloner, manifest=manifest,
                         locales=locales, ledger=ledger)
"""

from item_loader.ledger.writer import (
    JsonlRunLedger,
    LedgerVerifyResult,
    append_event,
    new_run_id,
    verify_run_ledger,
)

__all__ = [
    "JsonlRunLedger",
    "LedgerVerifyResult",
    "append_event",
    "new_run_id",
    "verify_run_ledger",
]
