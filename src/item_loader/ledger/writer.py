"""JSONL run ledger for the item loader.

Overview
--------
Every pipeline run can record what happened to each definition file in an
append-only ledger.  The item table itself lives in the host and is rebuilt
from source files on every start, so the ledger is the only durable record
of which files were cloned, skipped or rejected on a given run.

Storage
-------
Each run's events are stored in a single JSONL file::

    <ledger_root>/<run_id>.jsonl

The directory and file are created automatically on the first write.

Envelope format
---------------
Every line is a self-contained JSON object:

.. code-block:: json

    {
      "event_id":       "a3f91c9e2d4b5e6f...",
      "timestamp":      "2026-02-27T14:23:01.452345+00:00",
      "run_id":         "20260227T142301Z",
      "event_type":     "item.cloned",
      "schema_version": "1.0",
      "data":           { ... event-specific payload ... },
      "_checksum":      "sha256:b94f3e..."
    }

``_checksum`` is computed over the JSON-serialized envelope body (all fields
**except** ``_checksum`` itself, serialized with ``sort_keys=True``).

Event types
-----------
::

    run.started         run begins (definitions directory, file count)
    item.skipped        definition had no external id
    item.cloned         cloner reported success
    item.clone_failed   cloner reported failure or raised
    item.unreadable     definition file could not be parsed
    run.completed       run ends (counters)

Failure isolation
-----------------
:exc:`~item_loader.errors.LedgerWriteError` is raised on filesystem failure.
The pipeline catches it, logs a warning, and moves on to the next file.

Concurrency
-----------
``fcntl.flock(LOCK_EX)`` is held for each append.  Runs are sequential, so
this only matters if two loader processes share a ledger directory.
``fcntl`` is POSIX-only.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from item_loader.errors import LedgerWriteError

logger = logging.getLogger(__name__)

# Increment when the envelope format changes in a backwards-incompatible way.
_SCHEMA_VERSION = "1.0"

# Bytes read from the end of a ledger when verifying its last event.
_TAIL_CHUNK_BYTES = 16_384


@dataclass(frozen=True)
class LedgerVerifyResult:
    """Result of :func:`verify_run_ledger`.

    Attributes:
        status: ``"ok"`` (last event valid), ``"empty"`` (no file or no
            events), or ``"corrupt"`` (malformed JSON or checksum mismatch).
        last_event_id: ``event_id`` of the last valid event, else ``None``.
        error_detail: Failure description for ``"corrupt"``, else ``None``.
    """

    status: Literal["ok", "empty", "corrupt"]
    last_event_id: str | None
    error_detail: str | None


def new_run_id() -> str:
    """Return a sortable run id derived from the current UTC time."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")


def append_event(
    ledger_root: Path,
    run_id: str,
    event_type: str,
    data: dict[str, Any],
) -> str:
    """Append one event to the run's JSONL ledger file.

    Args:
        ledger_root: Directory holding ledger files.
        run_id:      Run identifier; used as the filename stem.
        event_type:  Dot-namespaced event type, e.g. ``"item.cloned"``.
        data:        JSON-serialisable payload.

    Returns:
        The ``event_id`` of the written event (UUID4 hex).

    Raises:
        ValueError:       If ``run_id`` or ``event_type`` is blank.
        LedgerWriteError: If the filesystem write or serialisation fails.
    """
    if not run_id or not run_id.strip():
        raise ValueError("append_event: run_id must be a non-empty string.")
    if not event_type or not event_type.strip():
        raise ValueError("append_event: event_type must be a non-empty string.")

    event_id = uuid.uuid4().hex
    envelope_body: dict[str, Any] = {
        "event_id": event_id,
        "timestamp": datetime.now(UTC).isoformat(),
        "run_id": run_id,
        "event_type": event_type,
        "schema_version": _SCHEMA_VERSION,
        "data": data,
    }

    ledger_path = _ledger_path(ledger_root, run_id)
    try:
        checksum = _compute_checksum(envelope_body)
        envelope = {**envelope_body, "_checksum": f"sha256:{checksum}"}
        line = json.dumps(envelope, ensure_ascii=False, sort_keys=True)
        _append_line_locked(ledger_path, line)
    except (OSError, TypeError, ValueError) as exc:
        raise LedgerWriteError(
            f"Failed to write event {event_id!r} to ledger for run "
            f"{run_id!r} at {ledger_path}: {exc}"
        ) from exc

    logger.debug("ledger: appended %r event %s to %s", event_type, event_id, ledger_path.name)
    return event_id


def verify_run_ledger(ledger_root: Path, run_id: str) -> LedgerVerifyResult:
    """Verify the checksum of the most recent event in a run's ledger.

    Only the last non-empty line is inspected.
    """
    path = _ledger_path(ledger_root, run_id)
    if not path.exists():
        return LedgerVerifyResult(status="empty", last_event_id=None, error_detail=None)

    last_line = _read_last_nonempty_line(path)
    if last_line is None:
        return LedgerVerifyResult(status="empty", last_event_id=None, error_detail=None)

    try:
        envelope = json.loads(last_line)
    except json.JSONDecodeError as exc:
        return LedgerVerifyResult(
            status="corrupt",
            last_event_id=None,
            error_detail=f"Last line is not valid JSON: {exc}",
        )

    if not isinstance(envelope, dict):
        return LedgerVerifyResult(
            status="corrupt",
            last_event_id=None,
            error_detail="Last line deserialised to a non-dict type.",
        )

    recorded_checksum = envelope.get("_checksum")
    if not isinstance(recorded_checksum, str):
        return LedgerVerifyResult(
            status="corrupt",
            last_event_id=None,
            error_detail="Last line is missing or has a non-string '_checksum' field.",
        )

    body = {k: v for k, v in envelope.items() if k != "_checksum"}
    expected_checksum = f"sha256:{_compute_checksum(body)}"
    if recorded_checksum != expected_checksum:
        return LedgerVerifyResult(
            status="corrupt",
            last_event_id=envelope.get("event_id"),
            error_detail=(
                f"Checksum mismatch on last event. "
                f"Recorded: {recorded_checksum!r}. "
                f"Expected: {expected_checksum!r}."
            ),
        )

    event_id = envelope.get("event_id")
    if not isinstance(event_id, str) or not event_id:
        return LedgerVerifyResult(
            status="corrupt",
            last_event_id=None,
            error_detail="Last line is missing a valid 'event_id' string.",
        )

    return LedgerVerifyResult(status="ok", last_event_id=event_id, error_detail=None)


class JsonlRunLedger:
    """:class:`~item_loader.host.interfaces.RunLedger` bound to one run file."""

    def __init__(self, ledger_root: Path | str, run_id: str | None = None) -> None:
        self.ledger_root = Path(ledger_root)
        self.run_id = run_id or new_run_id()

    @property
    def path(self) -> Path:
        return _ledger_path(self.ledger_root, self.run_id)

    def record(self, event_type: str, data: dict[str, Any]) -> str:
        return append_event(self.ledger_root, self.run_id, event_type, data)

    def verify(self) -> LedgerVerifyResult:
        return verify_run_ledger(self.ledger_root, self.run_id)


# ── Internal helpers ──────────────────────────────────────────────────────────


def _ledger_path(ledger_root: Path, run_id: str) -> Path:
    return Path(ledger_root) / f"{run_id}.jsonl"


def _compute_checksum(payload: dict[str, Any]) -> str:
    """SHA-256 hex digest of the canonical JSON serialisation of ``payload``."""
    canonical = json.dumps(payload, ensure_ascii=False, sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _append_line_locked(path: Path, line: str) -> None:
    """Append one newline-terminated line under an exclusive POSIX lock."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fcntl.flock(fh, fcntl.LOCK_EX)
        try:
            fh.write(line + "\n")
            fh.flush()
        finally:
            fcntl.flock(fh, fcntl.LOCK_UN)


def _read_last_nonempty_line(path: Path) -> str | None:
    """Return the last non-empty line, reading at most ``_TAIL_CHUNK_BYTES``.

    Returns ``None`` for a blank file or on :exc:`OSError`.
    """
    try:
        with path.open("rb") as fh:
            fh.seek(0, 2)
            size = fh.tell()
            if size == 0:
                return None
            fh.seek(max(0, size - _TAIL_CHUNK_BYTES))
            chunk = fh.read()
    except OSError:
        return None

    for line in reversed(chunk.decode("utf-8", errors="replace").splitlines()):
        stripped = line.strip()
        if stripped:
            return stripped
    return None
