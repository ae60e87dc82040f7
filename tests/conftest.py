"""
Shared pytest fixtures for the item loader test suite.

This module provides fixtures that are automatically available to all test files:
- A temporary mod root laid out like an installed mod
- Helpers for writing definition, locale and manifest documents
- A recording cloner that captures clone requests without a host
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from item_loader.config import DefaultSettings, PathSettings
from item_loader.core.models import CloneRequest, CloneResult

# ============================================================================
# COLLABORATOR DOUBLES
# ============================================================================


class RecordingCloner:
    """Cloner that records every request and answers from a script.

    Args:
        fail_ids: External ids whose clone should report failure.
        raise_ids: External ids whose clone should raise.
    """

    def __init__(self, fail_ids: set[str] | None = None, raise_ids: set[str] | None = None):
        self.requests: list[CloneRequest] = []
        self._fail_ids = fail_ids or set()
        self._raise_ids = raise_ids or set()

    def create_item_from_clone(self, request: CloneRequest) -> CloneResult:
        self.requests.append(request)
        if request.external_id in self._raise_ids:
            raise RuntimeError(f"host exploded on {request.external_id}")
        if request.external_id in self._fail_ids:
            return CloneResult(
                success=False,
                item_id=request.new_internal_id,
                errors=("template rejected",),
            )
        return CloneResult(success=True, item_id=request.new_internal_id)


class RecordingLedger:
    """In-memory :class:`RunLedger` double."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def record(self, event_type: str, data: dict[str, Any]) -> str:
        self.events.append((event_type, data))
        return f"evt-{len(self.events)}"

    def event_types(self) -> list[str]:
        return [event_type for event_type, _ in self.events]


@pytest.fixture
def cloner() -> RecordingCloner:
    """A cloner that succeeds for every request."""
    return RecordingCloner()


@pytest.fixture
def make_cloner() -> type[RecordingCloner]:
    """The recording cloner class, for tests that script failures."""
    return RecordingCloner


@pytest.fixture
def ledger() -> RecordingLedger:
    """An in-memory ledger."""
    return RecordingLedger()


# ============================================================================
# MOD LAYOUT FIXTURES
# ============================================================================


def write_json(path: Path, payload: Any) -> Path:
    """Write ``payload`` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def mod_paths(tmp_path: Path) -> PathSettings:
    """Path settings rooted at a fresh temporary mod directory."""
    return PathSettings(mod_root=str(tmp_path / "mod"))


@pytest.fixture
def write_definition(mod_paths: PathSettings) -> Callable[[str, Any], Path]:
    """Write a definition document into the mod's items directory."""

    def _write(filename: str, payload: Any) -> Path:
        return write_json(mod_paths.items_path / filename, payload)

    return _write


@pytest.fixture
def write_locale(mod_paths: PathSettings) -> Callable[[str, Any], Path]:
    """Write a locale document keyed by external id."""

    def _write(external_id: str, payload: Any) -> Path:
        return write_json(mod_paths.locales_path / f"{external_id}.json", payload)

    return _write


@pytest.fixture
def write_manifest(mod_paths: PathSettings) -> Callable[[list[str]], Path]:
    """Write ``bundles.json`` with the given keys in order."""

    def _write(keys: list[str]) -> Path:
        return write_json(mod_paths.manifest_file, {"manifest": [{"key": key} for key in keys]})

    return _write


@pytest.fixture
def default_settings() -> DefaultSettings:
    """Built-in fallback settings."""
    return DefaultSettings()
