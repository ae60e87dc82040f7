"""Read-only lookup sources for the asset manifest and per-item locales.

The pipeline never opens manifest or locale files itself.  It asks a
*source* instead, so the same resolution code runs against the mod's
directory layout in production and against in-memory fixtures in tests.

Contract shared by every source:
    - Reads are fresh on every call.  Filesystem sources re-read the file
      each time; nothing is cached across calls.
    - "Not there" is a normal answer (``None`` or an empty list).
    - "There but unreadable" raises :exc:`~item_loader.errors.SourceReadError`.
      Callers decide how to degrade.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from item_loader.core.models import AssetManifestEntry
from item_loader.errors import SourceReadError

# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class ManifestSource(Protocol):
    """Ordered, read-only list of packaged asset entries."""

    def entries(self) -> list[AssetManifestEntry]:
        """Return manifest entries in stored order.

        Raises:
            SourceReadError: If the manifest exists but cannot be read, or
                             (for file-backed sources) does not exist.
        """
        ...


@runtime_checkable
class LocaleSource(Protocol):
    """Per-item locale documents keyed by **external** id."""

    def get(self, external_id: str) -> Mapping[str, Any] | None:
        """Return the raw locale document, or ``None`` if there is none.

        Raises:
            SourceReadError: If a document exists but cannot be parsed.
        """
        ...


# ---------------------------------------------------------------------------
# Filesystem sources
# ---------------------------------------------------------------------------


def read_json_document(path: Path) -> Any:
    """Read and parse one JSON document, wrapping failures in SourceReadError."""
    try:
        with path.open("r", encoding="utf-8-sig") as fh:
            return json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SourceReadError(path, exc) from exc


def parse_manifest_entries(document: Any) -> list[AssetManifestEntry]:
    """Extract entries from a ``{"manifest": [{"key": ...}, ...]}`` document.

    Entries whose ``key`` is missing, not a string, or blank are dropped;
    the relative order of the remaining entries is preserved.  A document
    without a ``manifest`` array yields an empty list.
    """
    if not isinstance(document, dict):
        return []
    rows = document.get("manifest")
    if not isinstance(rows, list):
        return []

    entries: list[AssetManifestEntry] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        key = row.get("key")
        if isinstance(key, str) and key.strip():
            entries.append(AssetManifestEntry(key=key))
    return entries


class ManifestFile:
    """Manifest backed by a ``bundles.json`` document on disk."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def entries(self) -> list[AssetManifestEntry]:
        try:
            present = self._path.is_file()
        except OSError as exc:
            raise SourceReadError(self._path, exc) from exc
        if not present:
            raise SourceReadError(self._path, FileNotFoundError("manifest not found"))
        return parse_manifest_entries(read_json_document(self._path))


class LocaleDirectory:
    """Locale documents stored as ``<root>/<external_id>.json``."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    def path_for(self, external_id: str) -> Path:
        return self._root / f"{external_id}.json"

    def get(self, external_id: str) -> Mapping[str, Any] | None:
        path = self.path_for(external_id)
        # Ids longer than the filesystem's name limit fail in stat, not open.
        try:
            present = path.is_file()
        except OSError as exc:
            raise SourceReadError(path, exc) from exc
        if not present:
            return None
        document = read_json_document(path)
        if not isinstance(document, dict):
            raise SourceReadError(path, ValueError("locale document must be a JSON object"))
        return document


# ---------------------------------------------------------------------------
# In-memory sources
# ---------------------------------------------------------------------------


class InMemoryManifest:
    """Manifest built from a list of keys or entries."""

    def __init__(self, entries: Iterable[AssetManifestEntry | str] = ()) -> None:
        self._entries = [
            entry if isinstance(entry, AssetManifestEntry) else AssetManifestEntry(key=entry)
            for entry in entries
        ]

    def entries(self) -> list[AssetManifestEntry]:
        return list(self._entries)


class InMemoryLocales:
    """Locale documents held in a dict keyed by external id."""

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._documents = dict(documents or {})

    def get(self, external_id: str) -> Mapping[str, Any] | None:
        return self._documents.get(external_id)
