"""Reference item databases.

:class:`InMemoryItemDatabase` holds the item table, handbook and locale
strings in plain dicts.  :class:`JsonItemDatabase` adds loading a template
table from an ``items.json`` file and saving the result back to disk, which
is what the CLI uses for offline runs.

File formats:

- ``items.json``: ``{"<item_id>": {"_id": ..., "_parent": ..., "_props": {...}}}``
- ``handbook.json``: ``{"Items": [{"Id": ..., "ParentId": ..., "Price": ...}]}``
- ``locales/<tag>.json``: ``{"<item_id> Name": "...", ...}``
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from item_loader.errors import SourceReadError
from item_loader.sources import read_json_document

logger = logging.getLogger(__name__)


class InMemoryItemDatabase:
    """Item table, handbook and locale strings held in memory."""

    def __init__(self, items: dict[str, dict[str, Any]] | None = None) -> None:
        self.items: dict[str, dict[str, Any]] = dict(items or {})
        self.handbook: list[dict[str, Any]] = []
        self.locales: dict[str, dict[str, str]] = {}

    def get_item(self, item_id: str) -> dict[str, Any] | None:
        return self.items.get(item_id)

    def has_item(self, item_id: str) -> bool:
        return item_id in self.items

    def add_item(self, item_id: str, item: dict[str, Any]) -> None:
        self.items[item_id] = item

    def add_handbook_entry(self, entry: dict[str, Any]) -> None:
        self.handbook.append(entry)

    def add_locale(self, locale_tag: str, key: str, text: str) -> None:
        self.locales.setdefault(locale_tag, {})[key] = text


class JsonItemDatabase(InMemoryItemDatabase):
    """In-memory database seeded from, and saved to, JSON files."""

    @classmethod
    def from_file(cls, templates_path: Path | str) -> JsonItemDatabase:
        """Load a template table from ``items.json``.

        Raises:
            SourceReadError: If the file is missing, malformed, or not a
                             JSON object.
        """
        path = Path(templates_path)
        if not path.exists():
            raise SourceReadError(path, FileNotFoundError("template table not found"))
        document = read_json_document(path)
        if not isinstance(document, dict):
            raise SourceReadError(path, ValueError("template table must be a JSON object"))
        logger.info("Loaded %d template items from %s", len(document), path)
        return cls(items=document)

    def save(self, output_dir: Path | str) -> list[Path]:
        """Write items, handbook and locales under ``output_dir``.

        Returns:
            The paths written, in write order.
        """
        root = Path(output_dir)
        root.mkdir(parents=True, exist_ok=True)
        written = [
            self._write(root / "items.json", self.items),
            self._write(root / "handbook.json", {"Items": self.handbook}),
        ]
        for tag, strings in sorted(self.locales.items()):
            written.append(self._write(root / "locales" / f"{tag}.json", strings))
        logger.info("Saved item database to %s (%d files)", root, len(written))
        return written

    @staticmethod
    def _write(path: Path, payload: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2, sort_keys=True)
            fh.write("\n")
        return path
