"""Collaborator contracts consumed by the pipeline.

The pipeline owns no item table.  It talks to the host through three narrow
capabilities, passed in explicitly by whoever starts the run:

- :class:`ItemCloner`   materialises a clone request in the live item table.
- :class:`ItemDatabase` is the table a cloner writes into.
- :class:`RunLedger`    records per-file outcomes for later audit.

Any object with matching methods satisfies these protocols; nothing needs to
inherit from them.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from item_loader.core.models import CloneRequest, CloneResult


@runtime_checkable
class ItemCloner(Protocol):
    """Derives a new item from a template item."""

    def create_item_from_clone(self, request: CloneRequest) -> CloneResult | None:
        """Materialise ``request``.

        Returns a :class:`CloneResult`.  ``None`` is tolerated and treated as
        a failure, matching hosts that return nothing on error.
        """
        ...


@runtime_checkable
class ItemDatabase(Protocol):
    """In-memory item table owned by the host."""

    def get_item(self, item_id: str) -> dict[str, Any] | None: ...

    def has_item(self, item_id: str) -> bool: ...

    def add_item(self, item_id: str, item: dict[str, Any]) -> None: ...

    def add_handbook_entry(self, entry: dict[str, Any]) -> None: ...

    def add_locale(self, locale_tag: str, key: str, text: str) -> None: ...


@runtime_checkable
class RunLedger(Protocol):
    """Append-only record of what a run did."""

    def record(self, event_type: str, data: dict[str, Any]) -> str:
        """Append one event and return its id.

        Raises:
            LedgerWriteError: If the record could not be written.
        """
        ...
