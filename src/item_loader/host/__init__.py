"""Host collaborator contracts and their reference implementations.

Typical usage::

    from item_loader.host import JsonItemDatabase, TemplateItemCloner

    db = JsonItemDatabase.from_file("templates/items.json")
    cloner = TemplateItemCloner(db)
"""

from item_loader.host.cloner import TemplateItemCloner
from item_loader.host.database import InMemoryItemDatabase, JsonItemDatabase
from item_loader.host.interfaces import ItemCloner, ItemDatabase, RunLedger

__all__ = [
    "InMemoryItemDatabase",
    "ItemCloner",
    "ItemDatabase",
    "JsonItemDatabase",
    "RunLedger",
    "TemplateItemCloner",
]
