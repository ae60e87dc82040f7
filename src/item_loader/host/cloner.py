"""Reference item-cloning engine.

:class:`TemplateItemCloner` implements the :class:`~item_loader.host.interfaces.ItemCloner`
contract against any :class:`~item_loader.host.interfaces.ItemDatabase`.
It is what the CLI runs offline, and the behaviour a host engine is expected
to match:

1. The template must exist and the new id must be free; otherwise the
   result is a failure and the database is untouched.
2. The template is deep-copied, so the clone never shares state with it.
3. ``_id`` is set to the new internal id and ``_parent`` to the requested
   parent when one is given.
4. Name, description and prefab path overrides are written into ``_props``.
5. A handbook entry is added when a handbook parent is given.
6. Each locale record becomes ``"<id> Name"``, ``"<id> ShortName"`` and
   ``"<id> Description"`` strings under its language tag.
"""

from __future__ import annotations

import copy
import logging

from item_loader.core.models import CloneRequest, CloneResult
from item_loader.host.interfaces import ItemDatabase

logger = logging.getLogger(__name__)


class TemplateItemCloner:
    """Clone template items into an item database."""

    def __init__(self, database: ItemDatabase) -> None:
        self._db = database

    def create_item_from_clone(self, request: CloneRequest) -> CloneResult:
        new_id = request.new_internal_id

        template = self._db.get_item(request.source_template_id)
        if template is None:
            return CloneResult(
                success=False,
                item_id=new_id,
                errors=(f"Template item {request.source_template_id} not found",),
            )
        if self._db.has_item(new_id):
            return CloneResult(
                success=False,
                item_id=new_id,
                errors=(f"Item {new_id} already exists",),
            )

        item = copy.deepcopy(template)
        item["_id"] = new_id
        if request.parent_id:
            item["_parent"] = request.parent_id

        overrides = request.override_properties
        if not overrides.is_empty():
            props = item.setdefault("_props", {})
            if overrides.name is not None:
                props["Name"] = overrides.name
            if overrides.description is not None:
                props["Description"] = overrides.description
            if overrides.asset_path:
                props["Prefab"] = {"path": overrides.asset_path, "rcid": ""}

        self._db.add_item(new_id, item)

        if request.handbook_parent_id:
            self._db.add_handbook_entry(
                {
                    "Id": new_id,
                    "ParentId": request.handbook_parent_id,
                    "Price": request.handbook_price_roubles or 0,
                }
            )

        for tag, record in request.locales.items():
            self._db.add_locale(tag, f"{new_id} Name", record.name)
            self._db.add_locale(tag, f"{new_id} ShortName", record.short_name)
            self._db.add_locale(tag, f"{new_id} Description", record.description)

        logger.debug("Cloned %s from %s", new_id, request.source_template_id)
        return CloneResult(success=True, item_id=new_id)
