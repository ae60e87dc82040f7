"""Tests for the reference template cloner."""

from __future__ import annotations

import pytest

from item_loader.core.models import CloneRequest, LocaleRecord, PropertyOverrides
from item_loader.host import InMemoryItemDatabase, ItemCloner, ItemDatabase, TemplateItemCloner
from tests.constants import TEMPLATE_ITEMS


def _request(**kwargs) -> CloneRequest:
    values = {
        "source_template_id": "base123",
        "new_internal_id": "a" * 24,
        "parent_id": "",
        "handbook_parent_id": "",
        "handbook_price_roubles": None,
        "locales": {"en": LocaleRecord(name="Coin", short_name="C", description="Shiny")},
        "override_properties": PropertyOverrides(),
        "external_id": "coin01",
    }
    values.update(kwargs)
    return CloneRequest(**values)


@pytest.fixture
def database() -> InMemoryItemDatabase:
    return InMemoryItemDatabase(TEMPLATE_ITEMS)


@pytest.mark.unit
class TestTemplateItemCloner:
    def test_protocols(self, database):
        assert isinstance(database, ItemDatabase)
        assert isinstance(TemplateItemCloner(database), ItemCloner)

    def test_clones_template(self, database):
        result = TemplateItemCloner(database).create_item_from_clone(_request())

        assert result.success
        assert result.item_id == "a" * 24
        item = database.get_item("a" * 24)
        assert item["_id"] == "a" * 24
        assert item["_parent"] == TEMPLATE_ITEMS["base123"]["_parent"]
        assert item["_props"]["Name"] == "Base coin"

    def test_clone_does_not_share_state_with_template(self, database):
        TemplateItemCloner(database).create_item_from_clone(
            _request(override_properties=PropertyOverrides(name="Coin"))
        )

        assert database.get_item("base123")["_props"]["Name"] == "Base coin"
        assert database.get_item("a" * 24)["_props"]["Name"] == "Coin"

    def test_applies_overrides(self, database):
        overrides = PropertyOverrides(
            name="Coin", description="Shiny", asset_path="mods/coin01.bundle"
        )

        TemplateItemCloner(database).create_item_from_clone(
            _request(override_properties=overrides, parent_id="new-parent")
        )

        item = database.get_item("a" * 24)
        assert item["_parent"] == "new-parent"
        assert item["_props"]["Description"] == "Shiny"
        assert item["_props"]["Prefab"] == {"path": "mods/coin01.bundle", "rcid": ""}

    def test_handbook_entry_only_with_parent(self, database):
        cloner = TemplateItemCloner(database)
        cloner.create_item_from_clone(_request())
        cloner.create_item_from_clone(
            _request(new_internal_id="b" * 24, handbook_parent_id="hb", handbook_price_roubles=99)
        )

        assert database.handbook == [{"Id": "b" * 24, "ParentId": "hb", "Price": 99}]

    def test_missing_price_defaults_to_zero(self, database):
        TemplateItemCloner(database).create_item_from_clone(_request(handbook_parent_id="hb"))
        assert database.handbook[0]["Price"] == 0

    def test_adds_locale_strings(self, database):
        TemplateItemCloner(database).create_item_from_clone(_request())

        assert database.locales["en"] == {
            f"{'a' * 24} Name": "Coin",
            f"{'a' * 24} ShortName": "C",
            f"{'a' * 24} Description": "Shiny",
        }

    def test_missing_template_fails(self, database):
        result = TemplateItemCloner(database).create_item_from_clone(
            _request(source_template_id="nope")
        )

        assert not result.success
        assert "Template item nope not found" in result.errors[0]
        assert not database.has_item("a" * 24)

    def test_existing_id_fails_and_leaves_table_untouched(self, database):
        cloner = TemplateItemCloner(database)
        cloner.create_item_from_clone(_request(override_properties=PropertyOverrides(name="One")))

        result = cloner.create_item_from_clone(
            _request(override_properties=PropertyOverrides(name="Two"))
        )

        assert not result.success
        assert database.get_item("a" * 24)["_props"]["Name"] == "One"
