"""Tests for asset (bundle) path resolution."""

from __future__ import annotations

import logging

import pytest

from item_loader.config import DEFAULT_ASSET_PATH
from item_loader.core.assets import key_matches_item, resolve_asset_path
from item_loader.core.models import AssetManifestEntry, ItemDefinition
from item_loader.errors import SourceReadError
from item_loader.sources import InMemoryManifest, ManifestFile


class _BrokenManifest:
    """Manifest whose every read fails."""

    def entries(self):
        raise SourceReadError("bundles.json", ValueError("truncated"))


def _definition(**kwargs) -> ItemDefinition:
    return ItemDefinition(external_id="coin01", has_properties=True, **kwargs)


# ============================================================================
# PRECEDENCE
# ============================================================================


@pytest.mark.unit
class TestPrecedence:
    def test_top_level_override_wins_over_everything(self):
        definition = _definition(bundle_key_override="X", nested_bundle_key_override="Y")
        manifest = InMemoryManifest(["mods/coin01.bundle"])

        result = resolve_asset_path("coin01", definition, manifest)

        assert result.path == "X"
        assert result.source == "top_level"
        assert not result.is_fallback

    def test_nested_override_wins_over_manifest(self):
        definition = _definition(nested_bundle_key_override="Y")
        manifest = InMemoryManifest(["mods/coin01.bundle"])

        result = resolve_asset_path("coin01", definition, manifest)

        assert result.path == "Y"
        assert result.source == "nested"

    @pytest.mark.parametrize("blank", ["", "   ", "\t"])
    def test_blank_overrides_are_ignored(self, blank):
        definition = _definition(bundle_key_override=blank, nested_bundle_key_override=blank)
        manifest = InMemoryManifest(["mods/coin01.bundle"])

        result = resolve_asset_path("coin01", definition, manifest)

        assert result.path == "mods/coin01.bundle"
        assert result.source == "manifest_match"

    def test_first_matching_entry_in_manifest_order(self):
        manifest = InMemoryManifest(
            ["mods/other.bundle", "mods/coin01_a.bundle", "mods/coin01_b.bundle"]
        )

        result = resolve_asset_path("coin01", _definition(), manifest)

        assert result.path == "mods/coin01_a.bundle"
        assert not result.is_fallback

    def test_falls_back_to_first_entry_with_warning(self, caplog):
        manifest = InMemoryManifest(["mods/a.bundle", "mods/b.bundle"])

        with caplog.at_level(logging.WARNING):
            result = resolve_asset_path("coin01", _definition(), manifest)

        assert result.path == "mods/a.bundle"
        assert result.source == "manifest_fallback"
        assert result.is_fallback
        assert "falling back to first key: mods/a.bundle" in caplog.text

    def test_empty_manifest_uses_default(self):
        result = resolve_asset_path("coin01", _definition(), InMemoryManifest())

        assert result.path == DEFAULT_ASSET_PATH
        assert result.source == "default"
        assert result.is_fallback

    def test_default_asset_path_is_configurable(self):
        result = resolve_asset_path(
            "coin01", _definition(), [], default_asset_path="mods/custom.bundle"
        )

        assert result.path == "mods/custom.bundle"

    def test_accepts_plain_sequence_of_entries(self):
        entries = [AssetManifestEntry("mods/coin01.bundle")]

        result = resolve_asset_path("coin01", _definition(), entries)

        assert result.path == "mods/coin01.bundle"


# ============================================================================
# MANIFEST READ FAILURES
# ============================================================================


@pytest.mark.unit
class TestManifestFailures:
    def test_unreadable_manifest_degrades_to_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = resolve_asset_path("coin01", _definition(), _BrokenManifest())

        assert result.path == DEFAULT_ASSET_PATH
        assert result.source == "default"
        assert "Could not read asset manifest" in caplog.text

    def test_missing_manifest_file_degrades_to_default(self, tmp_path):
        manifest = ManifestFile(tmp_path / "bundles.json")

        result = resolve_asset_path("coin01", _definition(), manifest)

        assert result.path == DEFAULT_ASSET_PATH

    def test_overrides_do_not_read_manifest(self):
        result = resolve_asset_path(
            "coin01", _definition(bundle_key_override="X"), _BrokenManifest()
        )

        assert result.path == "X"

    def test_fallback_skips_unusable_first_row(self, tmp_path):
        path = tmp_path / "bundles.json"
        path.write_text(
            '{"manifest": [{"key": null}, {"key": "mods/a.bundle"}]}', encoding="utf-8"
        )

        result = resolve_asset_path("coin01", _definition(), ManifestFile(path))

        assert result.path == "mods/a.bundle"
        assert result.source == "manifest_fallback"

    def test_manifest_is_read_fresh_each_call(self, tmp_path):
        path = tmp_path / "bundles.json"
        path.write_text('{"manifest": [{"key": "mods/a.bundle"}]}', encoding="utf-8")
        manifest = ManifestFile(path)

        first = resolve_asset_path("coin01", _definition(), manifest)
        path.write_text('{"manifest": [{"key": "mods/coin01.bundle"}]}', encoding="utf-8")
        second = resolve_asset_path("coin01", _definition(), manifest)

        assert first.path == "mods/a.bundle"
        assert second.path == "mods/coin01.bundle"


# ============================================================================
# IDENTITY MATCH RULE
# ============================================================================


@pytest.mark.unit
class TestKeyMatchesItem:
    @pytest.mark.parametrize(
        "key",
        [
            "mods/coin01.bundle",
            "MODS/COIN01.BUNDLE",
            "mods/coin01/model.bundle",
            "mods/gold_coin01_v2.bundle",
            "mods\\coin01.bundle",
            "coin01",
        ],
    )
    def test_matches(self, key):
        assert key_matches_item(key, "coin01")

    @pytest.mark.parametrize(
        "key",
        [
            "mods/coin02.bundle",
            "mods/coin.bundle",
            "coin01_dir/other.bundle",
        ],
    )
    def test_does_not_match(self, key):
        assert not key_matches_item(key, "coin01")

    def test_short_ids_match_loosely(self):
        """A one-letter id matches any stem containing that letter."""
        assert key_matches_item("mods/banana.bundle", "a")

    def test_mixed_case_id(self):
        assert key_matches_item("mods/coin01.bundle", "Coin01")
