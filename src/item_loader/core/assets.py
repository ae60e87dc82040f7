"""Asset (bundle) resolution for item definitions.

Every cloned item needs a prefab path pointing at a packaged visual asset.
The path is chosen by a fixed precedence chain:

1. Top-level ``bundleKey`` in the definition, if non-blank.
2. ``_props.BundleKey`` in the definition, if non-blank.
3. The first manifest entry whose key matches the external id
   (case-insensitive; see :func:`key_matches_item`).
4. The first manifest entry, flagged as a fallback and logged as a warning.
5. :data:`~item_loader.config.DEFAULT_ASSET_PATH`.

Resolution never raises.  A manifest that cannot be read is treated as
empty: the warning is logged and the chain continues at step 5.

The identity match in step 3 is deliberately loose (a substring test on the
file stem), so short external ids can match unrelated bundles.  The rule is
kept as authored because mods in the wild rely on it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from item_loader.config import DEFAULT_ASSET_PATH
from item_loader.core.models import AssetManifestEntry, AssetResolution, ItemDefinition
from item_loader.errors import SourceReadError
from item_loader.sources import ManifestSource

logger = logging.getLogger(__name__)

_PATH_SEPARATORS = re.compile(r"[\\/]")


def _file_stem(key: str) -> str:
    """Return the file name of ``key`` without directory or final extension."""
    name = _PATH_SEPARATORS.split(key)[-1]
    if "." in name:
        return name.rsplit(".", 1)[0]
    return name


def key_matches_item(key: str, external_id: str) -> bool:
    """True when manifest ``key`` looks like the bundle for ``external_id``.

    Comparison is case-insensitive.  A key matches when its file stem
    contains the id, or when the key contains ``/<id>.`` or ``/<id>/``.
    """
    id_lower = external_id.lower()
    key_lower = key.lower()
    return (
        id_lower in _file_stem(key_lower)
        or f"/{id_lower}." in key_lower
        or f"/{id_lower}/" in key_lower
    )


def _non_blank(value: str | None) -> str | None:
    if value is not None and value.strip():
        return value
    return None


def _load_entries(
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    external_id: str,
    log: logging.Logger,
) -> list[AssetManifestEntry]:
    """Read the manifest, degrading read failures to an empty list."""
    if not isinstance(manifest, ManifestSource):
        return list(manifest)
    try:
        return manifest.entries()
    except SourceReadError as exc:
        log.warning(
            "[ItemLoader] Could not read asset manifest while resolving %s, "
            "using default asset: %s",
            external_id,
            exc,
        )
        return []


def resolve_asset_path(
    external_id: str,
    definition: ItemDefinition,
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    *,
    default_asset_path: str = DEFAULT_ASSET_PATH,
    log: logging.Logger | None = None,
) -> AssetResolution:
    """Choose the asset path for one item.

    Args:
        external_id:        The item's external id (matched against keys).
        definition:         Parsed definition carrying any explicit overrides.
        manifest:           A :class:`~item_loader.sources.ManifestSource`
                            (read fresh on this call) or a plain sequence of
                            entries.
        default_asset_path: Returned when nothing else applies.
        log:                Destination for fallback and read-error warnings.

    Returns:
        An :class:`AssetResolution`; check ``is_fallback`` to tell an
        identity match from a fallback.
    """
    log = log or logger

    if top_level := _non_blank(definition.bundle_key_override):
        return AssetResolution(path=top_level, source="top_level")

    if nested := _non_blank(definition.nested_bundle_key_override):
        return AssetResolution(path=nested, source="nested")

    entries = _load_entries(manifest, external_id, log)

    for entry in entries:
        if key_matches_item(entry.key, external_id):
            return AssetResolution(path=entry.key, source="manifest_match")

    # Rows without a usable key were dropped when the manifest was parsed, so
    # this is the first *valid* entry. A manifest whose first row is unusable
    # still falls back here rather than to the default path.
    if entries:
        fallback = entries[0].key
        log.warning(
            "[ItemLoader] No manifest bundle matched item %s, falling back to first key: %s",
            external_id,
            fallback,
        )
        return AssetResolution(path=fallback, source="manifest_fallback")

    return AssetResolution(path=default_asset_path, source="default")
