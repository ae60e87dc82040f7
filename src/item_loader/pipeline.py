"""
Item definition pipeline.

Turns a directory of item-definition documents into clone requests and
hands each request to an item-cloning collaborator.

Per-file lifecycle:

    Parsing -> Skipped                      (no external id)
    Parsing -> Resolving -> Emitting -> Delegated -> Reported-Success
                                                  -> Reported-Failure

Rules the run upholds:
- Files are independent.  One file failing (unreadable JSON, a cloner error)
  is logged and recorded, and the run continues with the next file.
- Nothing in a run is fatal.  A missing definitions directory is a no-op.
- Degraded resolution (asset fallback, synthesized locale) is logged but
  still produces a clone request.

Usage:
    from item_loader.pipeline import load_items

    summary = load_items(
        config.paths.items_path,
        cloner=cloner,
        manifest=ManifestFile(config.paths.manifest_file),
        locales=LocaleDirectory(config.paths.locales_path),
        ledger=JsonlRunLedger(config.paths.ledger_path),
        settings=config.defaults,
    )

Document shape (keys the pipeline reads):
    {
        "_id": "coin01",                 required; absent/empty -> skip
        "_proto": "<template id>",       optional
        "parentId": "...",               optional
        "handbookParentId": "...",       optional
        "handbookPrice": 1500,           optional number
        "bundleKey": "...",              optional top-level asset override
        "_props": {
            "Name": "...",
            "Description": "...",
            "BundleKey": "..."           optional nested asset override
        }
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from item_loader.config import DefaultSettings
from item_loader.core.assets import resolve_asset_path
from item_loader.core.ids import generate_internal_id
from item_loader.core.locales import resolve_locales
from item_loader.core.models import (
    AssetManifestEntry,
    CloneRequest,
    FileOutcome,
    ItemDefinition,
    PropertyOverrides,
    RunSummary,
)
from item_loader.errors import LedgerWriteError
from item_loader.host.interfaces import ItemCloner, RunLedger
from item_loader.sources import LocaleSource, ManifestSource

logger = logging.getLogger(__name__)

# ============================================================================
# PARSING
# ============================================================================


def _get_string(document: Mapping[str, Any], key: str) -> str | None:
    """Return ``document[key]`` if it is a string, else ``None``."""
    value = document.get(key)
    return value if isinstance(value, str) else None


def _get_number(document: Mapping[str, Any], key: str) -> float | None:
    """Return ``document[key]`` as a float if it is a JSON number, else ``None``."""
    value = document.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def parse_definition(raw: Any) -> ItemDefinition | None:
    """Parse one raw definition document.

    Returns:
        The parsed :class:`ItemDefinition`, or ``None`` when the document
        has no usable external id (the caller skips it).
    """
    if not isinstance(raw, Mapping):
        return None

    external_id = _get_string(raw, "_id")
    if not external_id:
        return None

    props = raw.get("_props")
    has_properties = isinstance(props, Mapping)
    if not has_properties:
        props = {}

    return ItemDefinition(
        external_id=external_id,
        clone_template_id=_get_string(raw, "_proto") or None,
        parent_id=_get_string(raw, "parentId") or "",
        handbook_parent_id=_get_string(raw, "handbookParentId") or "",
        handbook_price_roubles=_get_number(raw, "handbookPrice"),
        name=_get_string(props, "Name"),
        description=_get_string(props, "Description"),
        bundle_key_override=_get_string(raw, "bundleKey"),
        nested_bundle_key_override=_get_string(props, "BundleKey"),
        has_properties=has_properties,
    )


# ============================================================================
# REQUEST ASSEMBLY
# ============================================================================


def build_clone_request(
    definition: ItemDefinition,
    *,
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    locales: LocaleSource,
    settings: DefaultSettings | None = None,
    log: logging.Logger | None = None,
) -> CloneRequest:
    """Resolve identity, asset and locale text for one definition.

    Property overrides are only produced when the definition carried a
    ``_props`` object; the asset is only resolved in that case too.
    """
    settings = settings or DefaultSettings()
    log = log or logger
    external_id = definition.external_id

    template_id = definition.clone_template_id or settings.fallback_template_id
    internal_id = generate_internal_id(external_id)
    log.info("[ItemLoader] Mapped item id %s -> %s", external_id, internal_id)

    overrides = PropertyOverrides()
    if definition.has_properties:
        asset = resolve_asset_path(
            external_id,
            definition,
            manifest,
            default_asset_path=settings.default_asset_path,
            log=log,
        )
        overrides = PropertyOverrides(
            name=definition.name,
            description=definition.description,
            asset_path=asset.path,
        )
        log.info(
            "[ItemLoader] Item %s bound to bundle %s (%s)",
            external_id,
            asset.path,
            asset.source,
        )

    locale_resolution = resolve_locales(
        external_id,
        locales,
        locale_tag=settings.locale_tag,
        log=log,
    )

    return CloneRequest(
        source_template_id=template_id,
        new_internal_id=internal_id,
        parent_id=definition.parent_id,
        handbook_parent_id=definition.handbook_parent_id,
        handbook_price_roubles=definition.handbook_price_roubles,
        locales=locale_resolution.locales,
        override_properties=overrides,
        external_id=external_id,
    )


def process_document(
    raw: Any,
    *,
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    locales: LocaleSource,
    settings: DefaultSettings | None = None,
    log: logging.Logger | None = None,
) -> CloneRequest | None:
    """Turn one raw document into a clone request, or ``None`` to skip it."""
    definition = parse_definition(raw)
    if definition is None:
        return None
    return build_clone_request(
        definition,
        manifest=manifest,
        locales=locales,
        settings=settings,
        log=log,
    )


# ============================================================================
# FILE AND RUN PROCESSING
# ============================================================================


def _record(
    ledger: RunLedger | None, event_type: str, data: dict[str, Any], log: logging.Logger
) -> None:
    """Write a ledger event; a ledger failure only loses the record."""
    if ledger is None:
        return
    try:
        ledger.record(event_type, data)
    except LedgerWriteError:
        log.warning(
            "[ItemLoader] Ledger write failed for %s, run continues", event_type, exc_info=True
        )


def _outcome_event(outcome: FileOutcome) -> tuple[str, dict[str, Any]]:
    return f"item.{outcome.status}", {
        "file": outcome.path.name,
        "external_id": outcome.external_id,
        "internal_id": outcome.internal_id,
        "detail": outcome.detail,
    }


def process_file(
    path: Path,
    *,
    cloner: ItemCloner,
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    locales: LocaleSource,
    settings: DefaultSettings | None = None,
    log: logging.Logger | None = None,
) -> FileOutcome:
    """Process one definition file end to end and report its outcome.

    Never raises for problems confined to this file.
    """
    log = log or logger

    try:
        with path.open("r", encoding="utf-8-sig") as fh:
            raw = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.error("[ItemLoader] Could not read definition file %s: %s", path.name, exc)
        return FileOutcome(path=path, status="unreadable", detail=str(exc))

    request = process_document(raw, manifest=manifest, locales=locales, settings=settings, log=log)
    if request is None:
        log.info("[ItemLoader] Skipping %s: no _id field", path.name)
        return FileOutcome(path=path, status="skipped")

    external_id = request.external_id
    internal_id = request.new_internal_id
    log.info(
        "[ItemLoader] Creating item %s from template %s",
        external_id,
        request.source_template_id,
    )

    try:
        result = cloner.create_item_from_clone(request)
    except Exception as exc:
        log.error("[ItemLoader] Clone of item %s raised", external_id, exc_info=True)
        return FileOutcome(
            path=path,
            status="clone_failed",
            external_id=external_id,
            internal_id=internal_id,
            detail=f"{type(exc).__name__}: {exc}",
        )

    if result is None or not result.success:
        detail = "; ".join(result.errors) if result is not None else "cloner returned no result"
        log.error("[ItemLoader] Failed to create item %s: %s", external_id, detail)
        return FileOutcome(
            path=path,
            status="clone_failed",
            external_id=external_id,
            internal_id=internal_id,
            detail=detail,
        )

    log.info("[ItemLoader] Created item %s (%s)", external_id, internal_id)
    return FileOutcome(path=path, status="cloned", external_id=external_id, internal_id=internal_id)


def load_items(
    definitions_dir: Path | str,
    *,
    cloner: ItemCloner,
    manifest: ManifestSource | Sequence[AssetManifestEntry],
    locales: LocaleSource,
    logger: logging.Logger | None = None,
    ledger: RunLedger | None = None,
    settings: DefaultSettings | None = None,
) -> RunSummary:
    """Load every ``*.json`` definition in ``definitions_dir``.

    Args:
        definitions_dir: Directory of item-definition documents.  A missing
                         directory yields an empty summary.
        cloner:          Collaborator that materialises each clone request.
                         Calls are made one at a time.
        manifest:        Asset manifest, re-read for every item.
        locales:         Per-item locale documents.
        logger:          Destination for run events; defaults to this
                         module's logger.
        ledger:          Optional outcome record.  Write failures are logged
                         and ignored.
        settings:        Fallback template id, default asset path and locale
                         tag.  Defaults to :class:`DefaultSettings`.

    Returns:
        A :class:`RunSummary` with one :class:`FileOutcome` per file.
    """
    log = logger if logger is not None else logging.getLogger(__name__)
    directory = Path(definitions_dir)
    summary = RunSummary()

    if not directory.is_dir():
        log.info("[ItemLoader] No definitions directory at %s, nothing to load", directory)
        return summary

    files = sorted(directory.glob("*.json"))
    log.info("[ItemLoader] Loading %d item definitions from %s", len(files), directory)
    _record(ledger, "run.started", {"directory": str(directory), "files": len(files)}, log)

    for path in files:
        outcome = process_file(
            path,
            cloner=cloner,
            manifest=manifest,
            locales=locales,
            settings=settings,
            log=log,
        )
        summary.outcomes.append(outcome)
        event_type, data = _outcome_event(outcome)
        _record(ledger, event_type, data, log)

    log.info(
        "[ItemLoader] Load complete: %d processed, %d created, %d failed, %d skipped",
        summary.processed,
        summary.succeeded,
        summary.failed,
        summary.skipped,
    )
    _record(
        ledger,
        "run.completed",
        {
            "processed": summary.processed,
            "created": summary.succeeded,
            "failed": summary.failed,
            "skipped": summary.skipped,
        },
        log,
    )
    return summary
