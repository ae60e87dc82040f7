"""Locale resolution for item definitions.

Locale documents are keyed by the item's *external* id (the id authors
write), not the hashed internal id.  A document may carry ``Name``,
``ShortName`` and ``Description``; anything it omits is filled in:

- ``Name`` defaults to the external id.
- ``ShortName`` defaults to ``Name``.
- ``Description`` defaults to ``""``.

A missing or unreadable document never aborts the item.  The resolver
synthesizes a record from the external id and reports the degradation so
the caller can log it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from item_loader.core.models import LocaleRecord, LocaleResolution
from item_loader.errors import SourceReadError
from item_loader.sources import LocaleSource

logger = logging.getLogger(__name__)

DEFAULT_LOCALE_TAG = "en"

_LOCALE_FIELDS = ("Name", "ShortName", "Description")


def synthesize_locale(external_id: str) -> LocaleRecord:
    """Build the placeholder record used when no locale text is available."""
    return LocaleRecord(name=external_id, short_name=external_id, description="")


def locale_from_document(external_id: str, document: Mapping[str, Any]) -> LocaleRecord:
    """Build a :class:`LocaleRecord` from a raw locale document.

    Raises:
        ValueError: If a present field is neither a string nor ``null``.
    """
    for field_name in _LOCALE_FIELDS:
        value = document.get(field_name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")

    name = document.get("Name")
    short_name = document.get("ShortName") if "ShortName" in document else name
    description = document.get("Description")

    return LocaleRecord(
        name=name if name is not None else external_id,
        short_name=short_name if short_name is not None else (name or external_id),
        description=description if description is not None else "",
    )


def resolve_locales(
    external_id: str,
    source: LocaleSource,
    *,
    locale_tag: str = DEFAULT_LOCALE_TAG,
    log: logging.Logger | None = None,
) -> LocaleResolution:
    """Resolve the locale map for one item.

    Args:
        external_id: Item's external id; also the locale document key.
        source:      Where locale documents are looked up.
        locale_tag:  Language tag the record is stored under.
        log:         Destination for locale events.

    Returns:
        A :class:`LocaleResolution` with exactly one entry under
        ``locale_tag``.  ``degraded`` is set when the record was synthesized.
    """
    log = log or logger

    try:
        document = source.get(external_id)
        if document is None:
            log.info(
                "[ItemLoader] No locale file for item %s, using its id as display name",
                external_id,
            )
            return LocaleResolution(
                locales={locale_tag: synthesize_locale(external_id)},
                degraded=True,
                reason="missing",
            )
        record = locale_from_document(external_id, document)
    except (SourceReadError, ValueError) as exc:
        log.error("[ItemLoader] Failed to read locale for item %s: %s", external_id, exc)
        return LocaleResolution(
            locales={locale_tag: synthesize_locale(external_id)},
            degraded=True,
            reason="unreadable",
        )

    log.info("[ItemLoader] Loaded locale for item %s", external_id)
    return LocaleResolution(locales={locale_tag: record})
