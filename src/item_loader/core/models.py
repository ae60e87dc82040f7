"""Immutable record types for the item definition pipeline.

These frozen dataclasses represent the inputs and outputs of a single
definition's journey through the pipeline: the parsed definition, the
resolved locale text and asset reference, and the clone request handed to
the cloning collaborator.

Design note: nothing here is mutated after construction.  Every run
rebuilds all records from the source files; there is no cache and no
incremental state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

AssetSource = Literal["top_level", "nested", "manifest_match", "manifest_fallback", "default"]
OutcomeStatus = Literal["skipped", "cloned", "clone_failed", "unreadable"]


@dataclass(frozen=True)
class ItemDefinition:
    """One item definition parsed from a source document.

    Attributes:
        external_id:                Human-assigned id (``_id``).  Required.
        clone_template_id:          Template to clone from (``_proto``), or
                                    ``None`` when the document has none.
        parent_id:                  Item-tree parent (``parentId``).
        handbook_parent_id:         Handbook category (``handbookParentId``).
        handbook_price_roubles:     Handbook price (``handbookPrice``).
        name:                       ``_props.Name`` when present.
        description:                ``_props.Description`` when present.
        bundle_key_override:        Top-level ``bundleKey``.
        nested_bundle_key_override: ``_props.BundleKey``.
        has_properties:             Whether the document carried ``_props``.
    """

    external_id: str
    clone_template_id: str | None = None
    parent_id: str = ""
    handbook_parent_id: str = ""
    handbook_price_roubles: float | None = None
    name: str | None = None
    description: str | None = None
    bundle_key_override: str | None = None
    nested_bundle_key_override: str | None = None
    has_properties: bool = False


@dataclass(frozen=True)
class AssetManifestEntry:
    """One packaged asset listed in the manifest."""

    key: str


@dataclass(frozen=True)
class AssetResolution:
    """The asset path chosen for an item and how it was chosen.

    Attributes:
        path:   Asset path to bind to the item.  Never empty.
        source: Which rung of the precedence chain produced ``path``.
    """

    path: str
    source: AssetSource

    @property
    def is_fallback(self) -> bool:
        """True when the path was not matched to the item's identity."""
        return self.source in ("manifest_fallback", "default")


@dataclass(frozen=True)
class LocaleRecord:
    """Display text for one language tag."""

    name: str
    short_name: str
    description: str = ""


@dataclass(frozen=True)
class LocaleResolution:
    """Locale map for one item plus whether it had to be synthesized.

    Attributes:
        locales:  Language tag -> :class:`LocaleRecord`.
        degraded: True when the record was synthesized from the external id.
        reason:   ``"missing"`` (no locale document), ``"unreadable"``
                  (document present but could not be parsed), or ``None``.
    """

    locales: dict[str, LocaleRecord]
    degraded: bool = False
    reason: Literal["missing", "unreadable"] | None = None


@dataclass(frozen=True)
class PropertyOverrides:
    """Template properties replaced on the cloned item.

    All fields are ``None`` when the definition carried no ``_props`` object.
    """

    name: str | None = None
    description: str | None = None
    asset_path: str | None = None

    def is_empty(self) -> bool:
        return self.name is None and self.description is None and self.asset_path is None


@dataclass(frozen=True)
class CloneRequest:
    """A fully-resolved instruction to derive a new item from a template.

    ``new_internal_id`` is a pure function of ``external_id``; the same
    definition always produces the same request.
    """

    source_template_id: str
    new_internal_id: str
    parent_id: str
    handbook_parent_id: str
    handbook_price_roubles: float | None
    locales: dict[str, LocaleRecord]
    override_properties: PropertyOverrides
    external_id: str = ""


@dataclass(frozen=True)
class CloneResult:
    """What the cloning collaborator reported for one request."""

    success: bool
    item_id: str | None = None
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileOutcome:
    """Final state of one definition file after a run."""

    path: Path
    status: OutcomeStatus
    external_id: str | None = None
    internal_id: str | None = None
    detail: str | None = None


@dataclass
class RunSummary:
    """Per-file outcomes of one pipeline run plus the logging counters."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def succeeded(self) -> int:
        return self._count("cloned")

    @property
    def failed(self) -> int:
        return self._count("clone_failed") + self._count("unreadable")
