"""Bundle presence check.

After items are loaded, the host still has to find the packaged bundle files
the items point at.  This check walks the manifest and confirms that each
key exists under the mod's ``bundles/`` directory, logging what it finds.
It never loads the bundles; the host's mod system does that itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from item_loader.errors import SourceReadError
from item_loader.sources import ManifestSource

logger = logging.getLogger(__name__)


@dataclass
class BundleCheckReport:
    """Manifest keys split by whether their bundle file exists."""

    found: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def check_bundle_files(
    bundles_dir: Path | str,
    manifest: ManifestSource,
    *,
    log: logging.Logger | None = None,
) -> BundleCheckReport:
    """Check that every manifest key names a file under ``bundles_dir``.

    A missing ``bundles_dir`` or an unreadable manifest yields an empty
    report; neither is an error.
    """
    log = log or logger
    root = Path(bundles_dir)
    report = BundleCheckReport()

    if not root.is_dir():
        log.info("[ItemLoader] No bundles directory at %s, skipping bundle check", root)
        return report

    try:
        entries = manifest.entries()
    except SourceReadError as exc:
        log.warning("[ItemLoader] Could not read asset manifest for bundle check: %s", exc)
        return report

    for entry in entries:
        bundle_path = root / entry.key
        if bundle_path.is_file():
            log.info("[ItemLoader] Found bundle file: %s", bundle_path)
            report.found.append(entry.key)
        else:
            log.error("[ItemLoader] Bundle file not found: %s", bundle_path)
            report.missing.append(entry.key)

    return report
