"""Logging setup for command-line runs.

Library code only ever calls ``logging.getLogger(__name__)``.  A host that
embeds the loader keeps its own handlers; the CLI calls
:func:`configure_logging` once before a run.
"""

from __future__ import annotations

import logging

from item_loader.config import LoggingSettings

_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
}

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: LoggingSettings) -> None:
    """Install a stream handler on the root logger per ``settings``.

    Unknown level names fall back to ``INFO``.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=_FORMATS.get(settings.format, _FORMATS["detailed"]),
        datefmt=_DATE_FORMAT,
        force=True,
    )
