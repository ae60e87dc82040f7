"""Item Loader: deterministic item definitions for a host item table.

Reads a directory of item-definition documents, derives stable internal ids,
resolves locale text and bundle references, and hands clone requests to the
host's item-cloning engine.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("item-loader")
except PackageNotFoundError:
    __version__ = "0.1.0"
