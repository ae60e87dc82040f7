"""
Item loader configuration management.

Configuration is loaded from multiple sources with a clear priority order:

    1. Environment variables (highest priority) - for scripted runs
    2. Config file (config/loader.ini) - for static mod installs
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The
LoaderConfig dataclass provides typed access to all settings.

Usage:
    from item_loader.config import config

    print(config.paths.items_path)
    print(config.defaults.fallback_template_id)

Environment Variable Mapping:
    ITEM_LOADER_MOD_ROOT              -> paths.mod_root
    ITEM_LOADER_MANIFEST_PATH         -> paths.manifest_path
    ITEM_LOADER_LOG_LEVEL             -> logging.level
    ITEM_LOADER_LEDGER_ENABLED        -> ledger.enabled
    ITEM_LOADER_FALLBACK_TEMPLATE_ID  -> defaults.fallback_template_id
    ITEM_LOADER_DEFAULT_ASSET_PATH    -> defaults.default_asset_path
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "loader.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "loader.example.ini"

# Template cloned when a definition carries no usable ``_proto``.
DEFAULT_FALLBACK_TEMPLATE_ID = "66b37eb4acff495a29492407"

# Asset path used when neither the definition nor the manifest yields one.
DEFAULT_ASSET_PATH = "mods/tarkov_coin.bundle"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class PathSettings:
    """Input/output layout, relative to ``mod_root`` unless absolute."""

    mod_root: str = "."
    items_dir: str = "db/items"
    locales_dir: str = "db/locales/itemsdescription"
    manifest_path: str = "bundles.json"
    bundles_dir: str = "bundles"
    ledger_dir: str = "data/ledger"

    def _resolve(self, value: str) -> Path:
        p = Path(value)
        if p.is_absolute():
            return p
        return Path(self.mod_root) / p

    @property
    def items_path(self) -> Path:
        """Directory of item-definition documents."""
        return self._resolve(self.items_dir)

    @property
    def locales_path(self) -> Path:
        """Directory of per-item locale documents."""
        return self._resolve(self.locales_dir)

    @property
    def manifest_file(self) -> Path:
        """The asset manifest document."""
        return self._resolve(self.manifest_path)

    @property
    def bundles_path(self) -> Path:
        """Directory holding packaged bundle files."""
        return self._resolve(self.bundles_dir)

    @property
    def ledger_path(self) -> Path:
        """Directory holding run ledgers."""
        return self._resolve(self.ledger_dir)


@dataclass
class DefaultSettings:
    """Fallback values used while resolving definitions."""

    fallback_template_id: str = DEFAULT_FALLBACK_TEMPLATE_ID
    default_asset_path: str = DEFAULT_ASSET_PATH
    locale_tag: str = "en"


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class LedgerSettings:
    """Run ledger configuration."""

    enabled: bool = True


@dataclass
class LoaderConfig:
    """
    Complete loader configuration.

    Aggregates all settings sections. Access via the module-level
    `config` singleton, or build one directly in tests.
    """

    paths: PathSettings = field(default_factory=PathSettings)
    defaults: DefaultSettings = field(default_factory=DefaultSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: LoaderConfig) -> None:
    """Load configuration from parsed INI file into LoaderConfig."""
    # Paths section
    if parser.has_section("paths"):
        for option in (
            "mod_root",
            "items_dir",
            "locales_dir",
            "manifest_path",
            "bundles_dir",
            "ledger_dir",
        ):
            if parser.has_option("paths", option):
                setattr(cfg.paths, option, parser.get("paths", option))

    # Defaults section
    if parser.has_section("defaults"):
        if parser.has_option("defaults", "fallback_template_id"):
            cfg.defaults.fallback_template_id = parser.get("defaults", "fallback_template_id")
        if parser.has_option("defaults", "default_asset_path"):
            cfg.defaults.default_asset_path = parser.get("defaults", "default_asset_path")
        if parser.has_option("defaults", "locale_tag"):
            cfg.defaults.locale_tag = parser.get("defaults", "locale_tag")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]

    # Ledger section
    if parser.has_section("ledger"):
        if parser.has_option("ledger", "enabled"):
            cfg.ledger.enabled = _parse_bool(parser.get("ledger", "enabled"))


def _apply_env_overrides(cfg: LoaderConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_root := os.getenv("ITEM_LOADER_MOD_ROOT"):
        cfg.paths.mod_root = env_root
    if env_manifest := os.getenv("ITEM_LOADER_MANIFEST_PATH"):
        cfg.paths.manifest_path = env_manifest

    if env_log := os.getenv("ITEM_LOADER_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()

    if env_ledger := os.getenv("ITEM_LOADER_LEDGER_ENABLED"):
        cfg.ledger.enabled = _parse_bool(env_ledger)

    if env_tpl := os.getenv("ITEM_LOADER_FALLBACK_TEMPLATE_ID"):
        cfg.defaults.fallback_template_id = env_tpl
    if env_asset := os.getenv("ITEM_LOADER_DEFAULT_ASSET_PATH"):
        cfg.defaults.default_asset_path = env_asset


def load_config() -> LoaderConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/loader.ini
        3. config/loader.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        LoaderConfig: Fully populated configuration object.
    """
    cfg = LoaderConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "LoaderConfig":
    """
    Reload configuration from disk and environment.

    Updates the module-level `config` singleton.

    Returns:
        LoaderConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information, printed by
    ``item-loader config``.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "mod_root": config.paths.mod_root,
        "items_path": str(config.paths.items_path),
        "manifest_file": str(config.paths.manifest_file),
        "ledger_enabled": config.ledger.enabled,
    }
