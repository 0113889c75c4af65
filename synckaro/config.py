"""Configuration loading for SyncKaro.

Settings live in a TOML file at ``~/.config/synckaro/config.toml``. The
``SYNCKARO_CONFIG`` environment variable points at a different file. A
missing file means defaults throughout.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml

from synckaro.db.store import DEFAULT_NAMESPACE
from synckaro.errors import ConfigError

CONFIG_DIR = Path.home() / ".config" / "synckaro"
CONFIG_ENV_VAR = "SYNCKARO_CONFIG"

DEFAULT_CONFIG = {
    "storage": {
        "db_path": str(CONFIG_DIR / "synckaro.db"),
        "namespace": DEFAULT_NAMESPACE,
    },
    "seed": {
        "zombie_count": 15,
    },
    "logging": {
        "level": "WARNING",
    },
}


def get_config_path(path: Optional[Path] = None) -> Path:
    """Resolve the config file location."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return CONFIG_DIR / "config.toml"


def load_config(path: Optional[Path] = None) -> dict:
    """Load the configuration, layered over the defaults.

    Args:
        path: Explicit config file. Falls back to the environment variable,
            then the default location.

    Returns:
        Configuration dictionary with every section present.

    Raises:
        ConfigError: If the file exists but is not valid TOML.
    """
    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
    config_path = get_config_path(path)
    if not config_path.exists():
        return config

    try:
        loaded = toml.load(config_path)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Invalid config file {config_path}: {exc}") from exc

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    return config


def get_db_path(config: dict) -> Path:
    """Get the database path."""
    return Path(config.get("storage", {}).get("db_path", DEFAULT_CONFIG["storage"]["db_path"])).expanduser()


def get_namespace(config: dict) -> str:
    return config.get("storage", {}).get("namespace", DEFAULT_NAMESPACE)


def get_zombie_count(config: dict) -> int:
    return int(config.get("seed", {}).get("zombie_count", 15))


def get_log_level(config: dict) -> int:
    """Get the configured log level as a ``logging`` constant."""
    name = str(config.get("logging", {}).get("level", "WARNING")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
