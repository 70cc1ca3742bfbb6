# core/config.py - Configuration loading and validation
"""
SINGLE SOURCE OF TRUTH for configuration handling.

This module provides:
- Default configuration (built from ConfigKeys/Defaults/Limits)
- Deep merge of the user's config.json over the defaults
- Atomic config file writes (temp file + rename)
- Typed accessors used by the launcher and the collaborators

Unknown keys in config.json are preserved so that newer clients can share
a file with older ones.
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Tuple

from diskenc.core.constants import ConfigKeys, DBusNames, Defaults
from diskenc.core.limits import Limits
from diskenc.errors import ConfigError

# Logger for config operations
_config_logger = logging.getLogger("DiskEnc.config")


# =============================================================================
# Defaults
# =============================================================================


def default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return {
        ConfigKeys.LANGUAGE: Defaults.LANGUAGE,
        ConfigKeys.LOG_LEVEL: Defaults.LOG_LEVEL,
        ConfigKeys.LOG_DIR: None,
        ConfigKeys.DAEMON: {
            ConfigKeys.SERVICE: DBusNames.DAEMON_SERVICE,
            ConfigKeys.PATH: DBusNames.DAEMON_PATH,
            ConfigKeys.INTERFACE: DBusNames.DAEMON_INTERFACE,
        },
        ConfigKeys.SESSION: {
            ConfigKeys.SERVICE: DBusNames.SESSION_SERVICE,
            ConfigKeys.PATH: DBusNames.SESSION_PATH,
            ConfigKeys.INTERFACE: DBusNames.SESSION_INTERFACE,
        },
        ConfigKeys.TPM: {
            ConfigKeys.UNSEAL_TOOL: Defaults.TPM_UNSEAL_TOOL,
            ConfigKeys.OBJECT_DIR: Defaults.TPM_OBJECT_DIR,
            ConfigKeys.TIMEOUT: Limits.TPM_UNSEAL_TIMEOUT,
        },
        ConfigKeys.STALE_PROGRESS_WINDOW: Limits.STALE_PROGRESS_WINDOW,
    }


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge `override` into a copy of `base`.

    Nested dicts are merged key by key; any other value in `override`
    replaces the base value. Keys only present in `override` are kept.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# =============================================================================
# Load / Write
# =============================================================================


def write_config_atomic(config_path: Path, config: Dict[str, Any]) -> None:
    """
    Write configuration to file atomically.

    Uses write-to-temp + rename strategy to prevent partial writes.

    Raises:
        OSError: If write fails
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        temp_fd, temp_path_str = tempfile.mkstemp(suffix=".tmp", prefix="config_", dir=str(config_path.parent))
        os.close(temp_fd)
        temp_path = Path(temp_path_str)

        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(config_path)
        temp_path = None

        _config_logger.info(f"Config written atomically to {config_path}")
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load config.json and merge it over the defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file is not valid JSON or not a JSON object
    """
    config_path = Path(config_path)
    _config_logger.info(f"Loading config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {config_path} must be an object, got {type(data).__name__}")

    return deep_merge(default_config(), data)


def load_or_create_config(config_path: Path) -> Tuple[Dict[str, Any], bool]:
    """
    Load configuration or create it with defaults if not found.

    Returns:
        Tuple of (config_dict, created)
    """
    config_path = Path(config_path)

    if config_path.exists():
        return load_config(config_path), False

    _config_logger.info(f"Creating new config at {config_path}")
    config = default_config()
    write_config_atomic(config_path, config)
    return config, True


# =============================================================================
# Accessors
# =============================================================================


def dbus_endpoint(config: Dict[str, Any], section: str) -> Tuple[str, str, str]:
    """(service, path, interface) for the `daemon` or `session` section."""
    values = config.get(section)
    if not isinstance(values, dict):
        raise ConfigError(f"Config section '{section}' must be an object")
    try:
        return values[ConfigKeys.SERVICE], values[ConfigKeys.PATH], values[ConfigKeys.INTERFACE]
    except KeyError as e:
        raise ConfigError(f"Config section '{section}' is missing {e}") from e


def stale_progress_window(config: Dict[str, Any]) -> float:
    """Seconds during which progress for a finished job key is ignored."""
    value = config.get(ConfigKeys.STALE_PROGRESS_WINDOW, Limits.STALE_PROGRESS_WINDOW)
    try:
        window = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{ConfigKeys.STALE_PROGRESS_WINDOW}' must be a number, got {value!r}") from e
    if window < 0:
        raise ConfigError(f"'{ConfigKeys.STALE_PROGRESS_WINDOW}' must not be negative")
    return window
