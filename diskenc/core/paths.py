# core/paths.py - SINGLE SOURCE OF TRUTH for all filesystem paths
"""
All filesystem paths MUST be defined here as Path objects.
No other module may construct filesystem paths.

RULES:
- All paths are Path objects internally
- Convert to str() ONLY at I/O boundaries (subprocess, JSON, print)
"""

import os
from pathlib import Path
from typing import Optional

from diskenc.core.constants import FileNames


class Paths:
    """
    Centralized path definitions. All paths are Path objects.

    Usage:
        from diskenc.core.paths import Paths
        config_path = Paths.config_file()
    """

    APP_DIR_NAME = "diskenc"

    # Linux device prefix
    LINUX_DEV_PREFIX = "/dev/"

    @classmethod
    def config_dir(cls) -> Path:
        """XDG config directory for the client."""
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return root / cls.APP_DIR_NAME

    @classmethod
    def config_file(cls) -> Path:
        return cls.config_dir() / FileNames.CONFIG_JSON

    @classmethod
    def logs_dir(cls, override: Optional[Path] = None) -> Path:
        """Log directory; an explicit override wins over the XDG cache dir."""
        if override:
            return Path(override)
        base = os.environ.get("XDG_CACHE_HOME")
        root = Path(base) if base else Path.home() / ".cache"
        return root / cls.APP_DIR_NAME / "logs"

    @classmethod
    def log_file(cls, override: Optional[Path] = None) -> Path:
        return cls.logs_dir(override) / FileNames.LOG_FILE

    @classmethod
    def tpm_object_file(cls, object_dir: Path, device: str) -> Path:
        """Sealed TPM object for a device, e.g. /var/lib/diskenc/tpm/sda1.ctx"""
        return Path(object_dir) / f"{Path(device).name}{FileNames.TPM_OBJECT_SUFFIX}"
