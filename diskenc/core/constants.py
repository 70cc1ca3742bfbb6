# core/constants.py - SINGLE SOURCE OF TRUTH for all shared string literals
"""
All shared constants MUST be defined here.
No other module may define these values.

Categories:
- DaemonError: Result codes reported by the encryption daemon
- DaemonSignals: Names of the daemon's asynchronous notifications
- DBusNames: Bus names, object paths and interfaces
- ConfigKeys: JSON config keys
- Defaults: Default configuration values
- FileNames: Config and log file names
"""

from enum import IntEnum
from typing import Dict, Tuple


# =============================================================================
# Daemon Result Codes
# =============================================================================


class DaemonError(IntEnum):
    """
    Result code magnitudes reported by the encryption daemon.

    The daemon reports failures as the negated value (e.g. -1 for a user
    cancellation). Zero is success.
    """

    SUCCESS = 0
    USER_CANCELLED = 1
    REBOOT_REQUIRED = 2
    ERROR_PARAMS_INVALID = 3
    ERROR_CREATE_HEADER = 4
    ERROR_INIT_CRYPT = 5
    ERROR_REENCRYPT = 6
    ERROR_APPLY_CONFIG = 7
    ERROR_DEVICE_BUSY = 8
    ERROR_NOT_ENCRYPTED = 9
    ERROR_ACTIVATE = 10
    ERROR_DEACTIVATE = 11
    ERROR_WRONG_PASSPHRASE = 12
    ERROR_CHANGE_PASSPHRASE_FAILED = 13
    ERROR_UNKNOWN = 99


# =============================================================================
# Daemon Notifications
# =============================================================================


class DaemonSignals:
    """Signal names emitted by the encryption daemon."""

    PREPARE_ENCRYPT_RESULT = "PrepareEncryptDiskResult"
    ENCRYPT_RESULT = "EncryptDiskResult"
    ENCRYPT_PROGRESS = "EncryptProgress"
    DECRYPT_RESULT = "DecryptDiskResult"
    DECRYPT_PROGRESS = "DecryptProgress"
    CHANGE_PASSPHRASE_RESULT = "ChangePassphraseResult"

    # The deployed daemon misspells this signal name
    CHANGE_PASSPHRASE_RESULT_LEGACY = "ChangePassphressResult"

    ALL: Tuple[str, ...] = (
        PREPARE_ENCRYPT_RESULT,
        ENCRYPT_RESULT,
        ENCRYPT_PROGRESS,
        DECRYPT_RESULT,
        DECRYPT_PROGRESS,
        CHANGE_PASSPHRASE_RESULT,
        CHANGE_PASSPHRASE_RESULT_LEGACY,
    )

    # Number of arguments each notification carries
    ARITY: Dict[str, int] = {
        PREPARE_ENCRYPT_RESULT: 4,
        ENCRYPT_RESULT: 3,
        ENCRYPT_PROGRESS: 3,
        DECRYPT_RESULT: 4,
        DECRYPT_PROGRESS: 3,
        CHANGE_PASSPHRASE_RESULT: 4,
        CHANGE_PASSPHRASE_RESULT_LEGACY: 4,
    }


# =============================================================================
# D-Bus Names
# =============================================================================


class DBusNames:
    """Well-known D-Bus endpoints."""

    DAEMON_SERVICE = "org.deepin.Filemanager.DiskEncrypt"
    DAEMON_PATH = "/org/deepin/Filemanager/DiskEncrypt"
    DAEMON_INTERFACE = "org.deepin.Filemanager.DiskEncrypt"

    # Daemon method returning the device's TPM token as JSON
    DAEMON_TPM_TOKEN_METHOD = "TPMToken"

    SESSION_SERVICE = "com.deepin.SessionManager"
    SESSION_PATH = "/com/deepin/SessionManager"
    SESSION_INTERFACE = "com.deepin.SessionManager"
    SESSION_REBOOT_METHOD = "RequestReboot"


# =============================================================================
# TPM Token Keys
# =============================================================================


class TokenKeys:
    """Keys inside the JSON TPM token the daemon returns per device."""

    TYPE = "type"
    PIN = "pin"

    TYPE_TPM = "tpm"


# =============================================================================
# Config Keys
# =============================================================================


class ConfigKeys:
    """JSON configuration keys."""

    LANGUAGE = "language"
    LOG_LEVEL = "log_level"
    LOG_DIR = "log_dir"

    DAEMON = "daemon"
    SESSION = "session"
    SERVICE = "service"
    PATH = "path"
    INTERFACE = "interface"

    TPM = "tpm"
    UNSEAL_TOOL = "unseal_tool"
    OBJECT_DIR = "object_dir"
    TIMEOUT = "timeout"

    STALE_PROGRESS_WINDOW = "stale_progress_window"


# =============================================================================
# Defaults
# =============================================================================


class Defaults:
    """Default configuration values."""

    LANGUAGE = "en"
    LOG_LEVEL = "INFO"
    TPM_UNSEAL_TOOL = "tpm2_unseal"
    TPM_OBJECT_DIR = "/var/lib/diskenc/tpm"


# =============================================================================
# File Names
# =============================================================================


class FileNames:
    """File names used by the client."""

    CONFIG_JSON = "config.json"
    LOG_FILE = "diskenc-events.log"
    TPM_OBJECT_SUFFIX = ".ctx"
