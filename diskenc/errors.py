# errors.py - Exception family for the disk-encryption event client
"""
All exceptions raised by diskenc derive from DiskEncError.

None of these are retried automatically. Each failure is surfaced once,
either to the caller or to the presentation policy.
"""

from typing import Optional


class DiskEncError(Exception):
    """Base exception for disk-encryption client errors."""

    pass


class ConfigError(DiskEncError):
    """Raised when the config file cannot be read or has the wrong shape."""

    pass


class UnsupportedKeyTypeError(DiskEncError):
    """Raised when a device reports a key protection mode we cannot serve."""

    def __init__(self, device: str, key_type: Optional[object] = None):
        self.device = device
        self.key_type = key_type
        super().__init__(f"Unsupported key type for {device}: {key_type!r}")


class UnsealError(DiskEncError):
    """Raised when the TPM refuses or fails to unseal a device secret."""

    def __init__(self, device: str, reason: str):
        self.device = device
        self.reason = reason
        super().__init__(f"TPM unseal failed for {device}: {reason}")


class HookAlreadyFollowedError(DiskEncError):
    """Raised when a second handler tries to follow the device-password hook."""

    pass


class MalformedNotificationError(DiskEncError):
    """Raised when a daemon notification does not match its argument shape."""

    def __init__(self, signal: str, args: tuple, reason: str):
        self.signal = signal
        self.args_received = args
        super().__init__(f"Malformed {signal} notification {args!r}: {reason}")
