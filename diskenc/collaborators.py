# collaborators.py - Boundary interfaces of the orchestration core
"""
Interfaces of the external collaborators the core talks to.

Qt/D-Bus implementations live in gui.py, dbus_bridge.py and tpm.py; tests
use MagicMock objects with the same shape.
"""

from typing import Optional, Protocol, Tuple

from diskenc.core.modes import SecKeyType, Severity, UnlockKeyKind


class DeviceInfo(Protocol):
    def key_type(self, device: str) -> Optional[SecKeyType]:
        """Key protection mode of the device, None if unknown."""
        ...


class SecretUnsealer(Protocol):
    def unseal(self, device: str, auxiliary: str) -> str:
        """Unseal the device secret from the TPM; empty string on failure."""
        ...


class SecretPrompt(Protocol):
    def prompt(self, mode: UnlockKeyKind) -> Tuple[str, UnlockKeyKind, bool]:
        """Modal prompt. Returns (entered, mode actually used, accepted)."""
        ...


class Notifier(Protocol):
    def present(self, title: str, message: str, severity: Severity) -> None:
        ...


class RebootPrompt(Protocol):
    def ask(self, title: str, message: str) -> bool:
        """Offer "Reboot later" / "Reboot now"; True means reboot now."""
        ...


class SessionManager(Protocol):
    def request_reboot(self) -> None:
        ...


class ProgressView(Protocol):
    def open(self, job) -> None:
        ...

    def update(self, job) -> None:
        ...

    def close(self, job) -> None:
        ...


class BusyCursor(Protocol):
    def restore(self) -> None:
        ...
