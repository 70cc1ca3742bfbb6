# passphrase.py - Passphrase acquisition for the device-password hook
"""
Mode-aware acquisition of a device's real passphrase.

The daemon asks for a secret through the device-password hook. Which flow
runs depends on the device's key protection mode:

    PASSWORD_ONLY  prompt for the passphrase
    TPM_AND_PIN    prompt for a PIN and unseal through the TPM; the dialog
                   also lets the user type the raw passphrase instead
    TPM_ONLY       unseal through the TPM without asking anything

An empty secret that was not cancelled is never handed to the daemon: the
user gets the recovery-key notice and the call reports cancellation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from diskenc.collaborators import DeviceInfo, SecretPrompt, SecretUnsealer
from diskenc.core.modes import SecKeyType, UnlockKeyKind, UnlockKeyResult
from diskenc.errors import UnsealError, UnsupportedKeyTypeError
from diskenc.presenter import OutcomePresenter

_passphrase_logger = logging.getLogger("DiskEnc.passphrase")


# =============================================================================
# Strategies
# =============================================================================


class AcquisitionStrategy(ABC):
    """One way of obtaining a device secret."""

    key_type: SecKeyType

    @abstractmethod
    def acquire(self, device: str) -> UnlockKeyResult:
        ...


def _unseal_or_empty(unsealer: SecretUnsealer, device: str, auxiliary: str) -> str:
    """Unseal through the TPM; a failed unseal yields an empty secret."""
    try:
        return unsealer.unseal(device, auxiliary)
    except UnsealError as e:
        _passphrase_logger.warning(f"{e}")
        return ""


class PasswordStrategy(AcquisitionStrategy):
    key_type = SecKeyType.PASSWORD_ONLY

    def __init__(self, prompt: SecretPrompt):
        self.prompt = prompt

    def acquire(self, device: str) -> UnlockKeyResult:
        entered, _mode, accepted = self.prompt.prompt(UnlockKeyKind.PASSWORD)
        if not accepted:
            return UnlockKeyResult.cancelled_result()
        return UnlockKeyResult(kind=UnlockKeyKind.PASSWORD, secret=entered)


class PinStrategy(AcquisitionStrategy):
    key_type = SecKeyType.TPM_AND_PIN

    def __init__(self, prompt: SecretPrompt, unsealer: SecretUnsealer):
        self.prompt = prompt
        self.unsealer = unsealer

    def acquire(self, device: str) -> UnlockKeyResult:
        entered, mode, accepted = self.prompt.prompt(UnlockKeyKind.PIN)
        if not accepted:
            return UnlockKeyResult.cancelled_result()
        if UnlockKeyKind(mode) == UnlockKeyKind.PIN:
            return UnlockKeyResult(kind=UnlockKeyKind.PIN, secret=_unseal_or_empty(self.unsealer, device, entered))
        # User switched the dialog to the raw passphrase
        return UnlockKeyResult(kind=UnlockKeyKind.PASSWORD, secret=entered)


class TpmStrategy(AcquisitionStrategy):
    key_type = SecKeyType.TPM_ONLY

    def __init__(self, unsealer: SecretUnsealer):
        self.unsealer = unsealer

    def acquire(self, device: str) -> UnlockKeyResult:
        return UnlockKeyResult(kind=None, secret=_unseal_or_empty(self.unsealer, device, ""))


# =============================================================================
# Acquirer
# =============================================================================


class PassphraseAcquirer:
    """
    Looks up a device's key type and runs the matching strategy.

    Usage:
        acquirer = PassphraseAcquirer(device_info, prompt, unsealer, presenter)
        secret, cancelled = acquirer.acquire("/dev/sda1").as_tuple()
    """

    def __init__(
        self,
        device_info: DeviceInfo,
        prompt: SecretPrompt,
        unsealer: SecretUnsealer,
        presenter: OutcomePresenter,
    ):
        self.device_info = device_info
        self.presenter = presenter
        self.strategies: Dict[SecKeyType, AcquisitionStrategy] = {
            SecKeyType.PASSWORD_ONLY: PasswordStrategy(prompt),
            SecKeyType.TPM_AND_PIN: PinStrategy(prompt, unsealer),
            SecKeyType.TPM_ONLY: TpmStrategy(unsealer),
        }

    def strategy_for(self, device: str) -> AcquisitionStrategy:
        """
        Raises:
            UnsupportedKeyTypeError: If the device's key type has no strategy
        """
        key_type: Optional[SecKeyType] = self.device_info.key_type(device)
        strategy = self.strategies.get(key_type) if isinstance(key_type, SecKeyType) else None
        if strategy is None:
            raise UnsupportedKeyTypeError(device, key_type)
        return strategy

    def acquire(self, device: str) -> UnlockKeyResult:
        """
        Obtain the secret for `device`.

        Raises:
            UnsupportedKeyTypeError: Before any prompt, if the key type is unknown
        """
        strategy = self.strategy_for(device)
        _passphrase_logger.info(f"Acquiring passphrase for {device} ({strategy.key_type.value})")

        result = strategy.acquire(device)
        if result.cancelled:
            _passphrase_logger.info(f"Passphrase acquisition for {device} cancelled by user")
            return result

        if not result.secret:
            _passphrase_logger.warning(f"Empty secret for {device} ({strategy.key_type.value}), suggesting recovery key")
            self.presenter.present(self.presenter.decide_hook_failure(strategy.key_type))
            return UnlockKeyResult(kind=result.kind, secret="", cancelled=True)

        return result
