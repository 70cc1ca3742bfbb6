# presenter.py - Outcome presentation policy
"""
Turns a classified outcome into a user-facing Decision and carries it out
through the notifier / reboot collaborators.

The policy is a table keyed by (operation, outcome kind). Rendering is not
done here; gui.py supplies the Qt collaborators.

Two decisions offer a reboot choice:
    pre-encrypt success      (the conversion finishes on the next boot)
    decrypt reboot-required
Accepting asks the session manager to reboot. Everything else is a plain
informational or error notice.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from diskenc.collaborators import Notifier, RebootPrompt, SessionManager
from diskenc.core.modes import Operation, Outcome, OutcomeKind, SecKeyType, Severity
from diskenc.core.paths import Paths
from diskenc.i18n import tr

_presenter_logger = logging.getLogger("DiskEnc.presenter")


@dataclass(frozen=True)
class Decision:
    """What to show for one outcome."""

    title: str
    message: str
    severity: Severity
    offer_reboot: bool = False


@dataclass(frozen=True)
class _Policy:
    title_key: str
    message_key: str
    severity: Severity
    offer_reboot: bool = False


_POLICY: Dict[Tuple[Operation, OutcomeKind], _Policy] = {
    # Pre-encrypt
    (Operation.PRE_ENCRYPT, OutcomeKind.SUCCESS): _Policy(
        "title_preencrypt_done", "msg_preencrypt_done", Severity.INFO, offer_reboot=True
    ),
    (Operation.PRE_ENCRYPT, OutcomeKind.USER_CANCELLED): _Policy(
        "title_encrypt_disk", "msg_user_cancelled", Severity.INFO
    ),
    (Operation.PRE_ENCRYPT, OutcomeKind.OPERATION_FAILED): _Policy(
        "title_preencrypt_failed", "msg_preencrypt_failed", Severity.ERROR
    ),
    # Encrypt
    (Operation.ENCRYPT, OutcomeKind.SUCCESS): _Policy("title_encrypt_done", "msg_encrypt_done", Severity.INFO),
    (Operation.ENCRYPT, OutcomeKind.OPERATION_FAILED): _Policy(
        "title_encrypt_failed", "msg_encrypt_failed", Severity.ERROR
    ),
    # Decrypt
    (Operation.DECRYPT, OutcomeKind.SUCCESS): _Policy("title_decrypt_done", "msg_decrypt_done", Severity.INFO),
    (Operation.DECRYPT, OutcomeKind.USER_CANCELLED): _Policy("title_decrypt_disk", "msg_user_cancelled", Severity.INFO),
    (Operation.DECRYPT, OutcomeKind.WRONG_CREDENTIAL): _Policy(
        "title_decrypt_disk", "msg_wrong_passphrase_or_pin", Severity.ERROR
    ),
    (Operation.DECRYPT, OutcomeKind.REBOOT_REQUIRED): _Policy(
        "title_decrypt_device", "msg_reboot_to_decrypt", Severity.INFO, offer_reboot=True
    ),
    (Operation.DECRYPT, OutcomeKind.OPERATION_FAILED): _Policy(
        "title_decrypt_failed", "msg_decrypt_failed", Severity.ERROR
    ),
    # Change passphrase
    (Operation.CHANGE_PASSPHRASE, OutcomeKind.SUCCESS): _Policy(
        "title_chg_pwd_done", "msg_chg_pwd_done", Severity.INFO
    ),
    (Operation.CHANGE_PASSPHRASE, OutcomeKind.USER_CANCELLED): _Policy(
        "title_chg_pwd", "msg_user_cancelled", Severity.INFO
    ),
    (Operation.CHANGE_PASSPHRASE, OutcomeKind.WRONG_CREDENTIAL): _Policy(
        "title_chg_pwd_failed", "msg_wrong_passphrase_or_pin", Severity.ERROR
    ),
    (Operation.CHANGE_PASSPHRASE, OutcomeKind.OPERATION_FAILED): _Policy(
        "title_chg_pwd_failed", "msg_chg_pwd_failed", Severity.ERROR
    ),
}

# Title of the recovery-key notice, by key protection mode
_HOOK_FAILURE_TITLES: Dict[SecKeyType, str] = {
    SecKeyType.TPM_AND_PIN: "title_wrong_pin",
    SecKeyType.PASSWORD_ONLY: "title_wrong_passphrase",
    SecKeyType.TPM_ONLY: "title_tpm_error",
}


def format_device_label(device: str, name: str) -> str:
    """
    Label shown to the user for a device.

        format_device_label("/dev/sda1", "Data")  # "Data(sda1)"
    """
    if device.startswith(Paths.LINUX_DEV_PREFIX):
        device = device[len(Paths.LINUX_DEV_PREFIX):]
    return f"{name}({device})"


class OutcomePresenter:
    """
    Policy table plus the act of presenting a Decision.

    Usage:
        presenter = OutcomePresenter(notifier, reboot_prompt, session)
        presenter.handle(Operation.ENCRYPT, outcome, "/dev/sda1", "sda1")
    """

    def __init__(
        self,
        notifier: Notifier,
        reboot_prompt: RebootPrompt,
        session: SessionManager,
        lang: str = "en",
    ):
        self.notifier = notifier
        self.reboot_prompt = reboot_prompt
        self.session = session
        self.lang = lang

    def decide(self, operation: Operation, outcome: Outcome, device: str, name: str) -> Decision:
        """Look up the policy for (operation, outcome). Pure."""
        operation = Operation(operation)
        policy = _POLICY.get((operation, outcome.kind))
        if policy is None:
            # Outcome the taxonomy never produces for this operation
            _presenter_logger.warning(f"No policy for {operation.value}/{outcome}, using failure notice")
            policy = _POLICY[(operation, OutcomeKind.OPERATION_FAILED)]

        label = format_device_label(device, name)
        return Decision(
            title=tr(policy.title_key, lang=self.lang),
            message=tr(policy.message_key, lang=self.lang, device=label, code=outcome.code),
            severity=policy.severity,
            offer_reboot=policy.offer_reboot,
        )

    def decide_hook_failure(self, key_type: Optional[SecKeyType]) -> Decision:
        """Recovery-key notice for an empty, non-cancelled secret."""
        title_key = _HOOK_FAILURE_TITLES.get(key_type, "title_tpm_error")
        return Decision(
            title=tr(title_key, lang=self.lang),
            message=tr("msg_use_recovery_key", lang=self.lang),
            severity=Severity.INFO,
        )

    def present(self, decision: Decision) -> bool:
        """
        Show a decision.

        Returns:
            True if the user chose to reboot now
        """
        if not decision.offer_reboot:
            self.notifier.present(decision.title, decision.message, decision.severity)
            return False

        if not self.reboot_prompt.ask(decision.title, decision.message):
            _presenter_logger.info("Reboot postponed by user")
            return False

        _presenter_logger.info("Reboot is confirmed...")
        self.session.request_reboot()
        return True

    def handle(self, operation: Operation, outcome: Outcome, device: str, name: str) -> Decision:
        """Decide and present in one step."""
        decision = self.decide(operation, outcome, device, name)
        level = logging.WARNING if decision.severity == Severity.ERROR else logging.INFO
        _presenter_logger.log(level, f"{Operation(operation).value} on {device}: {outcome} -> {decision.title}")
        self.present(decision)
        return decision
