# core/modes.py - SINGLE SOURCE OF TRUTH for enums and state definitions
"""
All mode enums, state definitions, and outcome types MUST be defined here.
No other module may define these values.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Operations and Job Kinds
# =============================================================================


class Operation(str, Enum):
    """
    Daemon operation a terminal result belongs to.

    String enum for log readability.
    """

    PRE_ENCRYPT = "pre_encrypt"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    CHANGE_PASSPHRASE = "change_passphrase"


class JobKind(str, Enum):
    """Kind of long-running job that reports progress."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"

    @property
    def operation(self) -> Operation:
        """Operation whose terminal result ends a job of this kind."""
        return Operation(self.value)


class JobState(str, Enum):
    """Lifecycle of a DeviceJob: PENDING -> ACTIVE -> TERMINAL."""

    PENDING = "pending"
    ACTIVE = "active"
    TERMINAL = "terminal"


# =============================================================================
# Key Protection
# =============================================================================


class SecKeyType(str, Enum):
    """
    How a device's real passphrase is protected.

    Determines which acquisition flow runs when the daemon needs the secret.
    """

    PASSWORD_ONLY = "password_only"  # User types the passphrase
    TPM_ONLY = "tpm_only"  # Sealed in TPM, unsealed without user input
    TPM_AND_PIN = "tpm_and_pin"  # Sealed in TPM behind a PIN

    @property
    def requires_tpm(self) -> bool:
        """Whether the secret lives in the TPM."""
        return self in (SecKeyType.TPM_ONLY, SecKeyType.TPM_AND_PIN)

    @property
    def requires_prompt(self) -> bool:
        """Whether the user is asked for anything."""
        return self in (SecKeyType.PASSWORD_ONLY, SecKeyType.TPM_AND_PIN)


class UnlockKeyKind(str, Enum):
    """What the user typed into the unlock dialog."""

    PIN = "pin"
    PASSWORD = "password"


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeKind(str, Enum):
    """
    Semantic outcome of a daemon terminal result.

    String enum for audit logging.
    """

    SUCCESS = "success"
    REBOOT_REQUIRED = "reboot_required"
    USER_CANCELLED = "user_cancelled"
    WRONG_CREDENTIAL = "wrong_credential"
    OPERATION_FAILED = "operation_failed"

    @property
    def is_failure(self) -> bool:
        """Whether this outcome is shown as an error."""
        return self in (OutcomeKind.WRONG_CREDENTIAL, OutcomeKind.OPERATION_FAILED)


@dataclass(frozen=True)
class Outcome:
    """
    Classified terminal result.

    `code` is the raw daemon code, kept for diagnostics. It is only
    meaningful for OPERATION_FAILED but recorded for every outcome.
    """

    kind: OutcomeKind
    code: int = 0

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    def __str__(self) -> str:
        if self.kind == OutcomeKind.OPERATION_FAILED:
            return f"{self.kind.value}({self.code})"
        return self.kind.value


class Severity(str, Enum):
    """Severity of a user-facing notice."""

    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class UnlockKeyResult:
    """
    Result of one passphrase acquisition attempt.

    Either a (kind, secret) pair or a cancellation. Never persisted.
    """

    kind: Optional[UnlockKeyKind]
    secret: str = ""
    cancelled: bool = False

    @classmethod
    def cancelled_result(cls) -> "UnlockKeyResult":
        """The user dismissed the prompt."""
        return cls(kind=None, secret="", cancelled=True)

    def as_tuple(self):
        """(secret, cancelled) pair handed back to the hook caller."""
        return self.secret, self.cancelled
