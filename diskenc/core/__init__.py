# diskenc SSOT core modules
# This package contains the single-source-of-truth modules for the client.
from .modes import (
    JobKind,
    JobState,
    Operation,
    Outcome,
    OutcomeKind,
    SecKeyType,
    Severity,
    UnlockKeyKind,
    UnlockKeyResult,
)
from .version import VERSION

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "VERSION",
    # Modes
    "JobKind",
    "JobState",
    "Operation",
    "Outcome",
    "OutcomeKind",
    "SecKeyType",
    "Severity",
    "UnlockKeyKind",
    "UnlockKeyResult",
]
