# taxonomy.py - Daemon result code classification
"""
Maps signed daemon result codes to semantic outcomes.

The daemon reports zero for success and a (usually negated) error magnitude
otherwise. The sign is normalized exactly once, in ResultCode.from_raw();
everything after that works on the magnitude.

The same magnitude means different things for different operations, so the
mapping is a table keyed by (operation, magnitude). Codes not in the table
fall through to OPERATION_FAILED, which keeps classify() total.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from diskenc.core.constants import DaemonError
from diskenc.core.modes import Operation, Outcome, OutcomeKind


@dataclass(frozen=True)
class ResultCode:
    """A daemon result code split into magnitude and sign."""

    raw: int
    magnitude: int
    negative: bool

    @classmethod
    def from_raw(cls, code: int) -> "ResultCode":
        code = int(code)
        return cls(raw=code, magnitude=abs(code), negative=code < 0)

    @property
    def failed(self) -> bool:
        return self.magnitude != DaemonError.SUCCESS


@dataclass(frozen=True)
class _Rule:
    kind: OutcomeKind
    negative_only: bool = False


# (operation, magnitude) -> rule. Zero is handled before the lookup.
_RULES: Dict[Tuple[Operation, int], _Rule] = {
    (Operation.PRE_ENCRYPT, int(DaemonError.USER_CANCELLED)): _Rule(OutcomeKind.USER_CANCELLED),
    (Operation.DECRYPT, int(DaemonError.USER_CANCELLED)): _Rule(OutcomeKind.USER_CANCELLED),
    (Operation.DECRYPT, int(DaemonError.REBOOT_REQUIRED)): _Rule(OutcomeKind.REBOOT_REQUIRED, negative_only=True),
    (Operation.DECRYPT, int(DaemonError.ERROR_WRONG_PASSPHRASE)): _Rule(OutcomeKind.WRONG_CREDENTIAL),
    (Operation.CHANGE_PASSPHRASE, int(DaemonError.USER_CANCELLED)): _Rule(OutcomeKind.USER_CANCELLED),
    (Operation.CHANGE_PASSPHRASE, int(DaemonError.ERROR_CHANGE_PASSPHRASE_FAILED)): _Rule(OutcomeKind.WRONG_CREDENTIAL),
}


def classify(operation: Operation, code: int) -> Outcome:
    """
    Classify a terminal result code for an operation.

    Pure and total: every integer maps to exactly one Outcome.

    Examples:
        classify(Operation.ENCRYPT, 0)     # Outcome(SUCCESS, 0)
        classify(Operation.DECRYPT, -2)    # Outcome(REBOOT_REQUIRED, -2)
        classify(Operation.DECRYPT, 2)     # Outcome(OPERATION_FAILED, 2)
    """
    result = ResultCode.from_raw(code)
    if not result.failed:
        return Outcome(OutcomeKind.SUCCESS, result.raw)

    rule = _RULES.get((Operation(operation), result.magnitude))
    if rule is None or (rule.negative_only and not result.negative):
        return Outcome(OutcomeKind.OPERATION_FAILED, result.raw)
    return Outcome(rule.kind, result.raw)
