#!/usr/bin/env python3
"""
Tests for taxonomy.py - daemon result code classification.

Verifies:
- Every row of the (operation, magnitude) table
- Sign handling (reboot-required only in its negative form)
- Totality and determinism over a wide range of codes
"""

import pytest

from diskenc.core.constants import DaemonError
from diskenc.core.modes import Operation, Outcome, OutcomeKind
from diskenc.taxonomy import ResultCode, classify

ALL_OPERATIONS = list(Operation)


class TestResultCode:
    """Tests for ResultCode.from_raw() sign normalization."""

    def test_zero_is_success(self):
        code = ResultCode.from_raw(0)
        assert code.magnitude == 0
        assert not code.failed
        assert not code.negative

    def test_negative_code(self):
        code = ResultCode.from_raw(-12)
        assert code.magnitude == 12
        assert code.failed
        assert code.negative
        assert code.raw == -12

    def test_positive_code(self):
        code = ResultCode.from_raw(5)
        assert code.magnitude == 5
        assert code.failed
        assert not code.negative


class TestClassifyTable:
    """One test per table row."""

    @pytest.mark.parametrize("operation", ALL_OPERATIONS)
    def test_zero_is_success_for_every_operation(self, operation):
        assert classify(operation, 0) == Outcome(OutcomeKind.SUCCESS, 0)

    @pytest.mark.parametrize(
        "operation",
        [Operation.PRE_ENCRYPT, Operation.DECRYPT, Operation.CHANGE_PASSPHRASE],
    )
    def test_user_cancelled(self, operation):
        outcome = classify(operation, -DaemonError.USER_CANCELLED)
        assert outcome.kind == OutcomeKind.USER_CANCELLED

    def test_encrypt_user_cancelled_is_a_failure(self):
        outcome = classify(Operation.ENCRYPT, -DaemonError.USER_CANCELLED)
        assert outcome == Outcome(OutcomeKind.OPERATION_FAILED, -DaemonError.USER_CANCELLED)

    def test_decrypt_reboot_required_negative_form(self):
        outcome = classify(Operation.DECRYPT, -DaemonError.REBOOT_REQUIRED)
        assert outcome.kind == OutcomeKind.REBOOT_REQUIRED

    def test_decrypt_reboot_required_positive_form_is_failure(self):
        outcome = classify(Operation.DECRYPT, int(DaemonError.REBOOT_REQUIRED))
        assert outcome == Outcome(OutcomeKind.OPERATION_FAILED, int(DaemonError.REBOOT_REQUIRED))

    @pytest.mark.parametrize(
        "operation",
        [Operation.PRE_ENCRYPT, Operation.ENCRYPT, Operation.CHANGE_PASSPHRASE],
    )
    def test_reboot_required_only_for_decrypt(self, operation):
        outcome = classify(operation, -DaemonError.REBOOT_REQUIRED)
        assert outcome.kind == OutcomeKind.OPERATION_FAILED

    def test_decrypt_wrong_passphrase(self):
        outcome = classify(Operation.DECRYPT, -DaemonError.ERROR_WRONG_PASSPHRASE)
        assert outcome.kind == OutcomeKind.WRONG_CREDENTIAL

    def test_wrong_passphrase_is_failure_for_change_passphrase(self):
        outcome = classify(Operation.CHANGE_PASSPHRASE, -DaemonError.ERROR_WRONG_PASSPHRASE)
        assert outcome.kind == OutcomeKind.OPERATION_FAILED

    def test_change_passphrase_failed(self):
        outcome = classify(Operation.CHANGE_PASSPHRASE, -DaemonError.ERROR_CHANGE_PASSPHRASE_FAILED)
        assert outcome.kind == OutcomeKind.WRONG_CREDENTIAL

    def test_change_passphrase_failed_is_failure_for_decrypt(self):
        outcome = classify(Operation.DECRYPT, -DaemonError.ERROR_CHANGE_PASSPHRASE_FAILED)
        assert outcome.kind == OutcomeKind.OPERATION_FAILED

    def test_magnitude_is_sign_independent(self):
        assert classify(Operation.DECRYPT, DaemonError.USER_CANCELLED).kind == OutcomeKind.USER_CANCELLED
        assert classify(Operation.DECRYPT, DaemonError.ERROR_WRONG_PASSPHRASE).kind == OutcomeKind.WRONG_CREDENTIAL

    @pytest.mark.parametrize("operation", ALL_OPERATIONS)
    def test_unknown_code_carries_raw_code(self, operation):
        outcome = classify(operation, -4242)
        assert outcome == Outcome(OutcomeKind.OPERATION_FAILED, -4242)
        assert str(outcome) == "operation_failed(-4242)"


class TestClassifyTotality:
    """classify() is total and deterministic."""

    @pytest.mark.parametrize("operation", ALL_OPERATIONS)
    def test_every_code_maps_to_one_outcome(self, operation):
        for code in range(-300, 301):
            outcome = classify(operation, code)
            assert isinstance(outcome, Outcome)
            assert outcome.kind in OutcomeKind
            assert outcome.code == code

    @pytest.mark.parametrize("operation", ALL_OPERATIONS)
    def test_deterministic(self, operation):
        for code in (-(2**31), -99, -13, -12, -2, -1, 0, 1, 2, 99, 2**31 - 1):
            assert classify(operation, code) == classify(operation, code)

    def test_accepts_operation_value_strings(self):
        assert classify("decrypt", -DaemonError.REBOOT_REQUIRED).kind == OutcomeKind.REBOOT_REQUIRED
