#!/usr/bin/env python3
"""
Tests for gui.py - Qt widgets on the offscreen platform.

No dialog is exec()'d; state is inspected directly.
"""

from unittest.mock import MagicMock

import pytest

from diskenc.core.modes import JobKind, UnlockKeyKind
from diskenc.jobs import DeviceJob


class TestUnlockPartitionDialog:
    def test_pin_mode_offers_switch(self, qapp):
        from diskenc.gui import UnlockPartitionDialog

        dlg = UnlockPartitionDialog(UnlockKeyKind.PIN)
        assert not dlg.switch_btn.isHidden()
        assert dlg.key_edit.placeholderText() == "Please enter the PIN"

        dlg.key_edit.setText("1234")
        dlg.switch_btn.click()
        assert dlg.mode == UnlockKeyKind.PASSWORD
        assert dlg.key_edit.text() == ""
        assert dlg.key_edit.placeholderText() == "Please enter the passphrase"

    def test_password_mode_has_no_switch(self, qapp):
        from diskenc.gui import UnlockPartitionDialog

        dlg = UnlockPartitionDialog(UnlockKeyKind.PASSWORD)
        assert dlg.switch_btn.isHidden()

    def test_unlock_enabled_only_with_text(self, qapp):
        from diskenc.gui import UnlockPartitionDialog

        dlg = UnlockPartitionDialog(UnlockKeyKind.PASSWORD)
        assert not dlg.unlock_btn.isEnabled()
        dlg.key_edit.setText("secret")
        assert dlg.unlock_btn.isEnabled()
        assert dlg.unlock_key() == (UnlockKeyKind.PASSWORD, "secret")


class TestQtProgressView:
    @pytest.fixture
    def job(self):
        return DeviceJob(device="/dev/sda1", name="Data", kind=JobKind.ENCRYPT, progress=30.0)

    def test_open_update_close(self, qapp, job):
        from diskenc.gui import QtProgressView

        view = QtProgressView()
        view.open(job)
        dlg = view.dialog_for("/dev/sda1", JobKind.ENCRYPT)
        assert dlg.windowTitle() == "Encrypting...Data(sda1)"

        view.update(job)
        assert dlg.progress_bar.value() == 30

        dismissed = MagicMock()
        view.on_dismissed = dismissed
        view.close(job)
        assert view.dialog_for("/dev/sda1", JobKind.ENCRYPT) is None
        dismissed.assert_not_called()

    def test_open_is_idempotent(self, qapp, job):
        from diskenc.gui import QtProgressView

        view = QtProgressView()
        view.open(job)
        first = view.dialog_for(*job.key)
        view.open(job)
        assert view.dialog_for(*job.key) is first

    def test_user_close_reports_dismissal(self, qapp, job):
        from diskenc.gui import QtProgressView

        dismissed = MagicMock()
        view = QtProgressView(on_dismissed=dismissed)
        view.open(job)
        view.update(job)
        view.dialog_for(*job.key).close()

        dismissed.assert_called_once_with("/dev/sda1", JobKind.ENCRYPT)
        assert view.dialog_for(*job.key) is None

    def test_decrypt_title(self, qapp):
        from diskenc.gui import QtProgressView

        view = QtProgressView(lang="en")
        view.open(DeviceJob(device="/dev/sdb", name="Backup", kind=JobKind.DECRYPT))
        assert view.dialog_for("/dev/sdb", JobKind.DECRYPT).windowTitle() == "Decrypting...Backup(sdb)"


class TestQtBusyCursor:
    def test_restore_pops_override(self, qapp):
        from PyQt6.QtCore import Qt
        from PyQt6.QtGui import QCursor
        from PyQt6.QtWidgets import QApplication

        from diskenc.gui import QtBusyCursor

        QApplication.setOverrideCursor(QCursor(Qt.CursorShape.WaitCursor))
        QtBusyCursor().restore()
        assert QApplication.overrideCursor() is None

    def test_restore_without_override(self, qapp):
        from diskenc.gui import QtBusyCursor

        QtBusyCursor().restore()
