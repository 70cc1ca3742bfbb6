#!/usr/bin/env python3
"""
Qt widgets and collaborators for the disk-encryption event client.

- UnlockPartitionDialog: passphrase/PIN entry, with a switch to the raw
  passphrase when the device is protected by TPM + PIN
- EncryptProcessDialog: progress window for one encrypt/decrypt job
- QtProgressView, QtNotifier, QtRebootPrompt, QtSecretPrompt, QtBusyCursor:
  the collaborators the orchestration core calls into
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QApplication,
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from diskenc.core.modes import JobKind, Severity, UnlockKeyKind
from diskenc.i18n import tr
from diskenc.jobs import DeviceJob, JobKey
from diskenc.presenter import format_device_label

_gui_logger = logging.getLogger("DiskEnc.gui")


# ============================================================
# UNLOCK DIALOG
# ============================================================


class UnlockPartitionDialog(QDialog):
    """
    Modal prompt for a passphrase or PIN.

    In PIN mode a link-style button lets the user fall back to typing the
    raw passphrase; unlock_key() reports which one was entered.
    """

    def __init__(self, mode: UnlockKeyKind, lang: str = "en", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.lang = lang
        self._mode = UnlockKeyKind(mode)
        self._allow_switch = self._mode == UnlockKeyKind.PIN

        self.setWindowTitle(tr("unlock_title", lang=lang))
        self.setModal(True)

        layout = QVBoxLayout(self)

        self.key_edit = QLineEdit(self)
        self.key_edit.setEchoMode(QLineEdit.EchoMode.Password)
        layout.addWidget(self.key_edit)

        self.switch_btn = QPushButton(self)
        self.switch_btn.setFlat(True)
        self.switch_btn.setVisible(self._allow_switch)
        self.switch_btn.clicked.connect(self._toggle_mode)
        layout.addWidget(self.switch_btn, alignment=Qt.AlignmentFlag.AlignRight)

        buttons = QHBoxLayout()
        self.cancel_btn = QPushButton(tr("btn_cancel", lang=lang), self)
        self.unlock_btn = QPushButton(tr("btn_unlock", lang=lang), self)
        self.unlock_btn.setDefault(True)
        self.unlock_btn.setEnabled(False)
        self.cancel_btn.clicked.connect(self.reject)
        self.unlock_btn.clicked.connect(self.accept)
        buttons.addWidget(self.cancel_btn)
        buttons.addWidget(self.unlock_btn)
        layout.addLayout(buttons)

        self.key_edit.textChanged.connect(lambda text: self.unlock_btn.setEnabled(bool(text)))
        self._refresh_mode()

    def _toggle_mode(self) -> None:
        self._mode = UnlockKeyKind.PASSWORD if self._mode == UnlockKeyKind.PIN else UnlockKeyKind.PIN
        self.key_edit.clear()
        self._refresh_mode()

    def _refresh_mode(self) -> None:
        if self._mode == UnlockKeyKind.PIN:
            self.key_edit.setPlaceholderText(tr("unlock_placeholder_pin", lang=self.lang))
            self.switch_btn.setText(tr("unlock_by_pwd", lang=self.lang))
        else:
            self.key_edit.setPlaceholderText(tr("unlock_placeholder_pwd", lang=self.lang))
            self.switch_btn.setText(tr("unlock_by_pin", lang=self.lang))

    @property
    def mode(self) -> UnlockKeyKind:
        return self._mode

    def unlock_key(self) -> Tuple[UnlockKeyKind, str]:
        return self._mode, self.key_edit.text()


class QtSecretPrompt:
    """SecretPrompt collaborator showing UnlockPartitionDialog."""

    def __init__(self, lang: str = "en", parent: Optional[QWidget] = None):
        self.lang = lang
        self.parent = parent

    def prompt(self, mode: UnlockKeyKind) -> Tuple[str, UnlockKeyKind, bool]:
        dlg = UnlockPartitionDialog(mode, lang=self.lang, parent=self.parent)
        try:
            accepted = dlg.exec() == QDialog.DialogCode.Accepted
            used_mode, entered = dlg.unlock_key()
            return (entered if accepted else ""), used_mode, accepted
        finally:
            dlg.deleteLater()


# ============================================================
# PROGRESS WINDOWS
# ============================================================


class EncryptProcessDialog(QDialog):
    """Non-modal progress window for one job."""

    # Emitted when the user closes the window
    dismissed = pyqtSignal()

    def __init__(self, title: str, lang: str = "en", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._closing_programmatically = False
        self.setWindowTitle(title)

        layout = QVBoxLayout(self)
        self.title_label = QLabel(title, self)
        layout.addWidget(self.title_label)

        self.progress_bar = QProgressBar(self)
        self.progress_bar.setRange(0, 100)
        layout.addWidget(self.progress_bar)

        hint = QLabel(tr("progress_hint", lang=lang), self)
        hint.setWordWrap(True)
        layout.addWidget(hint)

    def update_progress(self, progress: float) -> None:
        self.progress_bar.setValue(int(progress))

    def close_silently(self) -> None:
        """Close without emitting `dismissed`."""
        self._closing_programmatically = True
        self.close()

    def closeEvent(self, event) -> None:
        if not self._closing_programmatically:
            self.dismissed.emit()
        super().closeEvent(event)


class QtProgressView:
    """
    ProgressView collaborator: one EncryptProcessDialog per (device, kind).

    The windows are detachable: closing one only tells `on_dismissed`, it
    never owns the job.
    """

    _TITLE_KEYS = {
        JobKind.ENCRYPT: "progress_encrypting",
        JobKind.DECRYPT: "progress_decrypting",
    }

    def __init__(
        self,
        lang: str = "en",
        on_dismissed: Optional[Callable[[str, JobKind], None]] = None,
    ):
        self.lang = lang
        self.on_dismissed = on_dismissed
        self._dialogs: Dict[JobKey, EncryptProcessDialog] = {}

    def dialog_for(self, device: str, kind: JobKind) -> Optional[EncryptProcessDialog]:
        return self._dialogs.get((device, kind))

    def open(self, job: DeviceJob) -> None:
        if job.key in self._dialogs:
            return
        title = tr(self._TITLE_KEYS[job.kind], lang=self.lang, device=format_device_label(job.device, job.name))
        dlg = EncryptProcessDialog(title, lang=self.lang)
        dlg.dismissed.connect(lambda key=job.key: self._dismissed(key))
        self._dialogs[job.key] = dlg
        _gui_logger.debug(f"Progress window opened: {title}")

    def update(self, job: DeviceJob) -> None:
        dlg = self._dialogs.get(job.key)
        if dlg is None:
            return
        dlg.update_progress(job.progress)
        dlg.show()

    def close(self, job: DeviceJob) -> None:
        dlg = self._dialogs.pop(job.key, None)
        if dlg is None:
            return
        dlg.close_silently()
        dlg.deleteLater()

    def _dismissed(self, key: JobKey) -> None:
        dlg = self._dialogs.pop(key, None)
        if dlg is not None:
            dlg.deleteLater()
        if self.on_dismissed:
            self.on_dismissed(*key)


# ============================================================
# NOTICES
# ============================================================


class QtNotifier:
    """Notifier collaborator: modal message box."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent

    def present(self, title: str, message: str, severity: Severity) -> None:
        if severity == Severity.ERROR:
            QMessageBox.critical(self.parent, title, message)
        else:
            QMessageBox.information(self.parent, title, message)


class QtRebootPrompt:
    """RebootPrompt collaborator: "Reboot later" / "Reboot now"."""

    def __init__(self, lang: str = "en", parent: Optional[QWidget] = None):
        self.lang = lang
        self.parent = parent

    def ask(self, title: str, message: str) -> bool:
        msg = QMessageBox(self.parent)
        try:
            msg.setIcon(QMessageBox.Icon.Information)
            msg.setWindowTitle(title)
            msg.setText(message)
            msg.addButton(tr("btn_reboot_later", lang=self.lang), QMessageBox.ButtonRole.RejectRole)
            reboot_now = msg.addButton(tr("btn_reboot_now", lang=self.lang), QMessageBox.ButtonRole.AcceptRole)
            msg.exec()
            return msg.clickedButton() is reboot_now
        finally:
            msg.deleteLater()


class QtBusyCursor:
    """BusyCursor collaborator: undo QApplication.setOverrideCursor()."""

    def restore(self) -> None:
        if QApplication.overrideCursor() is not None:
            QApplication.restoreOverrideCursor()
