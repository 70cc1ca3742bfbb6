# dispatcher.py - Routing of daemon notifications
"""
Receives the daemon's asynchronous notifications and routes them:

    *Progress            -> JobRegistry.on_progress
    *Result (terminal)   -> busy cursor restore, JobRegistry.on_terminal,
                            classify(), OutcomePresenter.handle

Notifications are processed in the order they are delivered; nothing is
buffered or coalesced here. deliver() runs synchronously on the owning
thread. Calls from any other thread are queued onto the owning thread
through a Qt signal, which serializes every registry mutation.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from diskenc.collaborators import BusyCursor
from diskenc.core.constants import DaemonSignals
from diskenc.core.modes import JobKind, Operation, Outcome
from diskenc.errors import DiskEncError, MalformedNotificationError
from diskenc.jobs import DeviceJob, JobRegistry
from diskenc.presenter import Decision, OutcomePresenter
from diskenc.taxonomy import classify

_dispatch_logger = logging.getLogger("DiskEnc.dispatcher")


@dataclass(frozen=True)
class TerminalEvent:
    """Everything that came out of one terminal notification."""

    operation: Operation
    device: str
    name: str
    outcome: Outcome
    decision: Decision
    job: Optional[DeviceJob] = None


class NotificationDispatcher(QObject):
    """
    Routes daemon notifications to the registry and the presenter.

    Usage:
        dispatcher = NotificationDispatcher(registry, presenter, cursor)
        dispatcher.deliver("EncryptProgress", "/dev/sda1", "sda1", 50.0)
    """

    # Emitted after each terminal notification has been fully processed
    terminal_processed = pyqtSignal(object)

    # Cross-thread deliveries: (signal name, args tuple)
    _queued = pyqtSignal(str, object)

    def __init__(
        self,
        registry: JobRegistry,
        presenter: OutcomePresenter,
        cursor: BusyCursor,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.registry = registry
        self.presenter = presenter
        self.cursor = cursor
        self._owner_thread = threading.get_ident()
        self._queued.connect(self._on_queued, Qt.ConnectionType.QueuedConnection)

        self._handlers: Dict[str, Callable] = {
            DaemonSignals.PREPARE_ENCRYPT_RESULT: self.on_prepare_encrypt_result,
            DaemonSignals.ENCRYPT_RESULT: self.on_encrypt_result,
            DaemonSignals.ENCRYPT_PROGRESS: self.on_encrypt_progress,
            DaemonSignals.DECRYPT_RESULT: self.on_decrypt_result,
            DaemonSignals.DECRYPT_PROGRESS: self.on_decrypt_progress,
            DaemonSignals.CHANGE_PASSPHRASE_RESULT: self.on_change_passphrase_result,
            DaemonSignals.CHANGE_PASSPHRASE_RESULT_LEGACY: self.on_change_passphrase_result,
        }

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def deliver(self, signal: str, *args):
        """
        Route one notification by name.

        Returns:
            The handler's result on the owning thread, None when queued

        Raises:
            MalformedNotificationError: Unknown signal or wrong argument shape
        """
        if threading.get_ident() != self._owner_thread:
            _dispatch_logger.debug(f"Queueing {signal} from foreign thread")
            self._queued.emit(signal, args)
            return None
        return self._route(signal, args)

    def _on_queued(self, signal: str, args: tuple) -> None:
        try:
            self._route(signal, args)
        except DiskEncError:
            _dispatch_logger.exception(f"Failed to process queued {signal}")

    def _route(self, signal: str, args: tuple):
        handler = self._handlers.get(signal)
        if handler is None:
            raise MalformedNotificationError(signal, args, "unknown signal")

        expected = DaemonSignals.ARITY[signal]
        if len(args) != expected:
            raise MalformedNotificationError(signal, args, f"expected {expected} arguments, got {len(args)}")

        # Last argument is the progress value or the result code
        device, name = str(args[0]), str(args[1])
        try:
            value = float(args[-1]) if signal.endswith("Progress") else int(args[-1])
        except (TypeError, ValueError) as e:
            raise MalformedNotificationError(signal, args, f"bad value {args[-1]!r}") from e
        if not math.isfinite(value):
            raise MalformedNotificationError(signal, args, f"non-finite value {args[-1]!r}")

        _dispatch_logger.debug(f"{signal} {device} {name} {value}")
        if expected == 4:
            return handler(device, name, str(args[2]), value)
        return handler(device, name, value)

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def on_encrypt_progress(self, device: str, name: str, progress: float) -> Optional[DeviceJob]:
        return self.registry.on_progress(device, JobKind.ENCRYPT, name, progress)

    def on_decrypt_progress(self, device: str, name: str, progress: float) -> Optional[DeviceJob]:
        return self.registry.on_progress(device, JobKind.DECRYPT, name, progress)

    # -------------------------------------------------------------------------
    # Terminal results
    # -------------------------------------------------------------------------

    def on_prepare_encrypt_result(self, device: str, name: str, _reserved: str, code: int) -> TerminalEvent:
        return self._finish(Operation.PRE_ENCRYPT, None, device, name, code)

    def on_encrypt_result(self, device: str, name: str, code: int) -> TerminalEvent:
        return self._finish(Operation.ENCRYPT, JobKind.ENCRYPT, device, name, code)

    def on_decrypt_result(self, device: str, name: str, _reserved: str, code: int) -> TerminalEvent:
        return self._finish(Operation.DECRYPT, JobKind.DECRYPT, device, name, code)

    def on_change_passphrase_result(self, device: str, name: str, _reserved: str, code: int) -> TerminalEvent:
        return self._finish(Operation.CHANGE_PASSPHRASE, None, device, name, code)

    def _finish(
        self,
        operation: Operation,
        kind: Optional[JobKind],
        device: str,
        name: str,
        code: int,
    ) -> TerminalEvent:
        self.cursor.restore()

        job = self.registry.on_terminal(device, kind, code) if kind is not None else None
        outcome = classify(operation, code)
        _dispatch_logger.info(f"{operation.value} result for {device}: code={code} outcome={outcome}")

        decision = self.presenter.handle(operation, outcome, device, name)
        event = TerminalEvent(operation, device, name, outcome, decision, job)
        self.terminal_processed.emit(event)
        return event
