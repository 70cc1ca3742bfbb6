# dbus_bridge.py - D-Bus transport for the daemon and the session manager
"""
Qt D-Bus glue around the orchestration core.

- DaemonSignalBridge subscribes to the encryption daemon's notifications on
  the system bus and hands (member, arguments) to the dispatcher.
- DaemonDeviceInfo asks the daemon for a device's TPM token and derives its
  key protection mode.
- SessionManagerReboot asks the session manager to reboot.
"""

import json
import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSlot
from PyQt6.QtDBus import QDBusConnection, QDBusInterface, QDBusMessage

from diskenc.core.constants import DaemonSignals, DBusNames, TokenKeys
from diskenc.core.limits import Limits
from diskenc.core.modes import SecKeyType
from diskenc.dispatcher import NotificationDispatcher
from diskenc.errors import DiskEncError

_dbus_logger = logging.getLogger("DiskEnc.dbus")


# =============================================================================
# Daemon notifications
# =============================================================================


class DaemonSignalBridge(QObject):
    """
    Forwards the daemon's signals from the system bus to a dispatcher.

    Usage:
        bridge = DaemonSignalBridge(dispatcher)
        bridge.bind()
        ...
        bridge.unbind()
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        service: str = DBusNames.DAEMON_SERVICE,
        path: str = DBusNames.DAEMON_PATH,
        interface: str = DBusNames.DAEMON_INTERFACE,
        connection: Optional[QDBusConnection] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.dispatcher = dispatcher
        self.service = service
        self.path = path
        self.interface = interface
        self._connection = connection
        self._bound: List[str] = []

    @property
    def connection(self) -> QDBusConnection:
        if self._connection is None:
            self._connection = QDBusConnection.systemBus()
        return self._connection

    @property
    def is_bound(self) -> bool:
        return bool(self._bound)

    def bind(self) -> bool:
        """
        Subscribe to every daemon notification.

        Returns:
            True if all subscriptions succeeded
        """
        if not self.connection.isConnected():
            _dbus_logger.error("System bus is not connected, daemon notifications unavailable")
            return False

        ok = True
        for signal in DaemonSignals.ALL:
            if signal in self._bound:
                continue
            if self.connection.connect(self.service, self.path, self.interface, signal, self._on_message):
                self._bound.append(signal)
            else:
                ok = False
                _dbus_logger.error(f"Failed to subscribe to {self.interface}.{signal}")
        _dbus_logger.info(f"Subscribed to {len(self._bound)} daemon signals on {self.service}")
        return ok

    def unbind(self) -> None:
        for signal in self._bound:
            self.connection.disconnect(self.service, self.path, self.interface, signal, self._on_message)
        _dbus_logger.info(f"Unsubscribed from {len(self._bound)} daemon signals")
        self._bound = []

    @pyqtSlot(QDBusMessage)
    def _on_message(self, message: QDBusMessage) -> None:
        # An exception escaping a Qt slot aborts the process
        try:
            self.dispatcher.deliver(message.member(), *message.arguments())
        except DiskEncError:
            _dbus_logger.exception(f"Dropped daemon notification {message.member()}")


# =============================================================================
# Device key type
# =============================================================================


def parse_key_type(token: str) -> Optional[SecKeyType]:
    """
    Derive the key protection mode from the daemon's TPM token.

        ""                             -> PASSWORD_ONLY (no TPM token)
        '{"type": "tpm", "pin": true}' -> TPM_AND_PIN
        '{"type": "tpm"}'              -> TPM_ONLY
        anything else                  -> None (unsupported)
    """
    if not token or not token.strip():
        return SecKeyType.PASSWORD_ONLY

    try:
        data = json.loads(token)
    except json.JSONDecodeError:
        _dbus_logger.warning(f"Unparsable TPM token: {token[:80]!r}")
        return None

    if not isinstance(data, dict):
        return None
    if not data:
        return SecKeyType.PASSWORD_ONLY
    if data.get(TokenKeys.TYPE) != TokenKeys.TYPE_TPM:
        return None
    return SecKeyType.TPM_AND_PIN if data.get(TokenKeys.PIN) in (True, "1", 1) else SecKeyType.TPM_ONLY


class DaemonDeviceInfo:
    """DeviceInfo backed by the daemon's TPMToken method."""

    def __init__(
        self,
        service: str = DBusNames.DAEMON_SERVICE,
        path: str = DBusNames.DAEMON_PATH,
        interface: str = DBusNames.DAEMON_INTERFACE,
        connection: Optional[QDBusConnection] = None,
    ):
        self.service = service
        self.path = path
        self.interface = interface
        self._connection = connection

    def _call_token(self, device: str) -> Optional[str]:
        connection = self._connection or QDBusConnection.systemBus()
        iface = QDBusInterface(self.service, self.path, self.interface, connection)
        if not iface.isValid():
            _dbus_logger.error(f"Daemon interface {self.interface} is not available")
            return None
        iface.setTimeout(Limits.DBUS_CALL_TIMEOUT_MS)

        reply = iface.call(DBusNames.DAEMON_TPM_TOKEN_METHOD, device)
        if reply.type() == QDBusMessage.MessageType.ErrorMessage:
            _dbus_logger.error(f"{DBusNames.DAEMON_TPM_TOKEN_METHOD}({device}) failed: {reply.errorMessage()}")
            return None
        args = reply.arguments()
        return str(args[0]) if args else ""

    def key_type(self, device: str) -> Optional[SecKeyType]:
        token = self._call_token(device)
        if token is None:
            return None
        key_type = parse_key_type(token)
        _dbus_logger.debug(f"Key type for {device}: {key_type}")
        return key_type


# =============================================================================
# Session manager
# =============================================================================


class SessionManagerReboot:
    """SessionManager collaborator: fire-and-forget RequestReboot."""

    def __init__(
        self,
        service: str = DBusNames.SESSION_SERVICE,
        path: str = DBusNames.SESSION_PATH,
        interface: str = DBusNames.SESSION_INTERFACE,
        connection: Optional[QDBusConnection] = None,
    ):
        self.service = service
        self.path = path
        self.interface = interface
        self._connection = connection

    def request_reboot(self) -> None:
        connection = self._connection or QDBusConnection.sessionBus()
        iface = QDBusInterface(self.service, self.path, self.interface, connection)
        _dbus_logger.info(f"Requesting reboot from {self.service}")
        iface.asyncCall(DBusNames.SESSION_REBOOT_METHOD)
