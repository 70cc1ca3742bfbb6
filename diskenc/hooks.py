# hooks.py - Device-password hook point
"""
Hook through which a privileged operation asks for a device's secret.

The computer/device plugin owns the hook point; exactly one handler may
follow it. The handler answers synchronously:

    handler(device) -> (secret, cancelled)   handled
    handler(device) -> None                  failed; the operation fails
"""

import logging
from typing import Callable, Optional, Tuple

from diskenc.errors import HookAlreadyFollowedError

_hook_logger = logging.getLogger("DiskEnc.hooks")

DevicePasswordHandler = Callable[[str], Optional[Tuple[str, bool]]]


class DevicePasswordHook:
    """
    Single-handler hook point for device passwords.

    Usage:
        hook = DevicePasswordHook()
        hook.follow(context.on_acquire_device_pwd)
        answer = hook.request("/dev/sda1")  # (secret, cancelled) or None
    """

    name = "hook_Device_AcquireDevPwd"

    def __init__(self):
        self._handler: Optional[DevicePasswordHandler] = None

    @property
    def is_followed(self) -> bool:
        return self._handler is not None

    def follow(self, handler: DevicePasswordHandler) -> None:
        """
        Raises:
            HookAlreadyFollowedError: If a different handler already follows
        """
        if self._handler is not None and self._handler != handler:
            raise HookAlreadyFollowedError(f"{self.name} already has a handler")
        self._handler = handler
        _hook_logger.info(f"{self.name} followed")

    def unfollow(self, handler: DevicePasswordHandler) -> None:
        if self._handler == handler:
            self._handler = None
            _hook_logger.info(f"{self.name} unfollowed")

    def request(self, device: str) -> Optional[Tuple[str, bool]]:
        """Ask the handler for `device`'s secret; None if nobody answered."""
        if self._handler is None:
            _hook_logger.warning(f"{self.name} requested for {device} with no handler")
            return None
        return self._handler(device)
