# context.py - Orchestration context for disk-encryption events
"""
EncryptEventsContext wires the core together and owns its lifetime:

    registry    JobRegistry (one job per device and kind)
    presenter   OutcomePresenter (policy table + notices)
    dispatcher  NotificationDispatcher (daemon notifications)
    acquirer    PassphraseAcquirer (device-password hook)

start() subscribes to the daemon and follows the device-password hook;
stop() undoes both and closes any progress window still open. There is
no module-level instance: the launcher (or a test) constructs one.
"""

import logging
from typing import Optional, Tuple

from diskenc.collaborators import (
    BusyCursor,
    DeviceInfo,
    Notifier,
    ProgressView,
    RebootPrompt,
    SecretPrompt,
    SecretUnsealer,
    SessionManager,
)
from diskenc.core.limits import Limits
from diskenc.dispatcher import NotificationDispatcher
from diskenc.errors import UnsupportedKeyTypeError
from diskenc.hooks import DevicePasswordHook
from diskenc.jobs import JobRegistry
from diskenc.passphrase import PassphraseAcquirer
from diskenc.presenter import OutcomePresenter

_context_logger = logging.getLogger("DiskEnc.context")


class EncryptEventsContext:
    """
    Single owner of the client's orchestration state.

    Usage:
        ctx = EncryptEventsContext(
            device_info=DaemonDeviceInfo(), unsealer=Tpm2Unsealer(),
            prompt=QtSecretPrompt(), notifier=QtNotifier(),
            reboot_prompt=QtRebootPrompt(), session=SessionManagerReboot(),
            progress_view=QtProgressView(), cursor=QtBusyCursor(),
            hook=hook,
        )
        ctx.start(bridge_factory=DaemonSignalBridge)
        ...
        ctx.stop()
    """

    def __init__(
        self,
        device_info: DeviceInfo,
        unsealer: SecretUnsealer,
        prompt: SecretPrompt,
        notifier: Notifier,
        reboot_prompt: RebootPrompt,
        session: SessionManager,
        progress_view: ProgressView,
        cursor: BusyCursor,
        hook: Optional[DevicePasswordHook] = None,
        lang: str = "en",
        stale_window: float = Limits.STALE_PROGRESS_WINDOW,
    ):
        self.progress_view = progress_view
        self.cursor = cursor
        self.hook = hook if hook is not None else DevicePasswordHook()

        self.registry = JobRegistry(stale_window=stale_window)
        self.presenter = OutcomePresenter(notifier, reboot_prompt, session, lang=lang)
        self.dispatcher = NotificationDispatcher(self.registry, self.presenter, cursor)
        self.acquirer = PassphraseAcquirer(device_info, prompt, unsealer, self.presenter)

        self.registry.job_started.connect(self._on_job_started)
        self.registry.progress_updated.connect(self.progress_view.update)
        self.registry.job_finished.connect(self.progress_view.close)

        self._bridge = None
        self._started = False

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self, bridge_factory=None) -> None:
        """
        Follow the device-password hook and, if given a bridge factory
        (e.g. DaemonSignalBridge), subscribe to the daemon.
        """
        if self._started:
            return
        self.hook.follow(self.on_acquire_device_pwd)
        if bridge_factory is not None:
            self._bridge = bridge_factory(self.dispatcher)
            self._bridge.bind()
        self._started = True
        _context_logger.info("Disk encryption event handling started")

    def stop(self) -> None:
        if not self._started:
            return
        if self._bridge is not None:
            self._bridge.unbind()
            self._bridge = None
        self.hook.unfollow(self.on_acquire_device_pwd)
        self.registry.clear()
        self._started = False
        _context_logger.info("Disk encryption event handling stopped")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_en_decrypt_job(self) -> bool:
        """True while an encrypt or decrypt job is running (blocks app close)."""
        return self.registry.has_any_active_job()

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _on_job_started(self, job) -> None:
        self.cursor.restore()
        self.progress_view.open(job)

    def on_progress_dismissed(self, device: str, kind) -> None:
        """The user closed a progress window."""
        self.registry.close(device, kind)

    def on_acquire_device_pwd(self, device: str) -> Optional[Tuple[str, bool]]:
        """
        Device-password hook handler.

        Returns:
            (secret, cancelled), or None when the device's key type is
            unsupported so the privileged operation fails
        """
        try:
            result = self.acquirer.acquire(device)
        except UnsupportedKeyTypeError as e:
            _context_logger.warning(f"Device password hook failed: {e}")
            return None
        return result.as_tuple()
