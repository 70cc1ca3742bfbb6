#!/usr/bin/env python3
"""
Tests for context.py and hooks.py - lifetime and the device-password hook.

Verifies:
- Exactly one handler follows the hook
- start()/stop() follow and unfollow the hook and bind the bridge
- Progress view wiring through the registry signals
- Unsupported key type answers None
"""

from unittest.mock import MagicMock

import pytest

from diskenc.context import EncryptEventsContext
from diskenc.core.constants import DaemonSignals
from diskenc.core.modes import JobKind, SecKeyType, UnlockKeyKind
from diskenc.errors import HookAlreadyFollowedError
from diskenc.hooks import DevicePasswordHook


@pytest.fixture
def device_info():
    info = MagicMock(name="device_info")
    info.key_type.return_value = SecKeyType.PASSWORD_ONLY
    return info


@pytest.fixture
def prompt():
    return MagicMock(name="prompt")


@pytest.fixture
def progress_view():
    return MagicMock(name="progress_view")


@pytest.fixture
def hook():
    return DevicePasswordHook()


@pytest.fixture
def ctx(device_info, prompt, notifier, reboot_prompt, session, progress_view, cursor, hook):
    return EncryptEventsContext(
        device_info=device_info,
        unsealer=MagicMock(name="unsealer"),
        prompt=prompt,
        notifier=notifier,
        reboot_prompt=reboot_prompt,
        session=session,
        progress_view=progress_view,
        cursor=cursor,
        hook=hook,
    )


class TestDevicePasswordHook:
    def test_request_without_handler(self, hook):
        assert not hook.is_followed
        assert hook.request("/dev/sda1") is None

    def test_single_handler(self, hook):
        first = MagicMock(return_value=("pw", False))
        hook.follow(first)
        with pytest.raises(HookAlreadyFollowedError):
            hook.follow(MagicMock())
        assert hook.request("/dev/sda1") == ("pw", False)
        first.assert_called_once_with("/dev/sda1")

    def test_follow_same_handler_twice(self, hook):
        handler = MagicMock()
        hook.follow(handler)
        hook.follow(handler)
        assert hook.is_followed

    def test_unfollow_other_handler_is_ignored(self, hook):
        handler = MagicMock()
        hook.follow(handler)
        hook.unfollow(MagicMock())
        assert hook.is_followed
        hook.unfollow(handler)
        assert not hook.is_followed


class TestLifetime:
    def test_start_follows_hook(self, ctx, hook):
        ctx.start()
        assert ctx.is_started
        assert hook.is_followed

    def test_start_binds_bridge(self, ctx):
        bridge = MagicMock(name="bridge")
        factory = MagicMock(return_value=bridge)
        ctx.start(bridge_factory=factory)
        factory.assert_called_once_with(ctx.dispatcher)
        bridge.bind.assert_called_once_with()

        ctx.stop()
        bridge.unbind.assert_called_once_with()

    def test_stop_unfollows_and_clears(self, ctx, hook):
        ctx.start()
        ctx.dispatcher.deliver(DaemonSignals.ENCRYPT_PROGRESS, "/dev/sda1", "sda1", 10.0)
        assert ctx.has_en_decrypt_job()

        ctx.stop()
        assert not ctx.is_started
        assert not hook.is_followed
        assert not ctx.has_en_decrypt_job()

    def test_second_context_cannot_follow(self, ctx, hook, device_info, prompt, notifier, reboot_prompt, session):
        ctx.start()
        other = EncryptEventsContext(
            device_info=device_info,
            unsealer=MagicMock(),
            prompt=prompt,
            notifier=notifier,
            reboot_prompt=reboot_prompt,
            session=session,
            progress_view=MagicMock(),
            cursor=MagicMock(),
            hook=hook,
        )
        with pytest.raises(HookAlreadyFollowedError):
            other.start()


class TestHookHandler:
    def test_password_answer(self, ctx, hook, prompt):
        prompt.prompt.return_value = ("pw", UnlockKeyKind.PASSWORD, True)
        ctx.start()
        assert hook.request("/dev/sda1") == ("pw", False)

    def test_cancel_answer(self, ctx, hook, prompt):
        prompt.prompt.return_value = ("", UnlockKeyKind.PASSWORD, False)
        ctx.start()
        assert hook.request("/dev/sda1") == ("", True)

    def test_unsupported_key_type_fails(self, ctx, hook, device_info, prompt):
        device_info.key_type.return_value = None
        ctx.start()
        assert hook.request("/dev/sda1") is None
        prompt.prompt.assert_not_called()


class TestProgressWiring:
    def test_views_follow_job_lifecycle(self, ctx, progress_view, cursor):
        ctx.dispatcher.deliver(DaemonSignals.DECRYPT_PROGRESS, "/dev/sdb", "Data", 5.0)
        job = progress_view.open.call_args[0][0]
        assert job.key == ("/dev/sdb", JobKind.DECRYPT)
        progress_view.update.assert_called_once_with(job)
        cursor.restore.assert_called_once_with()

        ctx.dispatcher.deliver(DaemonSignals.DECRYPT_RESULT, "/dev/sdb", "Data", "", 0)
        progress_view.close.assert_called_once_with(job)

    def test_dismissed_window_drops_job(self, ctx, progress_view):
        ctx.dispatcher.deliver(DaemonSignals.ENCRYPT_PROGRESS, "/dev/sda1", "sda1", 20.0)
        ctx.on_progress_dismissed("/dev/sda1", JobKind.ENCRYPT)
        assert not ctx.has_en_decrypt_job()

        # A later tick re-opens a window
        ctx.dispatcher.deliver(DaemonSignals.ENCRYPT_PROGRESS, "/dev/sda1", "sda1", 21.0)
        assert progress_view.open.call_count == 2
