#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for diskenc tests.

Qt runs on the offscreen platform so widget tests work without a display.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# Environment Setup - Execute BEFORE any test imports
# =============================================================================

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_tests_dir = Path(__file__).resolve().parent
REPO_ROOT = _tests_dir.parent

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


# =============================================================================
# Shared Fixtures
# =============================================================================

from unittest.mock import MagicMock

import pytest


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return MagicMock(name="notifier")


@pytest.fixture
def reboot_prompt():
    prompt = MagicMock(name="reboot_prompt")
    prompt.ask.return_value = False
    return prompt


@pytest.fixture
def session():
    return MagicMock(name="session")


@pytest.fixture
def cursor():
    return MagicMock(name="cursor")


@pytest.fixture
def presenter(notifier, reboot_prompt, session):
    from diskenc.presenter import OutcomePresenter

    return OutcomePresenter(notifier, reboot_prompt, session, lang="en")


@pytest.fixture
def qapp():
    """Create or reuse the QApplication for widget tests."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    return app
