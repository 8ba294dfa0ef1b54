"""
Shared pytest fixtures for tweenline tests.
"""
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    """Manually advanced millisecond clock for timelines."""
    return FakeClock()


class Sketch:
    """Host object with a few animatable fields."""

    def __init__(self):
        self.x = 0.0
        self.radius = 0
        self.alpha = 0.0
        self.label = "sketch"


@pytest.fixture
def sketch():
    return Sketch()
