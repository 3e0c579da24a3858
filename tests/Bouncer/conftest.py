import os
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from Xlib import X
from Xlib import error as xlib_error

# Add src to python path so we can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))

from Bouncer.Models import SessionAtoms  # noqa: E402
from Bouncer.cancellation import CancelToken  # noqa: E402

ATOMS = SessionAtoms(client_list=101, wm_pid=102, close_window=103, current_desktop=104, wm_desktop=105)


class FakeXError(xlib_error.XError):
    """XError that can be raised without a server reply."""

    def __init__(self, message="BadWindow"):
        Exception.__init__(self, message)
        self.message = message

    def __str__(self):
        return self.message


class FakeDisplay:
    """Stand-in for Xlib.display.Display with a scripted event queue."""

    def __init__(self, events=()):
        self.events = list(events)
        self.windows = {}
        self.flush = MagicMock()
        self.closed = False
        self._read_fd, self._write_fd = os.pipe()

    def pending_events(self):
        return len(self.events)

    def next_event(self):
        return self.events.pop(0)

    def fileno(self):
        return self._read_fd

    def create_resource_object(self, kind, handle):
        if handle not in self.windows:
            self.windows[handle] = MagicMock(id=handle)
        return self.windows[handle]

    def close(self):
        if not self.closed:
            self.closed = True
            os.close(self._read_fd)
            os.close(self._write_fd)


def destroy_event(handle):
    return SimpleNamespace(type=X.DestroyNotify, window=SimpleNamespace(id=handle))


def unmap_event(handle):
    return SimpleNamespace(type=X.UnmapNotify, window=SimpleNamespace(id=handle))


@pytest.fixture
def fake_display():
    display = FakeDisplay()
    yield display
    display.close()


@pytest.fixture
def mock_session(fake_display):
    """Fixture that returns a mock SessionConnection around a FakeDisplay."""
    session = MagicMock()
    session.display = fake_display
    session.root = MagicMock()
    session.atoms = ATOMS
    session.current_desktop = 2
    session.can_change_desktop = True
    return session


@pytest.fixture
def token():
    tok = CancelToken()
    yield tok
    tok.close()
