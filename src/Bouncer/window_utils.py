"""
Window directory: enumerating top-level windows and reading their properties.

Top-level windows come from the root window's _NET_CLIENT_LIST. A window may
disappear between enumeration and a property read; such reads report the
property as absent instead of failing.
"""

import logging
from typing import Optional

from Xlib import X, Xatom
from Xlib import error as xlib_error

from Bouncer.Models import WindowClass

logger = logging.getLogger(__name__)


class WindowDirectory:
    """Read-only view of the session's top-level windows."""

    def __init__(self, session):
        """
        :param session: Open SessionConnection
        """
        self.session = session

    def _window(self, handle: int):
        return self.session.display.create_resource_object("window", handle)

    def list_top_level_windows(self) -> list[int]:
        """
        Snapshot the client list of the root window.

        :return: Window ids in the order the window manager reports them
        """
        try:
            prop = self.session.root.get_full_property(self.session.atoms.client_list, Xatom.WINDOW)
        except xlib_error.XError as exc:
            logger.warning(f"Could not read client list: {exc}")
            return []

        if prop is None:
            logger.debug("Client list is empty")
            return []

        return [int(handle) for handle in prop.value]

    def class_of(self, handle: int) -> Optional[WindowClass]:
        """
        Read WM_CLASS of a window.

        :param handle: Window id
        :return: WindowClass, or None if the window has no class string
        """
        try:
            prop = self._window(handle).get_full_property(Xatom.WM_CLASS, Xatom.STRING)
        except xlib_error.XError as exc:
            logger.debug(f"0x{handle:08x} - WM_CLASS unreadable: {exc}")
            return None

        if prop is None or not prop.value:
            return None

        return WindowClass.from_property(prop.value)

    def owner_pid_of(self, handle: int) -> Optional[int]:
        """
        Read _NET_WM_PID of a window.

        Not every window manager or client publishes it, so None is a
        normal answer.

        :param handle: Window id
        :return: Process id, or None if unpublished
        """
        if self.session.atoms.wm_pid == X.NONE:
            return None

        try:
            prop = self._window(handle).get_full_property(self.session.atoms.wm_pid, Xatom.CARDINAL)
        except xlib_error.XError as exc:
            logger.debug(f"0x{handle:08x} - _NET_WM_PID unreadable: {exc}")
            return None

        if prop is None or not len(prop.value):
            return None

        return int(prop.value[0])
