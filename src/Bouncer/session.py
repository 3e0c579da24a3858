"""
X11 session connection.

Opens the display, picks the root window of the default screen and resolves
the EWMH atoms the rest of Bouncer needs.
"""
import logging
import os
from typing import Optional

from Xlib import X, Xatom
from Xlib import display as xlib_display
from Xlib import error as xlib_error

from Bouncer.Models import SessionAtoms

logger = logging.getLogger(__name__)

CLIENT_LIST = "_NET_CLIENT_LIST"
WM_PID = "_NET_WM_PID"
CLOSE_WINDOW = "_NET_CLOSE_WINDOW"
CURRENT_DESKTOP = "_NET_CURRENT_DESKTOP"
WM_DESKTOP = "_NET_WM_DESKTOP"


class SessionConnectionError(ConnectionError):
    """Raised when the X session cannot be opened or lacks mandatory support."""


class SessionConnection:
    """
    Owns the connection to the X server for the whole run.

    Use :meth:`open` to create one. The connection is released by
    :meth:`close`, or automatically when used as a context manager.
    """

    def __init__(self, display, root, atoms: SessionAtoms, current_desktop: Optional[int] = None):
        self.display = display
        self.root = root
        self.atoms = atoms
        self.current_desktop = current_desktop
        self._closed = False

    @classmethod
    def open(cls, display_name: Optional[str] = None) -> "SessionConnection":
        """
        Connect to the X server and resolve atoms.

        :param display_name: Display to connect to, defaults to $DISPLAY
        :return: Connected session
        :raises SessionConnectionError: No display name, connection refused,
            or the window manager does not publish _NET_CLIENT_LIST
        """
        if display_name is None:
            display_name = os.environ.get("DISPLAY")

        if not display_name:
            raise SessionConnectionError("Display variable not set. X Server running?")

        try:
            disp = xlib_display.Display(display_name)
        except (xlib_error.DisplayError, xlib_error.ConnectionClosedError, OSError) as exc:
            raise SessionConnectionError(f"Could not connect to {display_name}: {exc}") from exc

        logger.info(f'Display: "{display_name}"')

        try:
            root = disp.screen().root
            atoms = SessionAtoms(
                client_list=disp.get_atom(CLIENT_LIST, only_if_exists=True),
                wm_pid=disp.get_atom(WM_PID, only_if_exists=True),
                close_window=disp.get_atom(CLOSE_WINDOW, only_if_exists=True),
                current_desktop=disp.get_atom(CURRENT_DESKTOP, only_if_exists=True),
                wm_desktop=disp.get_atom(WM_DESKTOP, only_if_exists=True),
            )
        except (xlib_error.XError, xlib_error.ConnectionClosedError) as exc:
            disp.close()
            raise SessionConnectionError(f"Error talking to {display_name}: {exc}") from exc

        if atoms.client_list == X.NONE:
            disp.close()
            raise SessionConnectionError(
                f"{CLIENT_LIST} is not supported by the window manager on {display_name}"
            )

        session = cls(disp, root, atoms)
        session.current_desktop = session._read_current_desktop()
        return session

    def _read_current_desktop(self) -> Optional[int]:
        """Read _NET_CURRENT_DESKTOP from the root window, None if unpublished."""
        if self.atoms.current_desktop == X.NONE:
            return None

        try:
            prop = self.root.get_full_property(self.atoms.current_desktop, Xatom.CARDINAL)
        except xlib_error.XError as exc:
            logger.debug(f"Reading {CURRENT_DESKTOP} failed: {exc}")
            return None

        if prop is None or not len(prop.value):
            logger.debug(f"{CURRENT_DESKTOP} not set")
            return None

        return int(prop.value[0])

    @property
    def can_change_desktop(self) -> bool:
        return (
            self.atoms.current_desktop != X.NONE
            and self.atoms.wm_desktop != X.NONE
            and self.current_desktop is not None
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.display.close()
        except (xlib_error.ConnectionClosedError, OSError) as exc:
            logger.debug(f"Error while closing display: {exc}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
