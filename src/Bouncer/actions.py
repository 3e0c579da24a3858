"""
Actions applied to matched windows.

For every match the dispatcher subscribes to StructureNotify on the window
so its DestroyNotify reaches us, optionally asks the window manager to move
it to the current desktop, and asks the window manager to close it. Requests
go to the root window as EWMH client messages.
"""
import logging
from typing import Iterable, Optional

from Xlib import X
from Xlib import error as xlib_error
from Xlib.protocol import event as xlib_event

from Bouncer.Models import MatchedWindow, WindowClass
from Bouncer.pattern_matcher import PatternMatcher
from Bouncer.process_resolver import find_pid_by_name

REQUEST_MASK = X.SubstructureRedirectMask | X.SubstructureNotifyMask


class ActionDispatcher:
    """
    Apply the close action to every window accepted by the matcher.

    :param session: Open SessionConnection
    :param directory: WindowDirectory bound to the same session
    :param matcher: PatternMatcher holding the configured patterns
    :param dry_run: Track windows without sending any request
    """

    def __init__(self, session, directory, matcher: PatternMatcher, dry_run: bool = False):
        self.logger = logging.getLogger(__name__)
        self.session = session
        self.directory = directory
        self.matcher = matcher
        self.dry_run = dry_run
        self.requests_sent = 0

    def _on_error(self, err, request):
        # usually BadWindow: the window went away after enumeration
        self.logger.debug(f"X request failed: {err}")

    def _client_message(self, handle: int, message_type: int, data: list[int]):
        payload = (list(data) + [0] * 5)[:5]
        return xlib_event.ClientMessage(
            window=handle,
            client_type=message_type,
            data=(32, payload),
        )

    def _send_to_root(self, handle: int, message_type: int, data: list[int]) -> None:
        ev = self._client_message(handle, message_type, data)
        self.session.root.send_event(ev, event_mask=REQUEST_MASK, onerror=self._on_error)
        self.requests_sent += 1

    def subscribe(self, handle: int) -> None:
        """Select StructureNotify on the window so its destruction is reported."""
        window = self.session.display.create_resource_object("window", handle)
        window.change_attributes(event_mask=X.StructureNotifyMask, onerror=self._on_error)

    def move_to_current_desktop(self, handle: int) -> bool:
        """
        Ask the window manager to move the window to the current desktop.

        Best effort: skipped when the desktop atoms or the current desktop
        value are unavailable.

        :return: True if the request was sent
        """
        if not self.session.can_change_desktop:
            return False

        try:
            self._send_to_root(handle, self.session.atoms.wm_desktop, [self.session.current_desktop])
        except xlib_error.ConnectionClosedError:
            raise
        except Exception as exc:
            self.logger.warning(f"0x{handle:08x} - desktop change failed: {exc}")
            return False
        return True

    def request_close(self, handle: int) -> bool:
        """
        Send _NET_CLOSE_WINDOW for the window.

        :return: False when the window manager does not know the atom
        """
        if self.session.atoms.close_window == X.NONE:
            self.logger.info("  _NET_CLOSE_WINDOW not supported, close not requested")
            return False

        self._send_to_root(handle, self.session.atoms.close_window, [0])
        return True

    def _resolve_pid(self, handle: int, pattern: str) -> Optional[int]:
        pid = self.directory.owner_pid_of(handle)
        if pid:
            self.logger.info(f"  PID: {pid}")
            return pid

        self.logger.info("  _NET_WM_PID not set...")
        pid = find_pid_by_name(pattern)
        if pid:
            self.logger.info(f"  PID via /proc: {pid}")
            return pid

        self.logger.info("  Could not retrieve PID...")
        return None

    def handle_window(self, handle: int, window_class: Optional[WindowClass], pattern: str) -> MatchedWindow:
        """
        Act on a single matched window.

        :param handle: Window id
        :param window_class: Class string read for the window
        :param pattern: Pattern that matched
        :return: The recorded MatchedWindow
        """
        self.logger.info(f"0x{handle:08x} - {window_class if window_class else '(no WM_CLASS)'}")

        pid = self._resolve_pid(handle, pattern)

        self.subscribe(handle)
        if not self.dry_run:
            self.move_to_current_desktop(handle)
            self.request_close(handle)

        return MatchedWindow(handle=handle, pid=pid, pattern=pattern, window_class=window_class)

    def dispatch(self, handles: Iterable[int]) -> list[MatchedWindow]:
        """
        Match and act on windows in enumeration order.

        :param handles: Top-level window ids
        :return: Matched windows, empty when nothing matched
        """
        matched = []
        for handle in handles:
            window_class = self.directory.class_of(handle)
            pattern = self.matcher.match_pattern(window_class)
            if pattern is None:
                continue
            matched.append(self.handle_window(handle, window_class, pattern))

        if matched:
            self.session.display.flush()

        return matched
