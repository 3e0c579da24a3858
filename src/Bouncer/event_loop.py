"""
Timeout-bounded wait for window destruction.

The loop drains queued X events, counts DestroyNotify for tracked windows,
and otherwise blocks in select() on the display connection and the cancel
token's wakeup pipe until data arrives, the deadline passes, or SIGINT /
SIGTERM is received.
"""
import logging
import select
import signal
import threading
from contextlib import contextmanager
from typing import Iterable

from Xlib import X
from Xlib import error as xlib_error

from Bouncer.Models import LoopResult, LoopState
from Bouncer.cancellation import StopReason

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class EventLoop:
    """
    Wait until every tracked window is destroyed.

    :param display: Xlib display the windows were subscribed on
    :param handles: Ids of the matched windows
    :param token: CancelToken carrying the deadline and stop reason
    :param timeout: Seconds before giving up; zero expires immediately
    """

    def __init__(self, display, handles: Iterable[int], token, timeout: float):
        self.display = display
        self.pending = set(handles)
        self.outstanding = len(self.pending)
        self.token = token
        self.timeout = timeout
        self.state = LoopState.RUNNING

    def _on_signal(self, signum, frame):
        logger.debug(f"Received {signal.Signals(signum).name}")
        self.token.cancel(StopReason.INTERRUPT)

    @contextmanager
    def _signal_handlers(self, install: bool):
        if not install or threading.current_thread() is not threading.main_thread():
            yield
            return

        previous = {signum: signal.signal(signum, self._on_signal) for signum in HANDLED_SIGNALS}
        # signals caught on another thread still wake the select below
        previous_fd = signal.set_wakeup_fd(self.token.wakeup_fd)
        try:
            yield
        finally:
            signal.set_wakeup_fd(previous_fd)
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def handle_event(self, event) -> bool:
        """
        Account for one X event.

        :param event: Event read from the display
        :return: True if it confirmed the destruction of a tracked window
        """
        if event.type != X.DestroyNotify:
            return False

        handle = event.window.id
        if handle not in self.pending:
            return False

        self.pending.discard(handle)
        self.outstanding -= 1
        logger.info(f"0x{handle:08x} closed...")
        return True

    def _drain(self) -> bool:
        """Process every queued event; True once nothing is outstanding."""
        while self.display.pending_events():
            self.handle_event(self.display.next_event())
            if self.outstanding == 0:
                return True
        return self.outstanding == 0

    def _stopped_state(self) -> LoopState:
        if self.token.reason is StopReason.TIMEOUT:
            logger.info("Timeout reached. Exiting...")
            return LoopState.TIMED_OUT

        logger.info("Interrupted. Exiting...")
        return LoopState.INTERRUPTED

    def _wait_readable(self) -> None:
        wakeup_fd = self.token.fileno()
        readable, _, _ = select.select([self.display.fileno(), wakeup_fd], [], [], self.token.remaining())
        if wakeup_fd in readable:
            self.token.drain()

    def run(self, install_signal_handlers: bool = True) -> LoopResult:
        """
        Run until DONE, TIMED_OUT, INTERRUPTED or FAILED.

        :param install_signal_handlers: Route SIGINT/SIGTERM to the token
            (only possible on the main thread)
        :return: LoopResult with the terminal state and outstanding count
        """
        self.token.arm(self.timeout)

        with self._signal_handlers(install_signal_handlers):
            try:
                while True:
                    if self._drain():
                        logger.info("All windows closed.")
                        self.state = LoopState.DONE
                        break

                    if self.token.expire_if_due():
                        self.state = self._stopped_state()
                        break

                    self._wait_readable()
            except (OSError, ValueError) as exc:
                logger.error(f"select(): {exc}")
                self.state = LoopState.FAILED
            except xlib_error.ConnectionClosedError as exc:
                logger.error(f"Connection to X server lost: {exc}")
                self.state = LoopState.FAILED

        return LoopResult(self.state, self.outstanding)
