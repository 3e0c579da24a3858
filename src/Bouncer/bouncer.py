"""
Coordinator tying the session, matcher, dispatcher, pid monitor and event
loop together for one run.
"""
import logging

from Xlib import error as xlib_error

from Bouncer.Models import LoopResult, LoopState, Options
from Bouncer.actions import ActionDispatcher
from Bouncer.cancellation import CancelToken, StopReason
from Bouncer.event_loop import EventLoop
from Bouncer.pattern_matcher import PatternMatcher
from Bouncer.pid_monitor import PidMonitor
from Bouncer.session import SessionConnection, SessionConnectionError
from Bouncer.window_utils import WindowDirectory


class Bouncer:
    """
    One-shot run: close matching windows and wait for them to go away.

    Patterns, tracked windows and the cancel token live on this object so
    several runs can coexist in one process.
    """

    def __init__(self, options: Options, install_signal_handlers: bool = True):
        self.logger = logging.getLogger(__name__)
        self.options = options
        self.install_signal_handlers = install_signal_handlers
        self.matcher = PatternMatcher(options.patterns, all_windows=options.all_windows)
        self.token = None
        self.matched = []
        self.result = None

    def run(self) -> int:
        """
        Execute the run.

        :return: Process exit code
        """
        try:
            session = SessionConnection.open(self.options.display_name)
        except SessionConnectionError as e:
            self.logger.error(f"{e}")
            return 1

        self.token = CancelToken()
        try:
            return self._run_session(session)
        except xlib_error.ConnectionClosedError as e:
            self.logger.error(f"Connection to X server lost: {e}")
            return 1
        finally:
            session.close()
            self.token.close()

    def _run_session(self, session) -> int:
        directory = WindowDirectory(session)
        dispatcher = ActionDispatcher(session, directory, self.matcher, dry_run=self.options.dry_run)

        self.matched = dispatcher.dispatch(directory.list_top_level_windows())

        if not self.matched:
            self.logger.info("No windows found. Exiting...")
            self.result = LoopResult(LoopState.DONE, 0)
            return 0

        monitor = PidMonitor([window.pid for window in self.matched], self.token)
        monitor.start()

        loop = EventLoop(
            session.display,
            [window.handle for window in self.matched],
            self.token,
            self.options.timeout,
        )
        try:
            self.result = loop.run(install_signal_handlers=self.install_signal_handlers)
        finally:
            self.token.cancel(StopReason.FINISHED)
            monitor.join()

        self.logger.info("Exiting...")
        return self.result.exit_code
