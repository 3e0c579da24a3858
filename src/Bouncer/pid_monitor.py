"""
Liveness monitor for the processes owning matched windows.

Runs in a background thread while the event loop waits and reports when the
owning processes go away. It is purely informational and never affects how
long Bouncer waits.
"""
import logging
import threading
from typing import Iterable

from Bouncer.process_resolver import pid_exists

PID_POLLING_INTERVAL = 0.5


class PidMonitor:
    """
    Poll a fixed set of process ids until all are gone or the token is cancelled.

    One slot is tracked per matched window, so a process owning several
    windows occupies several slots.
    """

    def __init__(self, pids: Iterable[int], token, poll_interval=PID_POLLING_INTERVAL):
        """
        :param pids: Process ids to watch, zeros and None are ignored
        :param token: CancelToken shared with the event loop
        :param poll_interval: Seconds between probes
        """
        self.logger = logging.getLogger(__name__)
        self.pids = tuple(pid for pid in pids if pid)
        self.token = token
        self.poll_interval = poll_interval
        self.gone = [False] * len(self.pids)
        self.all_closed = False
        self.monitor_thread = None

    @property
    def remaining(self) -> int:
        return self.gone.count(False)

    def check_once(self) -> bool:
        """
        Probe every tracked process still considered alive.

        :return: True when every tracked process is gone
        """
        for i, pid in enumerate(self.pids):
            if self.gone[i]:
                continue
            if not pid_exists(pid):
                self.logger.info(f"PID {pid} closed")
                self.gone[i] = True

        if self.remaining == 0:
            self.all_closed = True
        return self.all_closed

    def _monitor_loop(self):
        """Main polling loop that runs in a separate thread."""
        if not self.pids:
            self.logger.debug("No processes to watch")
            return

        try:
            while not self.token.is_cancelled():
                if self.check_once():
                    self.logger.info("All processes closed.")
                    return
                self.token.wait(self.poll_interval)
        except Exception:
            self.logger.exception("Error in pid monitor")

    def start(self):
        """Start polling in a background thread."""
        if self.monitor_thread is not None:
            return

        self.monitor_thread = threading.Thread(target=self._monitor_loop, name="pid-monitor", daemon=True)
        self.monitor_thread.start()

    def join(self):
        """Wait for the polling thread to finish. Cancel the token first."""
        if self.monitor_thread is not None:
            self.monitor_thread.join()
