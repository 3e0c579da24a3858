"""
Cooperative cancellation shared between the event loop and the pid monitor.

A CancelToken carries a deadline and records why the run was stopped. The
read end of its wakeup pipe can be passed to ``select`` so that cancelling
from a signal handler or another thread unblocks a waiting loop.
"""
import logging
import os
import threading
import time
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class StopReason(Enum):
    TIMEOUT = "timeout"
    INTERRUPT = "interrupt"
    FINISHED = "finished"


class CancelToken:
    """One-shot stop flag with a deadline and a selectable wakeup descriptor."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._reason: Optional[StopReason] = None
        self._deadline: Optional[float] = None
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        os.set_blocking(self._write_fd, False)

    @property
    def reason(self) -> Optional[StopReason]:
        return self._reason

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: StopReason) -> bool:
        """
        Request a stop. Only the first reason is kept.

        :param reason: Why the run is stopping
        :return: True if this call set the reason
        """
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
            self._event.set()

        if self._write_fd is not None:
            try:
                os.write(self._write_fd, b"\0")
            except (BlockingIOError, OSError) as exc:
                logger.debug(f"Wakeup pipe write failed: {exc}")
        return True

    def arm(self, timeout: float) -> None:
        """Set the deadline ``timeout`` seconds from now. Zero is already due."""
        self._deadline = time.monotonic() + max(timeout, 0)

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, None when no deadline is armed."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def expire_if_due(self) -> bool:
        """Record TIMEOUT once the deadline has passed."""
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            self.cancel(StopReason.TIMEOUT)
        return self.is_cancelled()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; True if cancelled."""
        return self._event.wait(timeout)

    def fileno(self) -> int:
        return self._read_fd

    def drain(self) -> None:
        """Empty the wakeup pipe so it only becomes readable on the next wakeup."""
        if self._read_fd is None:
            return
        while True:
            try:
                if not os.read(self._read_fd, 512):
                    return
            except BlockingIOError:
                return

    @property
    def wakeup_fd(self) -> int:
        """Write end of the pipe, suitable for signal.set_wakeup_fd."""
        return self._write_fd

    def close(self) -> None:
        for fd in (self._read_fd, self._write_fd):
            if fd is not None:
                try:
                    os.close(fd)
                except OSError as exc:
                    logger.debug(f"Closing wakeup pipe failed: {exc}")
        self._read_fd = self._write_fd = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
