import os
import select
import signal
import threading
import time
from unittest.mock import MagicMock, patch

import pytest
from Xlib import error as xlib_error

from Bouncer.Models import LoopState
from Bouncer.cancellation import StopReason
from Bouncer.event_loop import EventLoop

from conftest import destroy_event, unmap_event


class TestEventLoop:

    def test_done_when_all_destroyed(self, fake_display, token):
        fake_display.events = [destroy_event(0x1), destroy_event(0x2)]
        loop = EventLoop(fake_display, [0x1, 0x2], token, timeout=60)

        result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.DONE
        assert result.outstanding == 0
        assert result.exit_code == 0

    def test_stops_as_soon_as_count_reaches_zero(self, fake_display, token):
        fake_display.events = [destroy_event(0x1), unmap_event(0x5)]
        loop = EventLoop(fake_display, [0x1], token, timeout=60)

        assert loop.run(install_signal_handlers=False).state is LoopState.DONE
        assert len(fake_display.events) == 1

    def test_untracked_and_other_events_ignored(self, fake_display, token):
        fake_display.events = [
            destroy_event(0x99),
            unmap_event(0x1),
            destroy_event(0x1),
            destroy_event(0x1),
        ]
        loop = EventLoop(fake_display, [0x1, 0x2], token, timeout=0)

        result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.TIMED_OUT
        assert result.outstanding == 1

    def test_handle_event_counts(self, fake_display, token):
        loop = EventLoop(fake_display, [0x1, 0x2], token, timeout=0)
        assert loop.outstanding == 2
        assert not loop.handle_event(destroy_event(0x3))
        assert loop.handle_event(destroy_event(0x2))
        assert not loop.handle_event(destroy_event(0x2))
        assert loop.outstanding == 1

    def test_times_out(self, fake_display, token):
        loop = EventLoop(fake_display, [0x1], token, timeout=0.2)

        start = time.monotonic()
        result = loop.run(install_signal_handlers=False)

        assert time.monotonic() - start >= 0.15
        assert result.state is LoopState.TIMED_OUT
        assert result.outstanding == 1
        assert result.exit_code == 0
        assert token.reason is StopReason.TIMEOUT

    def test_interrupted_before_start(self, fake_display, token):
        token.cancel(StopReason.INTERRUPT)
        loop = EventLoop(fake_display, [0x1], token, timeout=60)

        result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.INTERRUPTED
        assert result.exit_code == 0

    def test_cancel_wakes_blocking_wait(self, fake_display, token):
        loop = EventLoop(fake_display, [0x1], token, timeout=30)
        timer = threading.Timer(0.1, token.cancel, args=(StopReason.INTERRUPT,))
        timer.start()

        start = time.monotonic()
        result = loop.run(install_signal_handlers=False)
        timer.join()

        assert time.monotonic() - start < 5
        assert result.state is LoopState.INTERRUPTED
        assert result.outstanding == 1

    def test_event_arrival_wakes_wait(self, fake_display, token):
        loop = EventLoop(fake_display, [0x1], token, timeout=30)

        def deliver():
            fake_display.events.append(destroy_event(0x1))
            os.write(fake_display._write_fd, b"x")

        timer = threading.Timer(0.1, deliver)
        timer.start()
        result = loop.run(install_signal_handlers=False)
        timer.join()

        assert result.state is LoopState.DONE

    def test_sigint_interrupts(self, fake_display, token):
        loop = EventLoop(fake_display, [0x1], token, timeout=30)
        previous = signal.getsignal(signal.SIGINT)
        timer = threading.Timer(0.1, signal.pthread_kill, args=(threading.main_thread().ident, signal.SIGINT))
        timer.start()

        result = loop.run(install_signal_handlers=True)
        timer.join()

        assert result.state is LoopState.INTERRUPTED
        assert token.reason is StopReason.INTERRUPT
        assert signal.getsignal(signal.SIGINT) is previous

    def test_select_failure(self, token):
        display = MagicMock()
        display.pending_events.return_value = 0
        display.fileno.return_value = -1
        loop = EventLoop(display, [0x1], token, timeout=30)

        result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.FAILED
        assert result.exit_code == 1
        assert result.outstanding == 1

    def test_connection_lost(self, token):
        display = MagicMock()
        display.pending_events.return_value = 1
        display.next_event.side_effect = xlib_error.ConnectionClosedError("server")
        loop = EventLoop(display, [0x1], token, timeout=30)

        result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.FAILED
        assert result.exit_code == 1

    @pytest.mark.parametrize("timeout", [0, 0.0])
    def test_zero_timeout_still_drains_queue(self, fake_display, token, timeout):
        fake_display.events = [destroy_event(0x1)]
        loop = EventLoop(fake_display, [0x1], token, timeout=timeout)
        assert loop.run(install_signal_handlers=False).state is LoopState.DONE

    def test_stray_wakeup_does_not_spin(self, fake_display, token):
        # a signal caught by the wakeup fd writes a byte without cancelling
        os.write(token.wakeup_fd, b"\x11")
        loop = EventLoop(fake_display, [0x1], token, timeout=0.3)

        with patch('Bouncer.event_loop.select.select', wraps=select.select) as spy:
            result = loop.run(install_signal_handlers=False)

        assert result.state is LoopState.TIMED_OUT
        assert spy.call_count <= 3
