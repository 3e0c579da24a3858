"""
Data models for Bouncer.

This module contains the dataclass definitions shared by the window
directory, the pattern matcher, the action dispatcher and the event loop.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class WindowClass:
    """
    Two-part WM_CLASS identifier of a window.

    Attributes:
        instance: The instance name (first NUL-terminated string)
        class_name: The class name (second NUL-terminated string)
    """
    instance: str
    class_name: str

    @classmethod
    def from_property(cls, raw) -> "WindowClass":
        """
        Build a WindowClass from a raw WM_CLASS property value.

        The value holds two NUL-terminated strings back to back. A missing
        second component becomes an empty string.

        :param raw: Property value as bytes or str
        :return: WindowClass with both components decoded
        """
        if isinstance(raw, bytes):
            raw = raw.decode("latin-1")
        parts = raw.split("\0")
        instance = parts[0]
        class_name = parts[1] if len(parts) > 1 else ""
        return cls(instance, class_name)

    def __str__(self) -> str:
        return f'"{self.instance}" "{self.class_name}"'


@dataclass
class MatchedWindow:
    """
    A window accepted by the pattern matcher.

    Attributes:
        handle: X11 window id, valid for the lifetime of the session
        pid: Owning process id, None when unknown
        pattern: Pattern that matched, or the instance name in all-windows mode
        window_class: Class string read from the window, if any
    """
    handle: int
    pid: Optional[int] = None
    pattern: str = ""
    window_class: Optional[WindowClass] = None


@dataclass(frozen=True)
class SessionAtoms:
    """Resolved protocol atoms. Zero means the atom does not exist on the server."""
    client_list: int = 0
    wm_pid: int = 0
    close_window: int = 0
    current_desktop: int = 0
    wm_desktop: int = 0


class LoopState(Enum):
    RUNNING = "running"
    DONE = "done"
    TIMED_OUT = "timed_out"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


@dataclass
class LoopResult:
    """
    Outcome of a destruction wait.

    Attributes:
        state: Terminal state of the loop
        outstanding: Matched windows not yet confirmed destroyed
    """
    state: LoopState
    outstanding: int

    @property
    def exit_code(self) -> int:
        return 1 if self.state is LoopState.FAILED else 0


@dataclass
class Options:
    """
    Everything the command line and configuration file hand to the core.

    Attributes:
        patterns: Match patterns in configured order
        all_windows: Affect every top-level window, ignoring patterns
        dry_run: Detect and track windows without sending any request
        verbose: Emit progress messages
        timeout: Seconds to wait for the windows to disappear
        display_name: X display to connect to, None for $DISPLAY
    """
    patterns: list[str] = field(default_factory=list)
    all_windows: bool = False
    dry_run: bool = False
    verbose: bool = False
    timeout: int = DEFAULT_TIMEOUT
    display_name: Optional[str] = None
