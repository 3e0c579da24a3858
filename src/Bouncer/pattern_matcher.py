"""
Pattern matching of window class strings.
"""
from typing import Iterable, Optional

from Bouncer.Models import WindowClass


class PatternMatcher:
    """
    Decides whether a window belongs to the configured pattern set.

    A window matches when its instance name or its class name equals one of
    the patterns exactly. In all-windows mode every window matches and the
    returned display pattern is the window's instance name.
    """

    def __init__(self, patterns: Iterable[str] = (), all_windows: bool = False):
        self.patterns = tuple(patterns)
        self.all_windows = all_windows

    def match_pattern(self, window_class: Optional[WindowClass]) -> Optional[str]:
        """
        Return the pattern that accepts the window.

        :param window_class: Class string of the window, None if unreadable
        :return: First matching pattern in configured order, or None
        """
        if self.all_windows:
            return window_class.instance if window_class else ""

        if window_class is None:
            return None

        for pattern in self.patterns:
            if pattern == window_class.instance or pattern == window_class.class_name:
                return pattern

        return None

    def matches(self, window_class: Optional[WindowClass]) -> bool:
        return self.match_pattern(window_class) is not None

    def __bool__(self) -> bool:
        return self.all_windows or bool(self.patterns)
