import random

import pytest

from Bouncer.Models import WindowClass
from Bouncer.pattern_matcher import PatternMatcher

WINDOWS = [
    WindowClass("xterm", "XTerm"),
    WindowClass("navigator", "Firefox"),
    WindowClass("konsole", "konsole"),
    WindowClass("gimp", "Gimp-2.10"),
    WindowClass("term", "Terminal"),
]


class TestPatternMatcher:

    def test_matches_instance_name(self):
        matcher = PatternMatcher(["xterm"])
        assert matcher.match_pattern(WindowClass("xterm", "XTerm")) == "xterm"

    def test_matches_class_name(self):
        matcher = PatternMatcher(["Firefox"])
        assert matcher.matches(WindowClass("navigator", "Firefox"))

    def test_exact_and_case_sensitive(self):
        matcher = PatternMatcher(["firefox", "Fire", "Firefox2"])
        assert not matcher.matches(WindowClass("navigator", "Firefox"))

    def test_no_class_string_never_matches(self):
        matcher = PatternMatcher(["xterm"])
        assert matcher.match_pattern(None) is None

    def test_first_pattern_in_order_wins(self):
        matcher = PatternMatcher(["XTerm", "xterm"])
        assert matcher.match_pattern(WindowClass("xterm", "XTerm")) == "XTerm"

    def test_all_windows_matches_everything(self):
        matcher = PatternMatcher([], all_windows=True)
        for wc in WINDOWS:
            assert matcher.match_pattern(wc) == wc.instance
        assert matcher.match_pattern(None) == ""

    @pytest.mark.parametrize("patterns", [
        ["Terminal", "xterm"],
        ["xterm", "xterm", "Terminal"],
        ["nothing"],
        [],
        ["Gimp-2.10", "konsole", "navigator"],
    ])
    def test_matched_set_independent_of_order_and_duplicates(self, patterns):
        expected = {wc for wc in WINDOWS if wc.instance in patterns or wc.class_name in patterns}

        shuffled = list(patterns) * 2
        random.Random(4).shuffle(shuffled)

        for candidate in (patterns, shuffled):
            matcher = PatternMatcher(candidate)
            assert {wc for wc in WINDOWS if matcher.matches(wc)} == expected

    def test_bool(self):
        assert not PatternMatcher([])
        assert PatternMatcher(["x"])
        assert PatternMatcher([], all_windows=True)
