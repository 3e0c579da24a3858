__version__ = "1.0.0"

from .Models import LoopResult, LoopState, MatchedWindow, Options, WindowClass
from .bouncer import Bouncer
from .config_loader import ConfigLoader, ConfigValidationError
from .pattern_matcher import PatternMatcher
from .session import SessionConnection, SessionConnectionError

__all__ = [
    'Bouncer', 'Options', 'WindowClass', 'MatchedWindow', 'LoopState', 'LoopResult',
    'PatternMatcher', 'SessionConnection', 'SessionConnectionError',
    'ConfigLoader', 'ConfigValidationError',
]
