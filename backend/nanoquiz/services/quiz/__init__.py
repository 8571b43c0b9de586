"""Quiz domain services: validation, scoring, rate limiting, timers, sessions.

Nothing here imports Flask. Socket handlers and HTTP routes call into
these modules, keeping transport concerns separated from the session
state machine.
"""

from .ratelimit import SlidingWindowRateLimiter
from .registry import SessionRegistry
from .session import Session
from .validator import parse_quiz, sanitize_name, validate_quiz

__all__ = [
    'SlidingWindowRateLimiter',
    'SessionRegistry',
    'Session',
    'parse_quiz',
    'sanitize_name',
    'validate_quiz',
]
