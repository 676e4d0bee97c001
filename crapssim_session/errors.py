from __future__ import annotations

from typing import List, Optional


class CrapsSessionError(Exception):
    """Base class for session engine errors."""


class ConfigurationError(CrapsSessionError):
    """Raised when a session is started from (or loaded as) an invalid configuration."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        super().__init__(message or "; ".join(errors))
        self.errors = list(errors)


class InvalidPointError(CrapsSessionError, ValueError):
    """Raised when a payout or sizing rule is asked about a number that is not a box number."""

    def __init__(self, point: object, context: str = "point"):
        super().__init__(f"Unexpected {context} value: {point!r}")
        self.point = point


class DiceSequenceExhausted(CrapsSessionError, IndexError):
    """Raised when a replayed dice sequence has no rolls left."""
