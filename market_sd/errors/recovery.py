"""
Recovery strategy classifications for error handling.

These help categorize errors by their recovery characteristics and guide
the fallback strategy of the resolution policy.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class CalendarLookupError(GracefulDegradationError):
    """Live trading-calendar lookup failed; the previous state is kept."""

    def __init__(self, message: str, tv_key: Optional[str] = None, **kwargs):
        kwargs.setdefault("degraded_functionality", "calendar_lookup")
        kwargs.setdefault("fallback_strategy", "previous_state")
        super().__init__(message, **kwargs)
        self.tv_key = tv_key
