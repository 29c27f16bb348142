"""
Error classification system for venue state evaluation.

Structured exception hierarchy for schedule data problems, run-level system
failures, and degradations that fall back to the previous state.
"""

from .data_quality import (
    ScheduleDataError,
    MalformedTokenError,
    MissingScheduleError,
    MalformedSourceLineError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    OutputWriteError,
    ConfigurationError,
)
from .recovery import (
    GracefulDegradationError,
    CalendarLookupError,
)

__all__ = [
    # Schedule Data Errors
    "ScheduleDataError",
    "MalformedTokenError",
    "MissingScheduleError",
    "MalformedSourceLineError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "OutputWriteError",
    "ConfigurationError",
    # Recovery Categories
    "GracefulDegradationError",
    "CalendarLookupError",
]
