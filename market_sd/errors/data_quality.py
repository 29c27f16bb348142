"""
Schedule data quality error classifications.

These exceptions describe problems with schedule inputs (tokens, aggregated
rows, definition lines) that are handled by keeping the previous state.
"""

from typing import Optional, Dict, Any


class ScheduleDataError(Exception):
    """Base class for schedule data issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedTokenError(ScheduleDataError):
    """A schedule token yielded no usable trading window."""

    def __init__(self, message: str, token: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.token = token


class MissingScheduleError(ScheduleDataError):
    """No schedule source knows the venue key."""

    def __init__(self, message: str, tv_key: Optional[str] = None,
                 sources_tried: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.tv_key = tv_key
        self.sources_tried = sources_tried or []


class MalformedSourceLineError(ScheduleDataError):
    """A line of a schedule source file could not be interpreted."""

    def __init__(self, message: str, line: Optional[str] = None,
                 line_number: Optional[int] = None, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.line = line
        self.line_number = line_number
        self.source = source
