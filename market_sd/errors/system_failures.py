"""
System failure error classifications.

These exceptions represent failures of the run itself (files that cannot be
written, invalid configuration) rather than problems with one venue's data.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Previous-state file could not be read or written."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class OutputWriteError(SystemFailureError):
    """Monitoring output could not be written."""

    def __init__(self, message: str, output_path: Optional[str] = None,
                 market_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.output_path = output_path
        self.market_id = market_id


class ConfigurationError(SystemFailureError):
    """Configuration is missing or invalid."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
