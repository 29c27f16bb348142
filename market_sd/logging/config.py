"""
Centralized logging configuration for the market state evaluator.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the system should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        log_file: Optional file that receives a copy of every log line
        extra_processors: Additional structlog processors to include
    """
    # Convert string level to logging constant
    log_level = getattr(logging, level.upper())

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    # Configure standard library logging
    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        format="%(message)s",  # structlog will handle formatting
        force=True
    )

    # Build processor chain
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Add timestamp if requested
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    # Add caller information if requested
    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    # Plain console output when a file copy is kept; colour codes do not belong in files
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=log_file is None))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for venue state changes.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with market-state audit context
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="market_state",
        audit_trail=True
    )


def log_state_change(
    logger: FilteringBoundLogger,
    market_id: str,
    from_state: Optional[bool],
    to_state: bool,
    source: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a venue OPEN/CLOSED change with standardized format.

    Args:
        logger: Structlog logger instance
        market_id: Market whose state changed
        from_state: Previous state, None if never recorded
        to_state: New state
        source: Which schedule source produced the decision
        context: Additional context data
    """
    bound_logger = logger.bind(
        market_id=market_id,
        from_state=state_label(from_state),
        to_state=state_label(to_state),
        source=source
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Market state changed")


def state_label(state: Optional[bool]) -> str:
    """Human label for a state value."""
    if state is None:
        return "UNKNOWN"
    return "OPEN" if state else "CLOSED"
