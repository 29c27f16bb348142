"""
Logging configuration and utilities for the market state evaluator.
"""
from .config import configure_logging, get_logger, get_state_logger, log_state_change

__all__ = ["configure_logging", "get_logger", "get_state_logger", "log_state_change"]
