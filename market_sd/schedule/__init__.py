"""
Schedule token parsing, interval evaluation and hysteresis.

Pure, synchronous functions: no I/O, no shared state. Everything a decision
depends on (token or intervals, instant, previous state) is passed in.
"""

from .evaluator import TokenSessionOracle, is_trading
from .extractor import extract_token
from .grammar import parse_token, scan_fragments
from .hysteresis import compute_state, next_state, state_from_token
from .models import (
    ALWAYS_OPEN_TOKEN,
    GRACE,
    DayTradingOracle,
    FragmentKind,
    SessionTradingOracle,
    TimeInterval,
    TokenFragment,
)

__all__ = [
    "ALWAYS_OPEN_TOKEN",
    "GRACE",
    "DayTradingOracle",
    "FragmentKind",
    "SessionTradingOracle",
    "TimeInterval",
    "TokenFragment",
    "TokenSessionOracle",
    "compute_state",
    "extract_token",
    "is_trading",
    "next_state",
    "parse_token",
    "scan_fragments",
    "state_from_token",
]
