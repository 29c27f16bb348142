"""
Hysteresis state machine for OPEN/CLOSED decisions.

The market is sampled at ``now + grace`` and ``now - grace``. Inside the
resulting edge band around an open or close boundary the decision sticks to
the previous state, so sampling jitter near a boundary cannot flap the state.

States are plain booleans (True = OPEN). Every function here is pure: previous
state comes in as an argument and the next state is the return value.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

from .evaluator import is_trading
from .grammar import parse_token
from .models import GRACE, DayTradingOracle, SessionTradingOracle, TimeInterval


def _held(previous: Optional[bool]) -> bool:
    return previous if previous is not None else False


def next_state(
    intervals: Sequence[TimeInterval],
    now: datetime,
    previous: Optional[bool],
    *,
    day_trading: Optional[bool] = None,
    grace: timedelta = GRACE
) -> bool:
    """
    Compute the next OPEN/CLOSED state from a parsed schedule definition.

    Args:
        intervals: Parsed schedule definition (empty means no usable data)
        now: Current UTC instant
        previous: Last known state, None if never recorded
        day_trading: Optional day-level signal; False forces CLOSED
        grace: Half-width of the edge band

    Returns:
        True for OPEN, False for CLOSED
    """
    if day_trading is False:
        return False

    # Fail-safe: missing or malformed data never changes state
    if not intervals:
        return _held(previous)

    if is_trading(intervals, now + grace):
        return True
    if not is_trading(intervals, now - grace):
        return False
    return _held(previous)


def compute_state(
    day_oracle: Optional[DayTradingOracle],
    session_oracle: SessionTradingOracle,
    now: datetime,
    previous: Optional[bool],
    *,
    grace: timedelta = GRACE
) -> bool:
    """
    Compute the next state from the two capability interfaces.

    Same algorithm as next_state, with the session samples taken from an
    oracle instead of parsed intervals. Used for live calendar lookups.

    Args:
        day_oracle: Day-level signal source, None to skip the holiday check
        session_oracle: Session-level signal source
        now: Current UTC instant
        previous: Last known state, None if never recorded
        grace: Half-width of the edge band

    Returns:
        True for OPEN, False for CLOSED
    """
    if day_oracle is not None and not day_oracle.is_trading_day(now):
        return False

    if session_oracle.is_trading_session(now + grace):
        return True
    if not session_oracle.is_trading_session(now - grace):
        return False
    return _held(previous)


def state_from_token(
    token: Optional[str],
    now: datetime,
    previous: Optional[bool],
    *,
    grace: timedelta = GRACE
) -> bool:
    """Parse a token and compute the next state from it."""
    return next_state(parse_token(token), now, previous, grace=grace)
