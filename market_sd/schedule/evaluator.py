"""Interval evaluation: is a UTC instant inside any trading window?"""

from collections.abc import Sequence
from datetime import datetime, time
from typing import Union

from ..utils.time import utc_time_of_day
from .models import TimeInterval

Instant = Union[datetime, time]


def is_trading(intervals: Sequence[TimeInterval], instant: Instant) -> bool:
    """
    Check whether an instant falls inside any of the given intervals.

    An empty sequence is never trading. Callers that need to tell "no windows"
    apart from "token failed to parse" must do so before calling.

    Args:
        intervals: Parsed schedule definition
        instant: UTC datetime (aware values are converted) or time-of-day

    Returns:
        True if any interval contains the instant's UTC time-of-day
    """
    if not intervals:
        return False
    moment = instant if isinstance(instant, time) else utc_time_of_day(instant)
    return any(interval.contains(moment) for interval in intervals)


class TokenSessionOracle:
    """SessionTradingOracle backed by a parsed schedule definition."""

    def __init__(self, intervals: Sequence[TimeInterval]):
        self.intervals = tuple(intervals)

    def is_trading_session(self, instant: datetime) -> bool:
        return is_trading(self.intervals, instant)

    def __repr__(self) -> str:
        windows = ", ".join(iv.describe() for iv in self.intervals)
        return f"TokenSessionOracle([{windows}])"
