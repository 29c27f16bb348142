"""
Schedule data models for trading-window evaluation.

This module defines the immutable structures produced by the token scanner
and parser, plus the capability interfaces the hysteresis step consumes.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

# Look-ahead / look-behind around "now"; the edge band is 2 * GRACE wide
GRACE = timedelta(minutes=5)

ALWAYS_OPEN_TOKEN = "0000+0000"
MIDNIGHT = time(0, 0)


class FragmentKind(str, Enum):
    """Kinds of fragment recognised by the token scanner."""
    MARKER_WINDOW = "marker_window"        # p/r/a + HHMMHHMM
    OVERNIGHT_WINDOW = "overnight_window"  # - + HHMMHHMM
    PLAIN_WINDOW = "plain_window"          # bare HHMMHHMM chunk
    SKIP = "skip"                          # anything else


@dataclass(frozen=True)
class TokenFragment:
    """One scanner result: a recognised window or a skipped character."""

    kind: FragmentKind
    text: str
    position: int
    start: Optional[str] = None   # HHMM, None for SKIP
    end: Optional[str] = None     # HHMM, None for SKIP

    @property
    def is_window(self) -> bool:
        return self.kind is not FragmentKind.SKIP


@dataclass(frozen=True)
class TimeInterval:
    """
    A single trading window in UTC time-of-day.

    Semantics:
    - all_day: always trading (start == end == 00:00)
    - overnight: trading when time >= start or time < end
    - otherwise: trading when start <= time < end
    """

    start: time
    end: time
    overnight: bool = False
    all_day: bool = False

    @classmethod
    def always(cls) -> "TimeInterval":
        """Create the all-day sentinel interval."""
        return cls(start=MIDNIGHT, end=MIDNIGHT, overnight=True, all_day=True)

    def contains(self, moment: time) -> bool:
        """Check whether a UTC time-of-day falls inside this window."""
        if self.all_day:
            return True
        if self.overnight:
            if self.start == self.end:
                return True
            return moment >= self.start or moment < self.end
        return self.start <= moment < self.end

    def describe(self) -> str:
        if self.all_day:
            return "all-day"
        suffix = " (overnight)" if self.overnight else ""
        return f"{self.start:%H:%M}-{self.end:%H:%M}{suffix}"


@runtime_checkable
class DayTradingOracle(Protocol):
    """Answers whether the day containing an instant is a trading day."""

    def is_trading_day(self, instant: datetime) -> bool:
        ...


@runtime_checkable
class SessionTradingOracle(Protocol):
    """Answers whether an instant falls inside a trading session."""

    def is_trading_session(self, instant: datetime) -> bool:
        ...
