"""
Live trading-calendar collaborator interface.

The calendar is the last-resort schedule source. It answers day-level and
session-level trading questions directly for a venue key; its adapters turn
it into the two oracles the hysteresis step consumes.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class TradingCalendar(Protocol):
    """A trading-calendar service keyed by venue."""

    def is_trading_day(self, tv_key: str, instant: datetime) -> bool:
        ...

    def is_trading_session(self, tv_key: str, instant: datetime) -> bool:
        ...


class CalendarDayOracle:
    """DayTradingOracle for one venue of a TradingCalendar."""

    def __init__(self, calendar: TradingCalendar, tv_key: str):
        self.calendar = calendar
        self.tv_key = tv_key

    def is_trading_day(self, instant: datetime) -> bool:
        return self.calendar.is_trading_day(self.tv_key, instant)


class CalendarSessionOracle:
    """SessionTradingOracle for one venue of a TradingCalendar."""

    def __init__(self, calendar: TradingCalendar, tv_key: str):
        self.calendar = calendar
        self.tv_key = tv_key

    def is_trading_session(self, instant: datetime) -> bool:
        return self.calendar.is_trading_session(self.tv_key, instant)
