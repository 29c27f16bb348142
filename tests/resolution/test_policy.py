"""Tests for the resolution policy fallback chain."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import Mock

from market_sd.data.models import MarketConfig, TokenSource
from market_sd.errors import CalendarLookupError, MalformedTokenError, MissingScheduleError
from market_sd.resolution.calendar import CalendarDayOracle, CalendarSessionOracle, TradingCalendar
from market_sd.resolution.policy import ResolutionPolicy
from market_sd.schedule.vectors import count_transitions, state_vector

NYSE = MarketConfig(id="NYSE", tv_key="tv.XNYS", item_key="NYSE_market_state")


def _utc(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 1, 5, hour, minute, tzinfo=timezone.utc)


class _Calendar:
    """Calendar with a fixed session and optional holiday."""

    def __init__(self, open_hour: int = 9, close_hour: int = 17, holiday: bool = False):
        self.open_hour = open_hour
        self.close_hour = close_hour
        self.holiday = holiday

    def is_trading_day(self, tv_key: str, instant: datetime) -> bool:
        return not self.holiday

    def is_trading_session(self, tv_key: str, instant: datetime) -> bool:
        return self.open_hour <= instant.hour < self.close_hour


class TestTokenFor:
    """Test suite for token source precedence."""

    def test_aggregated_wins(self) -> None:
        policy = ResolutionPolicy({"tv.XNYS": "09301600"}, {"tv.XNYS": "08001700"})

        assert policy.token_for(NYSE) == ("09301600", TokenSource.AGGREGATED)

    def test_definition_used_second(self) -> None:
        policy = ResolutionPolicy({}, {"tv.XNYS": "08001700"})

        assert policy.token_for(NYSE) == ("08001700", TokenSource.DEFINITION)

    def test_blank_definition_ignored(self) -> None:
        policy = ResolutionPolicy({}, {"tv.XNYS": "  "})

        assert policy.token_for(NYSE) == (None, None)


class TestResolve:
    """Test suite for ResolutionPolicy.resolve."""

    def test_aggregated_token(self) -> None:
        resolution = ResolutionPolicy({"tv.XNYS": "09301600"}, {}).resolve(NYSE, _utc(12), False)

        assert resolution.state is True
        assert resolution.value == 1
        assert resolution.source is TokenSource.AGGREGATED
        assert resolution.token == "09301600"
        assert resolution.error is None

    def test_definition_token(self) -> None:
        resolution = ResolutionPolicy({}, {"tv.XNYS": "09301600"}).resolve(NYSE, _utc(18), True)

        assert resolution.state is False
        assert resolution.source is TokenSource.DEFINITION

    def test_aggregated_token_hides_calendar(self) -> None:
        """Test a known token never consults the calendar."""
        calendar = Mock(spec=["is_trading_day", "is_trading_session"])
        policy = ResolutionPolicy({"tv.XNYS": "09301600"}, {}, calendar)

        policy.resolve(NYSE, _utc(12), None)

        calendar.is_trading_day.assert_not_called()
        calendar.is_trading_session.assert_not_called()

    @pytest.mark.parametrize("previous,expected", [(True, True), (False, False), (None, False)])
    def test_malformed_token_holds_previous(self, previous, expected) -> None:
        """Test a token with no windows keeps the previous state and records why."""
        resolution = ResolutionPolicy({"tv.XNYS": "garbage"}, {}).resolve(NYSE, _utc(12), previous)

        assert resolution.state is expected
        assert resolution.source is TokenSource.AGGREGATED
        assert isinstance(resolution.error, MalformedTokenError)
        assert resolution.error.token == "garbage"

    def test_calendar_lookup(self) -> None:
        policy = ResolutionPolicy({}, {}, _Calendar())

        resolution = policy.resolve(NYSE, _utc(12), False)

        assert resolution.state is True
        assert resolution.source is TokenSource.CALENDAR

    def test_calendar_holiday(self) -> None:
        policy = ResolutionPolicy({}, {}, _Calendar(holiday=True))

        assert policy.resolve(NYSE, _utc(12), True).state is False

    def test_calendar_failure_holds_previous(self) -> None:
        """Test calendar exceptions fall back to the previous state."""
        calendar = Mock(spec=["is_trading_day", "is_trading_session"])
        calendar.is_trading_day.side_effect = TimeoutError("calendar down")
        policy = ResolutionPolicy({}, {}, calendar)

        resolution = policy.resolve(NYSE, _utc(12), True)

        assert resolution.state is True
        assert resolution.source is TokenSource.FALLBACK
        assert isinstance(resolution.error, CalendarLookupError)
        assert resolution.error.fallback_strategy == "previous_state"
        assert resolution.error.tv_key == "tv.XNYS"

    @pytest.mark.parametrize("previous,expected", [(True, True), (None, False)])
    def test_no_source(self, previous, expected) -> None:
        """Test an unknown venue with no calendar keeps its previous state."""
        resolution = ResolutionPolicy({}, {}).resolve(NYSE, _utc(12), previous)

        assert resolution.state is expected
        assert resolution.source is TokenSource.FALLBACK
        assert isinstance(resolution.error, MissingScheduleError)
        assert resolution.error.sources_tried == ["aggregated", "definition"]


class TestMinuteStep:
    """Test suite for per-minute steps."""

    def test_token_step(self) -> None:
        step = ResolutionPolicy({"tv.XNYS": "09301600"}, {}).minute_step(NYSE)

        assert step(_utc(9, 25), False) is True
        assert step(_utc(16, 3), True) is True
        assert step(_utc(16, 5), True) is False

    def test_calendar_step(self) -> None:
        step = ResolutionPolicy({}, {}, _Calendar(open_hour=10, close_hour=14)).minute_step(NYSE)

        states = [s for _, s in state_vector(step, date(2026, 1, 5))]
        assert count_transitions(states) == 2
        assert states.index(True) == 9 * 60 + 55

    def test_calendar_step_failure_holds(self) -> None:
        calendar = Mock(spec=["is_trading_day", "is_trading_session"])
        calendar.is_trading_day.side_effect = TimeoutError("calendar down")
        step = ResolutionPolicy({}, {}, calendar).minute_step(NYSE)

        assert step(_utc(12), True) is True
        assert step(_utc(12), None) is False

    def test_midday_calendar_outage_keeps_vector_open(self) -> None:
        """Test lookups failing inside the session do not flip the day's vector."""
        calendar = _Calendar(open_hour=10, close_hour=14)
        healthy = calendar.is_trading_session

        def flaky_session(tv_key: str, instant: datetime) -> bool:
            if instant.hour == 12:
                raise CalendarLookupError("calendar down")
            return healthy(tv_key, instant)

        calendar.is_trading_session = flaky_session
        step = ResolutionPolicy({}, {}, calendar).minute_step(NYSE)

        states = [s for _, s in state_vector(step, date(2026, 1, 5))]
        assert count_transitions(states) == 2
        assert all(states[12 * 60:13 * 60])
        step = ResolutionPolicy({}, {}).minute_step(NYSE)

        assert step(_utc(12), True) is False


class TestCalendarAdapters:
    """Test suite for calendar oracle adapters."""

    def test_adapters_bind_venue_key(self) -> None:
        calendar = Mock(spec=["is_trading_day", "is_trading_session"])
        calendar.is_trading_day.return_value = True
        calendar.is_trading_session.return_value = False
        now = _utc(12)

        assert CalendarDayOracle(calendar, "tv.XNYS").is_trading_day(now) is True
        assert CalendarSessionOracle(calendar, "tv.XNYS").is_trading_session(now) is False
        calendar.is_trading_day.assert_called_once_with("tv.XNYS", now)
        calendar.is_trading_session.assert_called_once_with("tv.XNYS", now)

    def test_protocol(self) -> None:
        assert isinstance(_Calendar(), TradingCalendar)
