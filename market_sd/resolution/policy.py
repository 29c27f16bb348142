"""
Resolution policy: fixed-precedence fallback chain per market.

Precedence:
1. aggregated dataset token for the venue key
2. token mined from the schedule definition file
3. live trading-calendar lookup
4. previous state (CLOSED if never recorded)

The policy never raises for a single market; every outcome is a Resolution
that records which source decided and, when the state was held, why.
"""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Optional

import structlog

from ..data.models import MarketConfig, Resolution, TokenSource
from ..errors import CalendarLookupError, MalformedTokenError, MissingScheduleError
from ..schedule.grammar import parse_token
from ..schedule.hysteresis import compute_state, next_state
from ..schedule.models import GRACE
from ..schedule.vectors import StateStep
from .calendar import CalendarDayOracle, CalendarSessionOracle, TradingCalendar

logger = structlog.get_logger(__name__)


class ResolutionPolicy:
    """Resolves markets to OPEN/CLOSED decisions from injected sources."""

    def __init__(
        self,
        aggregated: Mapping[str, str],
        definitions: Mapping[str, str],
        calendar: Optional[TradingCalendar] = None,
        *,
        grace: timedelta = GRACE
    ):
        self.aggregated = dict(aggregated)
        self.definitions = dict(definitions)
        self.calendar = calendar
        self.grace = grace
        self.logger = logger

    def token_for(self, market: MarketConfig) -> tuple[Optional[str], Optional[TokenSource]]:
        """
        Find the schedule token for a market without evaluating it.

        Returns:
            (token, source), or (None, None) when neither token source knows the key
        """
        token = self.aggregated.get(market.tv_key)
        if token is not None:
            return token, TokenSource.AGGREGATED

        token = self.definitions.get(market.tv_key)
        if token is not None and token.strip():
            return token, TokenSource.DEFINITION

        return None, None

    def resolve(self, market: MarketConfig, now: datetime, previous: Optional[bool]) -> Resolution:
        """
        Resolve one market for one evaluation tick.

        Args:
            market: Allowlisted market
            now: Current UTC instant
            previous: Last known state, None if never recorded

        Returns:
            Resolution with the decided state and its source
        """
        token, source = self.token_for(market)
        if token is not None:
            return self._resolve_token(market, token, source, now, previous)

        if self.calendar is not None:
            try:
                state = compute_state(
                    CalendarDayOracle(self.calendar, market.tv_key),
                    CalendarSessionOracle(self.calendar, market.tv_key),
                    now,
                    previous,
                    grace=self.grace
                )
            except Exception as e:
                error = CalendarLookupError(f"Calendar lookup failed: {e}", tv_key=market.tv_key)
                return self._fallback(market, previous, error)

            self.logger.info("Used trading calendar", market_id=market.id, tv_key=market.tv_key)
            return Resolution(
                market_id=market.id,
                tv_key=market.tv_key,
                state=state,
                source=TokenSource.CALENDAR
            )

        error = MissingScheduleError(
            "No schedule found in aggregated dataset or definitions, no calendar configured",
            tv_key=market.tv_key,
            sources_tried=[TokenSource.AGGREGATED.value, TokenSource.DEFINITION.value]
        )
        return self._fallback(market, previous, error)

    def minute_step(self, market: MarketConfig) -> StateStep:
        """
        Build a per-minute state step for a market.

        Markets with no token and no calendar always report CLOSED.
        """
        token, _ = self.token_for(market)
        if token is not None:
            intervals = parse_token(token)

            def token_step(now: datetime, previous: Optional[bool]) -> bool:
                return next_state(intervals, now, previous, grace=self.grace)

            return token_step

        if self.calendar is not None:
            day_oracle = CalendarDayOracle(self.calendar, market.tv_key)
            session_oracle = CalendarSessionOracle(self.calendar, market.tv_key)

            def calendar_step(now: datetime, previous: Optional[bool]) -> bool:
                try:
                    return compute_state(day_oracle, session_oracle, now, previous, grace=self.grace)
                except Exception as e:
                    self.logger.debug("Calendar lookup failed", tv_key=market.tv_key, minute=now.isoformat(), error=str(e))
                    return previous if previous is not None else False

            return calendar_step

        def closed_step(now: datetime, previous: Optional[bool]) -> bool:
            return False

        return closed_step

    def _resolve_token(
        self,
        market: MarketConfig,
        token: str,
        source: TokenSource,
        now: datetime,
        previous: Optional[bool]
    ) -> Resolution:
        intervals = parse_token(token)
        state = next_state(intervals, now, previous, grace=self.grace)

        error = None
        if not intervals:
            error = MalformedTokenError("Schedule token yielded no trading window", token=token)
            self.logger.warning(
                "Unusable schedule token, keeping previous state",
                market_id=market.id,
                tv_key=market.tv_key,
                token=token,
                source=source.value,
                state=state
            )
        elif source is TokenSource.DEFINITION:
            self.logger.info(
                "Using schedule definition token",
                market_id=market.id,
                tv_key=market.tv_key,
                token=token
            )

        return Resolution(
            market_id=market.id,
            tv_key=market.tv_key,
            state=state,
            source=source,
            token=token,
            error=error
        )

    def _fallback(self, market: MarketConfig, previous: Optional[bool], error: Exception) -> Resolution:
        state = previous if previous is not None else False
        self.logger.warning(
            "Market not resolvable, using fallback state",
            market_id=market.id,
            tv_key=market.tv_key,
            error=str(error),
            state=state
        )
        return Resolution(
            market_id=market.id,
            tv_key=market.tv_key,
            state=state,
            source=TokenSource.FALLBACK,
            error=error
        )
