"""
Main evaluation run coordinator.

Orchestrates one polling tick: load sources, resolve every allowlisted
market, write the monitoring output, and persist the state map when any
market changed.

Sources → Resolution Policy → Hysteresis → Sender file / per-minute files → State store
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import structlog

from .config.defaults import MarketSDConfig
from .data.models import MarketConfig, Resolution, TokenSource
from .data.sources import load_aggregated_schedules, load_definition_tokens, load_markets
from .delivery.per_minute import PerMinuteFileWriter
from .delivery.zabbix import ZabbixSenderWriter
from .errors import ConfigurationError, OutputWriteError, PersistenceError
from .logging.config import get_state_logger, log_state_change
from .persistence.state_store import StateStore
from .resolution.calendar import TradingCalendar
from .resolution.policy import ResolutionPolicy
from .utils.time import ensure_utc, utc_day, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class RunSummary:
    """Outcome of one evaluation run."""
    markets: int
    lines: int
    state_changed: bool
    persisted: bool
    resolutions: list[Resolution] = field(default_factory=list)
    per_minute_files: int = 0

    def describe(self) -> str:
        return (
            f"OK markets={self.markets} lines={self.lines} "
            f"stateChanged={str(self.state_changed).lower()}"
        )


class MarketStateEngine:
    """
    Coordinator for the market open/closed evaluation run.

    Each market is evaluated independently; a failure while resolving one
    market keeps that market's previous state and does not affect the others.
    """

    def __init__(self, config: MarketSDConfig, calendar: Optional[TradingCalendar] = None) -> None:
        """Initialize the engine from validated configuration."""
        self.config = config
        self.calendar = calendar
        self.logger = logger
        self.state_logger = get_state_logger(__name__)

        self.state_store = StateStore(config.paths.state_file)
        self.sender_writer = ZabbixSenderWriter(config.paths.output, host=config.output.zabbix_host)
        self.per_minute_writer = PerMinuteFileWriter(config.paths.output)

    def build_policy(self) -> ResolutionPolicy:
        """Load schedule sources and build the resolution policy."""
        paths = self.config.paths
        aggregated = load_aggregated_schedules(paths.aggregated)
        definitions = load_definition_tokens(paths.definitions, paths.fallback_definitions)
        return ResolutionPolicy(
            aggregated,
            definitions,
            self.calendar,
            grace=self.config.evaluation.grace
        )

    def load_markets(self) -> list[MarketConfig]:
        """
        Load the market allowlist.

        Raises:
            ConfigurationError: If no allowlist path is configured
            OSError: If the allowlist cannot be read
        """
        if not self.config.paths.markets:
            raise ConfigurationError("Missing markets allowlist path")
        return load_markets(self.config.paths.markets)

    def evaluate(
        self,
        markets: Sequence[MarketConfig],
        policy: ResolutionPolicy,
        previous: Mapping[str, bool],
        now: datetime
    ) -> list[Resolution]:
        """
        Resolve every market for one tick.

        Args:
            markets: Allowlisted markets in output order
            policy: Resolution policy with loaded sources
            previous: Persisted state map
            now: Evaluation instant

        Returns:
            One Resolution per market, in allowlist order
        """
        resolutions = []
        for market in markets:
            prev_state = previous.get(market.id)
            try:
                resolution = policy.resolve(market, now, prev_state)
            except Exception as e:
                self.logger.exception(
                    "Market evaluation failed, keeping previous state",
                    market_id=market.id,
                    tv_key=market.tv_key
                )
                resolution = Resolution(
                    market_id=market.id,
                    tv_key=market.tv_key,
                    state=prev_state if prev_state is not None else False,
                    source=TokenSource.FALLBACK,
                    error=e
                )
            resolutions.append(resolution)
        return resolutions

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """
        Execute one evaluation run.

        Args:
            now: Evaluation instant, defaults to wall-clock UTC

        Returns:
            RunSummary for the run

        Raises:
            ConfigurationError: If the allowlist path is missing
            OSError: If the allowlist cannot be read
            OutputWriteError: If the sender file cannot be written
        """
        now = ensure_utc(now) if now is not None else utc_now()

        markets = self.load_markets()
        if not self.sender_writer.health_check():
            self.logger.warning("Output directory not writable", output_dir=str(self.sender_writer.output_dir))
        policy = self.build_policy()
        previous = self.state_store.load()

        resolutions = self.evaluate(markets, policy, previous, now)

        updated = dict(previous)
        state_changed = False
        for resolution in resolutions:
            prev_state = previous.get(resolution.market_id)
            # Unknown previous state counts as CLOSED
            if resolution.state != (prev_state if prev_state is not None else False):
                state_changed = True
                updated[resolution.market_id] = resolution.state
                log_state_change(
                    self.state_logger,
                    market_id=resolution.market_id,
                    from_state=prev_state,
                    to_state=resolution.state,
                    source=resolution.source.value,
                    context={"tv_key": resolution.tv_key, "token": resolution.token, "now": now.isoformat()}
                )

        sender = self.sender_writer.write(markets, resolutions)

        per_minute_files = 0
        if self.config.output.per_minute_files:
            per_minute_files = self.write_per_minute_files(markets, policy, utc_day(now))

        persisted = False
        if state_changed:
            try:
                self.state_store.save(updated)
                persisted = True
            except PersistenceError as e:
                self.logger.error("Cannot persist previous state", target=e.target, error=str(e))

        summary = RunSummary(
            markets=len(markets),
            lines=sender.lines,
            state_changed=state_changed,
            persisted=persisted,
            resolutions=resolutions,
            per_minute_files=per_minute_files
        )
        self.logger.info(
            summary.describe(),
            markets=summary.markets,
            lines=summary.lines,
            state_changed=summary.state_changed,
            persisted=summary.persisted,
            sender_writes=self.sender_writer.write_count,
            per_minute_writes=self.per_minute_writer.write_count
        )
        return summary

    def write_per_minute_files(
        self,
        markets: Sequence[MarketConfig],
        policy: ResolutionPolicy,
        day: date
    ) -> int:
        """
        Write per-minute files for every market; failures are logged per market.

        Returns:
            Number of files written
        """
        written = 0
        for market in markets:
            try:
                self.per_minute_writer.write_market(market, policy.minute_step(market), day)
                written += 1
            except OutputWriteError as e:
                self.logger.warning("Per-minute file generation failed", market_id=market.id, error=str(e))
            except Exception:
                self.logger.exception("Per-minute file generation failed", market_id=market.id)
        return written
