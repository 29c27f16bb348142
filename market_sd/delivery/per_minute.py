"""
Per-minute state files.

For each market, one file per UTC day holding 1440 lines of
``HH:MM:SS <epoch> <0|1>``, computed by walking the hysteresis step minute
by minute from 00:00 with no previous state. Golden vector files use the
same line format, keyed by venue key instead of market id.
"""

from collections.abc import Mapping
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional, Union

from ..data.models import MarketConfig
from ..errors import OutputWriteError
from ..schedule.grammar import parse_token
from ..schedule.hysteresis import next_state
from ..schedule.models import GRACE
from ..schedule.vectors import StateStep, state_vector
from ..utils.time import epoch_seconds, format_clock, format_compact_date
from .base import BaseOutputWriter, WriteResult

GOLDEN_PREFIX = "golden_"
TV_PREFIX = "tv."


def format_minute_line(instant: datetime, state: bool) -> str:
    """Format one per-minute line."""
    return f"{format_clock(instant)} {epoch_seconds(instant)} {1 if state else 0}"


def render_minute_lines(step: StateStep, day: date) -> list[str]:
    """Render a full UTC day of per-minute lines for a state step."""
    return [format_minute_line(instant, state) for instant, state in state_vector(step, day)]


class PerMinuteFileWriter(BaseOutputWriter):
    """Writes ``<stem>_<market id>_<YYYYMMDD>.txt`` next to the sender file."""

    def __init__(self, sender_path: Union[str, Path]):
        sender_path = Path(sender_path)
        super().__init__("per_minute", sender_path.parent)
        self.stem = sender_path.stem

    def describe(self) -> str:
        return f"per-minute files in {self.output_dir}"

    def path_for(self, market: MarketConfig, day: date) -> Path:
        return self.output_dir / f"{self.stem}_{market.id}_{format_compact_date(day)}.txt"

    def write_market(self, market: MarketConfig, step: StateStep, day: date) -> WriteResult:
        """Write one market's per-minute file for a UTC day."""
        result = self.write_lines(self.path_for(market, day), render_minute_lines(step, day))
        self.logger.info(
            "Wrote per-minute file",
            market_id=market.id,
            output_path=str(result.path),
            lines=result.lines
        )
        return result


class GoldenVectorWriter(BaseOutputWriter):
    """Writes reference per-minute vectors for every key of a token mapping."""

    def __init__(self, output_dir: Union[str, Path], prefix: str = GOLDEN_PREFIX,
                 grace: timedelta = GRACE):
        super().__init__("golden", output_dir)
        self.prefix = prefix
        self.grace = grace

    def describe(self) -> str:
        return f"golden vectors in {self.output_dir}"

    def path_for(self, tv_key: str, day: date) -> Path:
        bare = tv_key[len(TV_PREFIX):] if tv_key.startswith(TV_PREFIX) else tv_key
        return self.output_dir / f"{self.prefix}{bare}_{format_compact_date(day)}.txt"

    def write_token(self, tv_key: str, token: str, day: date) -> WriteResult:
        intervals = parse_token(token)

        def step(now: datetime, previous: Optional[bool]) -> bool:
            return next_state(intervals, now, previous, grace=self.grace)

        return self.write_lines(self.path_for(tv_key, day), render_minute_lines(step, day))

    def write_all(self, tokens: Mapping[str, str], day: date) -> int:
        """
        Write one golden file per venue key.

        Failures are logged per key and do not stop the remaining keys.

        Returns:
            Number of files written
        """
        written = 0
        for tv_key, token in sorted(tokens.items()):
            try:
                self.write_token(tv_key, token, day)
                written += 1
            except OutputWriteError as e:
                self.logger.warning("Golden vector write failed", tv_key=tv_key, token=token, error=str(e))
        self.logger.info(
            "Golden vectors written",
            output_dir=str(self.output_dir),
            keys=len(tokens),
            files=written
        )
        return written
