"""Default configuration parameters for the market state evaluator."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class EvaluationParams:
    """Hysteresis parameters."""
    grace_minutes: int = 5                           # Half-width of the edge band

    @property
    def grace(self) -> timedelta:
        return timedelta(minutes=self.grace_minutes)


@dataclass(frozen=True)
class PathParams:
    """Input and output locations."""
    markets: Optional[str] = None                                   # Market allowlist (required at run time)
    definitions: Optional[str] = None                               # key=<definition> schedule file
    fallback_definitions: str = "config/dxfeed.schedule"            # Used when definitions is unset
    aggregated: str = "config/schedule_unique.csv"                  # Aggregated token dataset
    state_file: str = "/var/lib/market-sd/state.properties"         # Previous-state store
    output: str = "out/zabbix/zabbix_sender_input.txt"              # Sender input file
    log_file: Optional[str] = "out/logs/market_schedule.log"        # Copy of log output


@dataclass(frozen=True)
class OutputParams:
    """Monitoring output parameters."""
    zabbix_host: str = "MarketSchedule"
    per_minute_files: bool = True


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class MarketSDConfig:
    """Complete configuration."""
    evaluation: EvaluationParams
    paths: PathParams
    output: OutputParams
    logging: LoggingParams


def get_default_config() -> MarketSDConfig:
    """Get the default configuration instance."""
    return MarketSDConfig(
        evaluation=EvaluationParams(),
        paths=PathParams(),
        output=OutputParams(),
        logging=LoggingParams(),
    )
