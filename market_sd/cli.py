"""
Command line entry point.

    market-sd run --markets config/markets.list [--defaults config/dxfeed.schedule]
                  [--out out/zabbix/zabbix_sender_input.txt] [--log out/logs/market_schedule.log]
    market-sd golden --out-dir out/zabbix/golden [--date 2026-01-05] [--defaults ...]

Exit codes: 0 on success or when usage is printed, 2 on fatal errors.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from .config.loader import ConfigLoader
from .data.sources import load_aggregated_schedules, load_definition_tokens
from .delivery.per_minute import GoldenVectorWriter
from .engine import MarketStateEngine
from .errors import ConfigurationError, OutputWriteError
from .logging.config import configure_logging
from .utils.time import ensure_utc, utc_day

log = structlog.get_logger("market_sd.cli")

EXIT_OK = 0
EXIT_FATAL = 2


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map command line flags onto configuration sections."""
    paths = {
        "markets": getattr(args, "markets", None),
        "definitions": args.defaults,
        "aggregated": args.aggregated,
        "state_file": getattr(args, "state", None),
        "output": getattr(args, "out", None),
        "log_file": getattr(args, "log", None),
    }
    overrides: dict[str, Any] = {"paths": {k: v for k, v in paths.items() if v is not None}}
    if getattr(args, "grace_minutes", None) is not None:
        overrides["evaluation"] = {"grace_minutes": args.grace_minutes}
    if getattr(args, "no_per_minute", False):
        overrides["output"] = {"per_minute_files": False}
    logging_overrides = {}
    if args.log_level:
        logging_overrides["level"] = args.log_level
    if args.json_logs:
        logging_overrides["format_json"] = True
    if logging_overrides:
        overrides["logging"] = logging_overrides
    return overrides


def _parse_now(value: str) -> datetime:
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO timestamp: {value}") from e


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value}") from e


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    p.add_argument("--defaults", default=None, help="schedule definition file (key=<definition> lines)")
    p.add_argument("--aggregated", default=None, help="aggregated schedule dataset (CSV)")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    p.add_argument("--json-logs", action="store_true", help="emit JSON log lines")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="market-sd",
        description="Evaluate trading venue OPEN/CLOSED state from schedule tokens.",
    )
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="evaluate all allowlisted markets once")
    _add_common(run)
    run.add_argument("--markets", default=None, help="market allowlist (<id> <tv_key> <item_key> lines)")
    run.add_argument("--out", default=None, help="zabbix sender input file")
    run.add_argument("--log", default=None, help="log file")
    run.add_argument("--state", default=None, help="previous-state file")
    run.add_argument("--now", type=_parse_now, default=None, help="evaluation instant (ISO 8601, UTC if naive)")
    run.add_argument("--grace-minutes", type=int, default=None, help="half-width of the edge band")
    run.add_argument("--no-per-minute", action="store_true", help="skip per-minute files")
    run.set_defaults(func=_cmd_run)

    golden = sub.add_parser("golden", help="write per-minute golden vectors for every known token")
    _add_common(golden)
    golden.add_argument("--out-dir", type=Path, default=Path("out/zabbix/golden"), help="output directory")
    golden.add_argument("--date", type=_parse_date, default=None, help="UTC day (YYYY-MM-DD), default today")
    golden.set_defaults(func=_cmd_golden)

    return parser


def _cmd_run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    config = ConfigLoader.create(args.config).build_config(_overrides(args))
    if not config.paths.markets:
        parser.print_usage()
        print("market-sd run: --markets is required (or paths.markets in the config file)")
        return EXIT_OK

    configure_logging(
        level=config.logging.level,
        format_json=config.logging.format_json,
        log_file=config.paths.log_file
    )

    summary = MarketStateEngine(config).run(now=args.now)
    print(summary.describe())
    return EXIT_OK


def _cmd_golden(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    config = ConfigLoader.create(args.config).build_config(_overrides(args))
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)

    day = args.date or utc_day()
    aggregated = load_aggregated_schedules(config.paths.aggregated)
    definitions = load_definition_tokens(config.paths.definitions, config.paths.fallback_definitions)
    grace = config.evaluation.grace

    aggregated_files = GoldenVectorWriter(args.out_dir / "csv", prefix="golden_csv_", grace=grace).write_all(aggregated, day)
    definition_files = GoldenVectorWriter(args.out_dir / "props", prefix="golden_props_", grace=grace).write_all(definitions, day)

    print(
        f"GOLDEN OK date={day.isoformat()} csv_keys={len(aggregated)} csv_files={aggregated_files} "
        f"props_keys={len(definitions)} props_files={definition_files} outDir={args.out_dir}"
    )
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    # No arguments at all: friendly usage, not an error
    if not argv:
        parser.print_help()
        return EXIT_OK

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        return args.func(args, parser)
    except ConfigurationError as e:
        log.error("Configuration error", error=str(e))
        print(f"FATAL {e}", file=sys.stderr)
        return EXIT_FATAL
    except (OSError, OutputWriteError) as e:
        log.error("Fatal run error", error=str(e))
        print(f"FATAL {e}", file=sys.stderr)
        return EXIT_FATAL
    except Exception as e:
        log.exception("Unexpected fatal error")
        print(f"FATAL {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
