"""
Schedule source loaders.

Three plain-text inputs feed the resolution policy:

- the market allowlist: ``<id> <tv_key> <item_key>`` per line
- the aggregated dataset: CSV, token in column 1, ``;``-separated venue
  keys (optionally ``@date``-suffixed) in column 4
- schedule definitions: ``tv.KEY=<definition>`` lines mined for tokens

Loaders for the two schedule sources never raise: unreadable files are
logged and yield an empty mapping, so resolution falls through to the next
source. The allowlist is required and its read errors propagate.
"""

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

import structlog

from ..errors import MalformedSourceLineError
from ..schedule.extractor import extract_token
from .models import MarketConfig

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]

TV_PREFIX = "tv."
COMMENT_PREFIX = "#"
AGGREGATED_MIN_COLUMNS = 4

_KEY_SEPARATOR = re.compile(r";\s*")


def _read_lines(path: Path) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()


def _is_ignorable(line: str) -> bool:
    return not line or line.startswith(COMMENT_PREFIX)


def strip_date_suffix(key: str) -> str:
    """Drop an ``@date`` suffix from a venue key."""
    at = key.find("@")
    return key[:at] if at > 0 else key


def parse_market_line(line: str, line_number: Optional[int] = None) -> Optional[MarketConfig]:
    """
    Parse one allowlist line.

    Args:
        line: Raw line
        line_number: Position in the file, for diagnostics

    Returns:
        MarketConfig, or None for blank and comment lines

    Raises:
        MalformedSourceLineError: If fewer than three fields are present
    """
    text = line.strip()
    if _is_ignorable(text):
        return None
    parts = text.split()
    if len(parts) < 3:
        raise MalformedSourceLineError(
            f"Expected '<id> <tv_key> <item_key>', got {len(parts)} field(s)",
            line=line,
            line_number=line_number,
            source="markets"
        )
    return MarketConfig(id=parts[0], tv_key=parts[1], item_key=parts[2])


def parse_markets(lines: Iterable[str]) -> list[MarketConfig]:
    """Parse allowlist lines, skipping malformed ones with a warning."""
    markets = []
    for number, line in enumerate(lines, start=1):
        try:
            market = parse_market_line(line, number)
        except MalformedSourceLineError as e:
            logger.warning(
                "Bad markets line, skipping",
                line=e.line,
                line_number=e.line_number,
                error=str(e)
            )
            continue
        if market is not None:
            markets.append(market)
    return markets


def load_markets(path: PathLike) -> list[MarketConfig]:
    """
    Load the market allowlist.

    Raises:
        OSError: If the file cannot be read
    """
    markets = parse_markets(_read_lines(Path(path)))
    logger.info("Loaded market allowlist", path=str(path), markets=len(markets))
    return markets


def parse_aggregated_schedules(lines: Iterable[str]) -> dict[str, str]:
    """
    Parse the aggregated token dataset.

    The first line is a header. The first occurrence of a venue key wins.

    Args:
        lines: CSV lines including the header

    Returns:
        Mapping of venue key to schedule token
    """
    schedules: dict[str, str] = {}
    rows = iter(lines)
    next(rows, None)

    for line in rows:
        parts = line.split(",")
        if len(parts) < AGGREGATED_MIN_COLUMNS:
            continue
        token = parts[0].strip()
        keys = parts[3].strip()
        if not token or not keys:
            continue
        for raw_key in _KEY_SEPARATOR.split(keys):
            key = raw_key.strip()
            if not key:
                continue
            schedules.setdefault(strip_date_suffix(key), token)

    return schedules


def load_aggregated_schedules(path: PathLike) -> dict[str, str]:
    """Load the aggregated token dataset; missing or unreadable files yield {}."""
    path = Path(path)
    if not path.exists():
        logger.warning("Aggregated schedule dataset not found", path=str(path))
        return {}

    try:
        schedules = parse_aggregated_schedules(_read_lines(path))
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to load aggregated schedule dataset", path=str(path), error=str(e))
        return {}

    logger.info("Loaded aggregated schedules", path=str(path), tv_keys=len(schedules))
    return schedules


def parse_definition_line(line: str) -> Optional[tuple[str, str]]:
    """
    Parse one ``tv.KEY=<definition>`` line into (key, token).

    Returns:
        (key, token) pair, or None if the line carries no usable token
    """
    text = line.strip()
    if _is_ignorable(text):
        return None
    eq = text.find("=")
    if eq <= 0:
        return None
    key = text[:eq].strip()
    if not key.startswith(TV_PREFIX):
        return None
    token = extract_token(text[eq + 1:])
    if token is None or not token.strip():
        return None
    return key, token


def parse_definition_tokens(lines: Iterable[str]) -> dict[str, str]:
    """Mine tokens from schedule definition lines; first occurrence wins."""
    tokens: dict[str, str] = {}
    for line in lines:
        parsed = parse_definition_line(line)
        if parsed is not None:
            key, token = parsed
            tokens.setdefault(key, token)
    return tokens


def load_definition_tokens(
    path: Optional[PathLike],
    fallback_path: Optional[PathLike] = None
) -> dict[str, str]:
    """
    Load schedule definitions and extract a token per venue key.

    Args:
        path: Explicit definition file, tried first
        fallback_path: Conventional location used when path is unset or unreadable

    Returns:
        Mapping of venue key to extracted token; {} if no file could be read
    """
    for candidate in (path, fallback_path):
        if candidate is None:
            continue
        candidate = Path(candidate)
        if not candidate.exists():
            logger.debug("Schedule definition file not found", path=str(candidate))
            continue
        try:
            lines = _read_lines(candidate)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read schedule definitions", path=str(candidate), error=str(e))
            continue

        tokens = parse_definition_tokens(lines)
        if tokens:
            logger.info("Loaded schedule definition tokens", path=str(candidate), tv_keys=len(tokens))
        return tokens

    return {}
