"""
Canonical data models for venue configuration and resolution results.

Immutable data structures shared by the source loaders, the resolution
policy and the run engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class MarketConfig:
    """One allowlisted market."""
    id: str             # Key used for persisted state and file names
    tv_key: str         # Schedule source key, e.g. tv.XNYS
    item_key: str       # Monitoring item key


class TokenSource(str, Enum):
    """Where a venue's decision came from."""
    AGGREGATED = "aggregated"
    DEFINITION = "definition"
    CALENDAR = "calendar"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one market for one evaluation tick."""
    market_id: str
    tv_key: str
    state: bool
    source: TokenSource
    token: Optional[str] = None
    error: Optional[Exception] = None    # Diagnostic when the state was held

    @property
    def value(self) -> int:
        """Monitoring value: 1 for OPEN, 0 for CLOSED."""
        return 1 if self.state else 0
