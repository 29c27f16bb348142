"""
Schedule source resolution.

Chooses, per market, which schedule source feeds the hysteresis step:
aggregated dataset, then mined definition token, then the live calendar,
then the previous state.
"""

from .calendar import TradingCalendar
from .policy import ResolutionPolicy

__all__ = ["ResolutionPolicy", "TradingCalendar"]
