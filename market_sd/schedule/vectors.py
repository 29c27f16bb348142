"""
Per-minute state vectors.

Runs the hysteresis step once per minute across a UTC day, threading each
result into the next call as the previous state, the same way a polling
driver would. Used for per-minute output files and golden vectors.
"""

from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from typing import Optional

from ..utils.time import MINUTES_PER_DAY, minute_grid
from .grammar import parse_token
from .hysteresis import next_state
from .models import GRACE

StateStep = Callable[[datetime, Optional[bool]], bool]


def state_vector(
    step: StateStep,
    day: date,
    previous: Optional[bool] = None,
    minutes: int = MINUTES_PER_DAY
) -> list[tuple[datetime, bool]]:
    """
    Evaluate a state step for every minute of a UTC day.

    Args:
        step: Callable (now, previous) -> state
        day: UTC calendar day
        previous: State before the first minute
        minutes: Number of minutes to evaluate

    Returns:
        (minute, state) pairs in chronological order
    """
    out = []
    for instant in minute_grid(day, minutes):
        previous = step(instant, previous)
        out.append((instant, previous))
    return out


def token_vector(
    token: Optional[str],
    day: date,
    previous: Optional[bool] = None,
    *,
    grace: timedelta = GRACE
) -> list[bool]:
    """Per-minute OPEN/CLOSED states for a token across a UTC day."""
    intervals = parse_token(token)

    def step(now: datetime, prev: Optional[bool]) -> bool:
        return next_state(intervals, now, prev, grace=grace)

    return [state for _, state in state_vector(step, day, previous)]


def count_transitions(states: Sequence[bool]) -> int:
    """Number of positions where the state differs from the one before."""
    return sum(1 for a, b in zip(states, states[1:]) if a != b)
