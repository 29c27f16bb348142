"""
Schedule token grammar.

Turns a compact schedule token such as ``p04000930r09301600a16002000`` or
``-17001615`` into an ordered tuple of normalized TimeInterval objects.

Grammar (single left-to-right scan, longest match first):
- ``0000+0000`` as the whole token: one all-day interval
- ``p``/``r``/``a`` + 8 digits: standard window HHMM start, HHMM end
- ``-`` + 8 digits: explicitly overnight window
- a run of plain digits: consecutive 8-digit windows, remainder dropped
- anything else: skipped one character at a time

Parsing never raises. Input that contains no recognisable window yields an
empty tuple, which callers treat as "no data" rather than "closed".
"""

from collections.abc import Iterator
from datetime import time
from typing import Optional

from .models import (
    ALWAYS_OPEN_TOKEN,
    FragmentKind,
    TimeInterval,
    TokenFragment,
)

MARKERS = frozenset("pra")
OVERNIGHT_MARKER = "-"
WINDOW_DIGITS = 8

# str.isdigit() accepts non-ASCII digits that int() cannot always read
_ASCII_DIGITS = frozenset("0123456789")


def _is_digit(char: str) -> bool:
    return char in _ASCII_DIGITS


def _has_window_digits(text: str, offset: int) -> bool:
    """Check that exactly WINDOW_DIGITS ASCII digits start at offset."""
    if offset + WINDOW_DIGITS > len(text):
        return False
    return all(_is_digit(c) for c in text[offset:offset + WINDOW_DIGITS])


def scan_fragments(text: Optional[str]) -> Iterator[TokenFragment]:
    """
    Scan a string into tagged fragments.

    Every character of the input is covered by exactly one fragment, so the
    concatenated fragment texts reproduce the input.

    Args:
        text: Token or raw schedule definition to scan

    Yields:
        TokenFragment for each recognised window or skipped character
    """
    if not text:
        return

    i = 0
    n = len(text)
    while i < n:
        char = text[i]

        if char in MARKERS or char == OVERNIGHT_MARKER:
            if _has_window_digits(text, i + 1):
                kind = (FragmentKind.OVERNIGHT_WINDOW if char == OVERNIGHT_MARKER
                        else FragmentKind.MARKER_WINDOW)
                yield TokenFragment(
                    kind=kind,
                    text=text[i:i + 9],
                    position=i,
                    start=text[i + 1:i + 5],
                    end=text[i + 5:i + 9],
                )
                i += 9
            else:
                # Malformed marker: salvage what follows
                yield TokenFragment(kind=FragmentKind.SKIP, text=char, position=i)
                i += 1
            continue

        if _is_digit(char):
            j = i
            while j < n and _is_digit(text[j]):
                j += 1
            k = i
            while k + WINDOW_DIGITS <= j:
                yield TokenFragment(
                    kind=FragmentKind.PLAIN_WINDOW,
                    text=text[k:k + WINDOW_DIGITS],
                    position=k,
                    start=text[k:k + 4],
                    end=text[k + 4:k + WINDOW_DIGITS],
                )
                k += WINDOW_DIGITS
            if k < j:
                yield TokenFragment(kind=FragmentKind.SKIP, text=text[k:j], position=k)
            i = j
            continue

        yield TokenFragment(kind=FragmentKind.SKIP, text=char, position=i)
        i += 1


def parse_hhmm(hhmm: str) -> time:
    """Parse a 4-digit HHMM string, wrapping hours mod 24 and minutes mod 60."""
    return time(int(hhmm[0:2]) % 24, int(hhmm[2:4]) % 60)


def build_standard_interval(start: time, end: time) -> TimeInterval:
    """
    Build a window from a marker or plain-digit fragment.

    An end earlier than the start wraps past midnight; equal start and end
    cover the whole day.
    """
    if start == end:
        return TimeInterval.always()
    if end < start:
        return TimeInterval(start=start, end=end, overnight=True)
    return TimeInterval(start=start, end=end)


def build_overnight_interval(start: time, end: time) -> TimeInterval:
    """Build an explicitly overnight window; equal bounds cover the whole day."""
    if start == end:
        return TimeInterval.always()
    return TimeInterval(start=start, end=end, overnight=True)


def fragment_to_interval(fragment: TokenFragment) -> Optional[TimeInterval]:
    """Convert a window fragment to an interval, None for skipped input."""
    if not fragment.is_window:
        return None
    start = parse_hhmm(fragment.start)
    end = parse_hhmm(fragment.end)
    if fragment.kind is FragmentKind.OVERNIGHT_WINDOW:
        return build_overnight_interval(start, end)
    return build_standard_interval(start, end)


def parse_token(token: Optional[str]) -> tuple[TimeInterval, ...]:
    """
    Parse a schedule token into trading intervals.

    Args:
        token: Schedule token, e.g. "p04000930r09301600" or "0000+0000"

    Returns:
        Intervals in parse order; empty when nothing usable was found
    """
    if token is None:
        return ()
    token = token.strip()
    if not token:
        return ()
    if token == ALWAYS_OPEN_TOKEN:
        return (TimeInterval.always(),)

    intervals = []
    for fragment in scan_fragments(token):
        interval = fragment_to_interval(fragment)
        if interval is not None:
            intervals.append(interval)
    return tuple(intervals)
