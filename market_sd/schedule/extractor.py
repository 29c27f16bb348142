"""
Token extraction from loosely formatted schedule definitions.

External schedule definitions carry a lot more than trading windows
(holiday references, session names, time zones). This module mines a
substring the token grammar understands, following a fixed priority:

1. an explicit ``0=`` assignment, filtered to the token alphabet
2. the always-open literal ``0000+0000`` anywhere in the definition
3. every window the grammar scanner recognises, concatenated in order
"""

import re
from typing import Optional

from .grammar import scan_fragments
from .models import ALWAYS_OPEN_TOKEN

ASSIGNMENT = "0="
ASSIGNMENT_END = ";"

_NON_TOKEN_CHARS = re.compile(r"[^0-9pra\-+]+")


def _assigned_token(definition: str) -> Optional[str]:
    idx = definition.find(ASSIGNMENT)
    if idx < 0:
        return None
    start = idx + len(ASSIGNMENT)
    end = definition.find(ASSIGNMENT_END, start)
    value = definition[start:end] if end >= 0 else definition[start:]
    value = _NON_TOKEN_CHARS.sub("", value.strip())
    return value or None


def _scanned_token(definition: str) -> Optional[str]:
    windows = [f.text for f in scan_fragments(definition) if f.is_window]
    return "".join(windows) or None


def extract_token(definition: Optional[str]) -> Optional[str]:
    """
    Extract a schedule token from a raw schedule definition.

    Args:
        definition: Right-hand side of a ``key=<definition>`` line

    Returns:
        Token string, or None when nothing usable was found
    """
    if definition is None:
        return None
    definition = definition.strip()
    if not definition:
        return None

    token = _assigned_token(definition)
    if token:
        return token

    if ALWAYS_OPEN_TOKEN in definition:
        return ALWAYS_OPEN_TOKEN

    return _scanned_token(definition)
