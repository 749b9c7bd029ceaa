"""
Token extraction — pulls identifiers (ticket numbers, merge-request URLs,
email addresses, app keywords) out of raw email text.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern, Union


def _compile(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def extract_tokens(
    pattern: Union[str, Pattern[str]],
    text: Optional[str],
    capture_group: int = 0,
) -> List[str]:
    """
    Return every match of *pattern* in *text*, deduplicated, first-seen order.

    Parameters
    ----------
    pattern : str | Pattern
        Regular expression published by the connector.
    text : str
        Raw email body.
    capture_group : int
        Group to return for each match (0 = the whole match).
    """
    if not text:
        return []
    regex = _compile(pattern)
    return normalize_tokens(m.group(capture_group) for m in regex.finditer(text))


def normalize_tokens(values: Optional[Iterable[Optional[str]]]) -> List[str]:
    """Strip blanks and duplicates from a hub-supplied token list."""
    if not values:
        return []
    seen = set()
    tokens: List[str] = []
    for value in values:
        if value is None:
            continue
        value = str(value).strip()
        if not value or value in seen:
            continue
        seen.add(value)
        tokens.append(value)
    return tokens
