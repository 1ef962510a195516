"""
Shared utility functions for filang.
"""
import json
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Optional, Pattern

from rapidfuzz import fuzz, process


def closest_match(value: str, choices: Iterable[str], threshold: int = 70) -> Optional[str]:
    """
    Return the choice that best resembles ``value``, if it is close enough.

    Used for "did you mean" hints on unknown statements, attributes and
    sort fields.

    Args:
        value: What the user typed
        choices: Known valid spellings
        threshold: Minimum rapidfuzz ratio (0-100)

    Returns:
        Best matching choice or None
    """
    choices = list(choices)
    if not value or not choices:
        return None
    match = process.extractOne(
        value.upper(),
        [c.upper() for c in choices],
        scorer=fuzz.ratio,
        score_cutoff=threshold,
    )
    if match is None:
        return None
    _, _, index = match
    return choices[index]


@lru_cache(maxsize=256)
def like_to_regex(pattern: str) -> Pattern[str]:
    """
    Compile a SQL LIKE pattern into an anchored, case-insensitive regex.

    ``%`` matches any run of characters (newlines included), ``_`` matches
    exactly one character; everything else is literal.
    """
    parts = []
    for char in pattern:
        if char == '%':
            parts.append('.*')
        elif char == '_':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.IGNORECASE | re.DOTALL)


def parse_date_literal(text: str) -> datetime:
    """
    Parse an ISO 8601 date or datetime literal.

    Naive values are interpreted as UTC so they compare against the
    timezone-aware timestamps on EntityRecords.

    Raises:
        ValueError: If ``text`` is not a recognizable date
    """
    value = datetime.fromisoformat(text.strip())
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision from a datetime."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def decode_escapes(text: str) -> str:
    """
    Decode JSON-style escape sequences (\\n, \\t, \\", \\uXXXX) in ``text``.

    Raises:
        ValueError: If the escapes are malformed
    """
    escaped = re.sub(r'(?<!\\)"', r'\\"', text)
    return json.loads(f'"{escaped}"', strict=False)

