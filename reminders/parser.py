"""Resolve free-form time expressions into absolute trigger times."""

import re
import time
from datetime import datetime
from typing import Optional

from dateutil.parser import parse as parse_datetime

from logger import logger
from .errors import InvalidTimeFormatError

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# Fixed approximations, no calendar arithmetic
UNIT_MS = {
    "second": SECOND_MS,
    "minute": MINUTE_MS,
    "hour": HOUR_MS,
    "day": DAY_MS,
    "week": 7 * DAY_MS,
    "month": 30 * DAY_MS,
    "year": 365 * DAY_MS,
}

RELATIVE_PATTERN = re.compile(
    r'^in\s+(\d+)\s+(second|minute|hour|day|week|month|year)s?$',
    re.IGNORECASE
)

ACCEPTED_FORMATS = (
    'ISO datetime or relative time (e.g., "in 10 seconds", "in 30 minutes", '
    '"in 2 hours", "in 1 day", "in 2 weeks", "in 1 month", "in 1 year")'
)

_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def resolve_trigger_time(expression: str, now: Optional[int] = None) -> int:
    """Turn a time expression into an absolute trigger time.

    Examples:
    - "in 30 minutes"
    - "In 2 Hours"
    - "2025-10-29T15:30:00" (naive values are local time)
    - "2025-10-29T15:30:00+01:00"

    Args:
        expression: Relative "in <n> <unit>" or an absolute datetime string
        now: Reference time in ms (defaults to the current time)

    Returns:
        Trigger time in milliseconds since the epoch

    Raises:
        InvalidTimeFormatError: If the expression doesn't resolve to a
            representable instant
    """
    if now is None:
        now = now_ms()

    text = (expression or "").strip()

    relative = RELATIVE_PATTERN.match(text)
    if relative:
        amount = int(relative.group(1))
        unit = relative.group(2).lower()
        logger.debug(f"Parsed relative time: {amount} {unit}")
        return _checked(now + amount * UNIT_MS[unit], expression)

    try:
        parsed = _parse_absolute(text)
        trigger_time = int(parsed.timestamp() * 1000)
    except (ValueError, OverflowError, OSError) as e:
        logger.warning(f"Invalid time format {expression!r}: {e}")
        raise InvalidTimeFormatError(expression) from e
    return _checked(trigger_time, expression)


def _parse_absolute(text: str) -> datetime:
    """Parse a datetime that names a full calendar date.

    dateutil fills missing fields from a default, so "5 minutes" would become
    00:05 today. Parsing against two different defaults exposes any field that
    was filled in rather than read.
    """
    first = parse_datetime(text, default=_DEFAULT_A)
    second = parse_datetime(text, default=_DEFAULT_B)
    if first.date() != second.date():
        raise ValueError("no calendar date in expression")
    return first


def _checked(trigger_time: int, expression: str) -> int:
    """Reject instants a local datetime can't represent."""
    try:
        datetime.fromtimestamp(trigger_time / 1000)
    except (ValueError, OverflowError, OSError) as e:
        logger.warning(f"Time out of range {expression!r}: {e}")
        raise InvalidTimeFormatError(expression) from e
    return trigger_time
