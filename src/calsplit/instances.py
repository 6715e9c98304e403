from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Tuple

from .errors import MalformedTimestamp
from .models import effective_original_start
from .timestamps import DateOnly, format_rfc3339_utc, parse_timestamp


def original_start_range(token: str) -> Tuple[str, str]:
    """Return a half-open ``[timeMin, timeMax)`` window holding one occurrence.

    Timed occurrences get a one second window, all-day occurrences the whole
    UTC day.
    """
    ts = parse_timestamp(token)
    if isinstance(ts, DateOnly):
        start = ts.start_of_day()
        end = start + timedelta(days=1)
    else:
        start = ts.utc
        end = start + timedelta(seconds=1)
    return format_rfc3339_utc(start), format_rfc3339_utc(end)


def matches_original_start(event: Dict[str, Any], token: str) -> bool:
    target = parse_timestamp(token)

    event_token = effective_original_start(event)
    if not event_token:
        return False
    try:
        actual = parse_timestamp(event_token)
    except MalformedTimestamp:
        return False

    if isinstance(target, DateOnly) or isinstance(actual, DateOnly):
        return actual.date_only_comparable() == target.date_only_comparable()
    return actual.utc == target.utc
