from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Union

from .errors import MalformedTimestamp

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def format_rfc3339_utc(value: datetime) -> str:
    """Render a UTC datetime as ``YYYY-MM-DDTHH:MM:SSZ``, dropping fractions."""
    # isoformat keeps four-digit years, strftime("%Y") does not on every libc.
    return value.replace(microsecond=0, tzinfo=None).isoformat() + "Z"


@dataclass(frozen=True)
class DateOnly:
    """An all-day calendar date."""

    year: int
    month: int
    day: int

    @property
    def value(self) -> date:
        return date(self.year, self.month, self.day)

    def date_only_comparable(self) -> date:
        return self.value

    def to_until_text(self) -> str:
        # An all-day UNTIL is inclusive, so stop on the day before the cutoff.
        return (self.value - timedelta(days=1)).isoformat().replace("-", "")

    def start_of_day(self) -> datetime:
        return datetime(self.year, self.month, self.day, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ZonedInstant:
    """A point in time parsed from an RFC 3339 string with an offset."""

    instant: datetime
    explicit_offset_present: bool = True

    @property
    def utc(self) -> datetime:
        return self.instant.astimezone(timezone.utc)

    def date_only_comparable(self) -> date:
        return self.utc.date()

    def to_until_text(self) -> str:
        return format_rfc3339_utc(self.utc).replace("-", "").replace(":", "")


CalendarTimestamp = Union[DateOnly, ZonedInstant]


def _check_range(day: date, raw: str) -> None:
    # Range and UNTIL arithmetic step one day either side of the value.
    try:
        day - timedelta(days=1)
        day + timedelta(days=1)
    except OverflowError as exc:
        raise MalformedTimestamp(raw) from exc


def parse_timestamp(token: str) -> CalendarTimestamp:
    """Parse ``YYYY-MM-DD`` or an RFC 3339 date-time into a CalendarTimestamp.

    The variant is decided by the presence of a time component. Date-times
    without an explicit offset are rejected, as are values too close to the
    ends of the supported date range to step a day either way.
    """
    raw = token
    token = (token or "").strip()

    if _DATE_RE.match(token):
        try:
            d = date.fromisoformat(token)
        except ValueError as exc:
            raise MalformedTimestamp(raw) from exc
        _check_range(d, raw)
        return DateOnly(d.year, d.month, d.day)

    if not _RFC3339_RE.match(token):
        raise MalformedTimestamp(raw)

    normalized = token[:10] + "T" + token[11:]
    if normalized[-1] in "Zz":
        normalized = normalized[:-1] + "+00:00"
    try:
        instant = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise MalformedTimestamp(raw) from exc
    if instant.tzinfo is None:
        raise MalformedTimestamp(raw)
    try:
        utc = instant.astimezone(timezone.utc)
    except OverflowError as exc:
        raise MalformedTimestamp(raw) from exc
    _check_range(utc.date(), raw)
    return ZonedInstant(instant=instant, explicit_offset_present=True)
