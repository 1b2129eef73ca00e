# caldom/dates.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

import dateparser
import pytz
from dateutil import parser as duparser
from dateutil.relativedelta import relativedelta

from .timezones import Zone

BARE_DATE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")
ISO_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")
NUMERIC = re.compile(r"^-?\d+(?:\.\d+)?$")

_DURATION_PART = re.compile(
    r"([+-]?\d+)\s*(years?|yrs?|months?|mons?|weeks?|wks?|days?|hours?|hrs?|h|minutes?|mins?|m|seconds?|secs?|s)\b",
    re.I,
)

_UNIT_NAMES = {
    "y": "years", "yr": "years", "yrs": "years", "year": "years", "years": "years",
    "mon": "months", "mons": "months", "month": "months", "months": "months",
    "wk": "weeks", "wks": "weeks", "week": "weeks", "weeks": "weeks",
    "day": "days", "days": "days",
    "h": "hours", "hr": "hours", "hrs": "hours", "hour": "hours", "hours": "hours",
    "m": "minutes", "min": "minutes", "mins": "minutes", "minute": "minutes", "minutes": "minutes",
    "s": "seconds", "sec": "seconds", "secs": "seconds", "second": "seconds", "seconds": "seconds",
}

_ELAPSED_UNITS = ("hours", "minutes", "seconds")


@dataclass(frozen=True)
class Duration:
    calendar: relativedelta
    elapsed: timedelta


def _clean(value: Optional[str]) -> str:
    return re.sub(r"\s+", " ", (value or "").strip())


def parse_duration(text: Optional[str]) -> Optional[Duration]:
    """
    Parse a human offset such as "2 hours", "1 hour 30 minutes", "+1 day"
    or "90 min". Returns None when nothing recognisable is found.

    Years, months, weeks and days move the wall clock; hours, minutes and
    seconds are elapsed time, so "2 hours" across a DST change is still two
    real hours.
    """
    s = _clean(text)
    if not s:
        return None
    parts = _DURATION_PART.findall(s)
    if not parts:
        return None
    amounts = {}
    for amount, unit in parts:
        name = _UNIT_NAMES[unit.lower()]
        amounts[name] = amounts.get(name, 0) + int(amount)

    elapsed = {k: amounts.pop(k) for k in _ELAPSED_UNITS if k in amounts}
    return Duration(calendar=relativedelta(**amounts), elapsed=timedelta(**elapsed))


def add_duration(start: datetime, duration: Duration, zone: Zone) -> datetime:
    local = start.astimezone(zone.tz)
    if duration.calendar:
        local = _localize(local.replace(tzinfo=None) + duration.calendar, zone)
    return zone.normalize(local + duration.elapsed)


def _localize(naive: datetime, zone: Zone) -> datetime:
    # pytz picks standard time for ambiguous or skipped wall-clock times
    return zone.localize(naive)


def _parse_text(value: str, zone: Zone) -> Optional[datetime]:
    # Embedded zone names are ignored: the resolved zone already decided.
    try:
        naive = duparser.parse(value, ignoretz=True)
    except (duparser.ParserError, ValueError, OverflowError):
        naive = dateparser.parse(
            value,
            languages=["en"],
            settings={"TIMEZONE": zone.key, "RETURN_AS_TIMEZONE_AWARE": False},
        )
        if naive is None:
            return None
    return _localize(naive.replace(tzinfo=None), zone)


def _parse_timestamp(value: str, zone: Zone) -> Optional[datetime]:
    try:
        utc = datetime.fromtimestamp(float(value), tz=pytz.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return utc.astimezone(zone.tz)


def parse_datetime(value: Optional[str], zone: Zone) -> Optional[datetime]:
    """ISO-like wall clock, then free text, then a Unix timestamp."""
    s = _clean(value)
    if not s:
        return None

    if ISO_UTC.match(s):
        # The trailing Z is stripped, not honoured.
        try:
            naive = datetime.strptime(s.replace("T", " ").replace("Z", ""), "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None
        return _localize(naive, zone)

    if NUMERIC.match(s):
        return _parse_timestamp(s, zone)

    return _parse_text(s, zone)


def today(zone: Zone) -> datetime:
    """Local midnight of the current day in `zone`."""
    now = datetime.now(zone.tz)
    return _localize(datetime(now.year, now.month, now.day), zone)


def parse_start(value: Optional[str], zone: Zone) -> Tuple[Optional[datetime], bool]:
    """Returns (start, all_day). A None start means the event is invalid."""
    s = _clean(value)
    m = BARE_DATE.match(s)
    if m:
        try:
            day = datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None, False
        return _localize(day, zone), True

    return parse_datetime(s, zone), False


def parse_end(
    value: Optional[str],
    zone: Zone,
    start: Optional[datetime] = None,
    duration: Optional[str] = None,
) -> datetime:
    s = _clean(value)
    if not s and duration and start is not None:
        offset = parse_duration(duration)
        if offset is not None:
            return add_duration(start, offset, zone)

    end = parse_datetime(s, zone)
    if end is not None:
        return end

    return datetime.now(zone.tz)


def format_datetime(value: Optional[datetime], zone: Zone, all_day: bool = False) -> str:
    """`EST:20240615T190000`, or `EST:20240615` for all-day events."""
    if value is None:
        return ""
    local = value.astimezone(zone.tz)
    stamp = local.strftime("%Y%m%d") if all_day else local.strftime("%Y%m%dT%H%M%S")
    return f"{zone.label}:{stamp}"
