# caldom/timezones.py
"""
Timezone resolution for schedule pages.

Sources write zones every which way: "ET", "EST", "EDT", "America/New_York",
or "TBD" when the kickoff time is not known yet. `ZoneResolver` turns all of
those into one `Zone`, and never fails: anything unrecognised lands on the
default zone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import pytz

DEFAULT_TIMEZONE = "America/New_York"

TBD = "TBD"

# Two-letter US codes become three-letter standard abbreviations: ET -> EST.
SHORT_US_CODES = ("ET", "CT", "MT", "PT")

# abbreviation -> candidate zones, first one wins
ABBREVIATIONS: Dict[str, Tuple[str, ...]] = {
    "EST": ("America/New_York", "America/Detroit", "America/Indiana/Indianapolis"),
    "EDT": ("America/New_York", "America/Detroit", "America/Indiana/Indianapolis"),
    "CST": ("America/Chicago", "America/Winnipeg"),
    "CDT": ("America/Chicago", "America/Winnipeg"),
    "MST": ("America/Denver", "America/Phoenix", "America/Boise"),
    "MDT": ("America/Denver", "America/Boise"),
    "PST": ("America/Los_Angeles",),
    "PDT": ("America/Los_Angeles",),
    "AKST": ("America/Anchorage",),
    "AKDT": ("America/Anchorage",),
    "HST": ("Pacific/Honolulu",),
    "AST": ("America/Puerto_Rico",),
    "UTC": ("UTC",),
    "GMT": ("UTC",),
}

# zone -> label written in front of formatted datetimes
CANONICAL_LABELS: Dict[str, str] = {
    "America/New_York": "EST",
    "America/Detroit": "EST",
    "America/Indiana/Indianapolis": "EST",
    "America/Chicago": "CST",
    "America/Winnipeg": "CST",
    "America/Denver": "MST",
    "America/Phoenix": "MST",
    "America/Boise": "MST",
    "America/Los_Angeles": "PST",
    "America/Anchorage": "AKST",
    "Pacific/Honolulu": "HST",
    "America/Puerto_Rico": "AST",
    "UTC": "UTC",
}

_REGION_CITY = re.compile(r"^[A-Za-z_]+(?:/[A-Za-z0-9_+\-]+)+$")


@dataclass(frozen=True)
class Zone:
    key: str
    label: str
    tz: pytz.BaseTzInfo = field(compare=False, repr=False)

    def localize(self, naive):
        return self.tz.localize(naive)

    def normalize(self, aware):
        return self.tz.normalize(aware)


@dataclass(frozen=True)
class ZoneResolution:
    zone: Zone
    all_day: bool = False


def expand_short_code(value: str) -> str:
    """ET -> EST, CT -> CST, MT -> MST, PT -> PST; anything else unchanged."""
    if value in SHORT_US_CODES:
        return value[0] + "S" + value[1]
    return value


class ZoneResolver:
    def __init__(
        self,
        abbreviations: Optional[Mapping[str, Sequence[str]]] = None,
        labels: Optional[Mapping[str, str]] = None,
        default: str = DEFAULT_TIMEZONE,
    ):
        table = ABBREVIATIONS if abbreviations is None else abbreviations
        self.abbreviations = {k.upper(): tuple(v) for k, v in table.items()}
        self.labels = dict(CANONICAL_LABELS if labels is None else labels)
        self.default = self.zone(default)

    def zone(self, key: str) -> Zone:
        tz = pytz.timezone(key)
        return Zone(key=tz.zone, label=self.labels.get(tz.zone, tz.zone), tz=tz)

    def _lookup_abbreviation(self, value: str) -> Optional[Zone]:
        for key in self.abbreviations.get(value.upper(), ()):
            try:
                return self.zone(key)
            except pytz.UnknownTimeZoneError:
                continue
        return None

    def resolve(self, raw: Optional[str]) -> ZoneResolution:
        value = (raw or "").strip()

        # No timezone means no game time yet.
        all_day = value == TBD

        value = expand_short_code(value)

        zone = self._lookup_abbreviation(value) if value else None
        if zone is None and _REGION_CITY.match(value):
            try:
                zone = self.zone(value)
            except pytz.UnknownTimeZoneError:
                zone = None

        return ZoneResolution(zone=zone or self.default, all_day=all_day)


default_resolver = ZoneResolver()


def resolve_timezone(raw: Optional[str], resolver: Optional[ZoneResolver] = None) -> ZoneResolution:
    return (resolver or default_resolver).resolve(raw)
