# caldom/event.py
"""
One calendar event, extracted from one DOM fragment.

`build_event` walks the fields in FIELD_ORDER. For each field it collects the
raw values from the fragment, hands them to the calendar's processor for that
field, then stores the result with the matching setter. The finished `Event`
is frozen.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .config import FIELD_ORDER, CalendarConfig, FieldSpec
from .dates import format_datetime, parse_end, parse_start, today
from .dom import clean_text, fragment, select_values, strip_markup, text
from .errors import FieldExtractionFailure
from .timezones import Zone, ZoneResolver, default_resolver


class Status(enum.Enum):
    INVALID = "invalid"
    ALL_DAY = "all_day"
    SCHEDULED = "scheduled"


# (values, field spec, event under construction) -> single processed value
Processor = Callable[[List[str], FieldSpec, "EventBuilder"], str]


def join_values(values: List[str], spec: FieldSpec, event: "EventBuilder") -> str:
    return spec.join.join(v for v in values if v is not None)


def _identity_host(url: str) -> str:
    return url


@dataclass(frozen=True)
class Event:
    title: str
    description: str
    location: str
    zone: Zone
    start: Optional[datetime]
    end: Optional[datetime]
    url: str
    status: Status

    @property
    def all_day(self) -> bool:
        return self.status is Status.ALL_DAY

    def is_valid(self) -> bool:
        return self.status in (Status.ALL_DAY, Status.SCHEDULED)

    @property
    def start_time(self) -> str:
        return format_datetime(self.start, self.zone, self.all_day)

    @property
    def end_time(self) -> str:
        return format_datetime(self.end, self.zone, self.all_day)

    def uid(self, calendar_name: str) -> str:
        return f"{calendar_name}-{self.start_time}"

    def render(self, calendar_name: str) -> Dict[str, object]:
        return {
            "uid": self.uid(calendar_name),
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "url": self.url,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "allDay": self.all_day,
        }


@dataclass
class EventBuilder:
    """Mutable working state while one fragment is being read."""

    config: CalendarConfig
    resolver: ZoneResolver = default_resolver
    url_host: Callable[[str], str] = _identity_host

    title: str = ""
    description: str = ""
    location: str = ""
    zone: Optional[Zone] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    url: str = ""
    timezone_tbd: bool = False
    date_only: bool = False
    raw: Dict[str, str] = field(default_factory=dict)

    # -- setters -------------------------------------------------------------

    def set_title(self, value: str) -> None:
        self.title = text(value)

    def set_description(self, value: str) -> None:
        self.description = describe(value, self.url_host)

    def set_location(self, value: str) -> None:
        self.location = text(value)

    def set_timezone(self, value: str) -> None:
        resolution = self.resolver.resolve(text(value))
        self.zone = resolution.zone
        self.timezone_tbd = resolution.all_day

    def set_starttime(self, value: str) -> None:
        self.start, self.date_only = parse_start(text(value), self._zone())
        if self.start is None and self.timezone_tbd:
            # kickoff not announced yet: list it as an all-day event today
            self.start = today(self._zone())

    def set_endtime(self, value: str) -> None:
        spec = self.config.field_spec("endtime")
        self.end = parse_end(text(value), self._zone(), self.start, spec.duration)

    def set_url(self, value: str) -> None:
        self.url = self.url_host(text(value))

    def _zone(self) -> Zone:
        if self.zone is None:
            self.zone = self.resolver.default
        return self.zone

    # -- status --------------------------------------------------------------

    @property
    def status(self) -> Status:
        if self.start is None:
            return Status.INVALID
        if self.timezone_tbd or self.date_only:
            return Status.ALL_DAY
        return Status.SCHEDULED

    def freeze(self) -> Event:
        return Event(
            title=self.title,
            description=self.description,
            location=self.location,
            zone=self._zone(),
            start=self.start,
            end=self.end,
            url=self.url,
            status=self.status,
        )


FIELD_STEPS: Tuple[Tuple[str, Callable[[EventBuilder, str], None]], ...] = tuple(
    (name, getattr(EventBuilder, f"set_{name}")) for name in FIELD_ORDER
)


def describe(value: str, url_host: Callable[[str], str] = _identity_host) -> str:
    """
    Plain-text description with the links pulled out:

        <body text>

        <link text>:
        <link url>

    Links keep source order; the body is omitted when nothing but links
    remains.
    """
    if not value:
        return ""
    soup = fragment(value)
    links = []
    for a in soup.select("a[href]"):
        href = url_host((a.get("href") or "").strip())
        label = clean_text(a.get_text()) or href
        if href:
            links.append(f"{label}:\n{href}")
        a.decompose()

    body = clean_text(strip_markup(soup))
    paragraphs = ([body] if body else []) + links
    return "\n\n".join(paragraphs)


def extract_raw(node: Tag, name: str, spec: FieldSpec) -> List[str]:
    if not spec.selector:
        return []
    try:
        return select_values(node, spec.selector, spec.attribute)
    except (SelectorSyntaxError, ValueError, TypeError) as e:
        raise FieldExtractionFailure(name, str(e)) from e


def build_event(
    node: Tag,
    config: CalendarConfig,
    processors: Optional[Mapping[str, Processor]] = None,
    resolver: Optional[ZoneResolver] = None,
    url_host: Optional[Callable[[str], str]] = None,
) -> Event:
    builder = EventBuilder(
        config=config,
        resolver=resolver or default_resolver,
        url_host=url_host or _identity_host,
    )
    processors = processors or {}

    for name, setter in FIELD_STEPS:
        spec = config.field_spec(name)
        try:
            values = extract_raw(node, name, spec)
        except FieldExtractionFailure as e:
            logging.warning("%s: %s", config.name, e)
            values = []

        process = processors.get(name, join_values)
        value = process(values, spec, builder) or ""
        builder.raw[name] = value
        setter(builder, value)

    return builder.freeze()
