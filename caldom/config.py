# caldom/config.py
"""
Calendar configuration.

A calendar is described by one YAML file:

    title: US Soccer Men's Schedule
    name: usmnt
    url: https://example.com/schedule        # or a list of urls
    base_url: https://example.com
    variant: trailing_timezone               # optional
    events:
      selector: tr.match
      title: {selector: "td.matchup"}
      endtime: {duration: "2 hours"}

Everything is validated once here and frozen; the rest of the package never
looks at raw YAML except through `CalendarConfig.raw`.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .errors import ConfigParseFailure

# Processing order matters: timezone must be resolved before any time field.
FIELD_ORDER: Tuple[str, ...] = (
    "title",
    "description",
    "timezone",
    "starttime",
    "endtime",
    "location",
    "url",
)

DEFAULT_JOIN = " "


@dataclass(frozen=True)
class FieldSpec:
    selector: Optional[str] = None
    attribute: Optional[str] = None
    join: str = DEFAULT_JOIN
    duration: Optional[str] = None


@dataclass(frozen=True)
class CalendarConfig:
    title: str
    name: str
    urls: Tuple[str, ...]
    events_selector: str
    fields: Mapping[str, FieldSpec]
    base_url: Optional[str] = None
    variant: Optional[str] = None
    date_header: Optional[str] = None
    render_js: bool = False
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def field_spec(self, name: str) -> FieldSpec:
        return self.fields.get(name) or FieldSpec()


def _field_spec(name: str, data: Any) -> FieldSpec:
    if data is None:
        return FieldSpec()
    if isinstance(data, str):
        # shorthand: `title: "td.matchup"`
        return FieldSpec(selector=data)
    if not isinstance(data, dict):
        raise ConfigParseFailure(f"events.{name} must be a mapping, got {type(data).__name__}")

    join = data.get("join", DEFAULT_JOIN)
    duration = data.get("duration")
    return FieldSpec(
        selector=data.get("selector") or None,
        attribute=data.get("attribute") or None,
        join=DEFAULT_JOIN if join is None else str(join),
        duration=str(duration) if duration not in (None, "") else None,
    )


def _urls(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not value:
        raise ConfigParseFailure("'url' must be a url or a non-empty list of urls")
    urls = tuple(str(u).strip() for u in value if u and str(u).strip())
    if not urls:
        raise ConfigParseFailure("'url' must be a url or a non-empty list of urls")
    return urls


def parse_config(data: Any) -> CalendarConfig:
    """Validate an already-loaded YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigParseFailure("calendar configuration must be a mapping")

    name = str(data.get("name") or "").strip()
    if not name:
        raise ConfigParseFailure("calendar configuration is missing 'name'")

    events = data.get("events")
    if not isinstance(events, dict) or not events.get("selector"):
        raise ConfigParseFailure(f"{name}: 'events.selector' is required")

    fields: Dict[str, FieldSpec] = {}
    for fname in FIELD_ORDER:
        if fname in events:
            fields[fname] = _field_spec(fname, events[fname])

    base_url = data.get("base_url")
    return CalendarConfig(
        title=str(data.get("title") or name),
        name=name,
        urls=_urls(data.get("url")),
        events_selector=str(events["selector"]),
        fields=MappingProxyType(fields),
        base_url=str(base_url).strip() if base_url else None,
        variant=data.get("variant") or None,
        date_header=data.get("date_header") or None,
        render_js=bool(data.get("render_js", False)),
        raw=MappingProxyType(copy.deepcopy(data)),
    )


def load_config(source: Union[str, Path, Mapping[str, Any]]) -> CalendarConfig:
    """
    Load a calendar configuration from a YAML file path or a mapping.
    Raises ConfigParseFailure for unreadable files, bad YAML or missing keys.
    """
    if isinstance(source, Mapping):
        return parse_config(dict(source))

    path = Path(source)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseFailure(f"Unable to read {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseFailure(f"Unable to parse the YAML file {path}: {e}") from e

    return parse_config(data)
