# caldom/variants.py
"""
Calendar variants: per-site quirks kept out of the generic pipeline.

A variant bundles field processors (field name -> function turning the raw
values into one string) and a document preparation step that runs on a copy
of each fetched page before events are selected. Pick one with
`variant: <name>` in the calendar YAML.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from .config import CalendarConfig, FieldSpec
from .dom import text
from .errors import ConfigParseFailure
from .event import EventBuilder, Processor, join_values

DocumentHook = Callable[[BeautifulSoup, CalendarConfig], BeautifulSoup]


def keep_document(doc: BeautifulSoup, config: CalendarConfig) -> BeautifulSoup:
    return doc


@dataclass(frozen=True)
class CalendarVariant:
    name: str
    processors: Mapping[str, Processor] = field(default_factory=dict)
    prepare: DocumentHook = keep_document

    def processor(self, field_name: str) -> Processor:
        return self.processors.get(field_name, join_values)

    def prepare_document(self, doc: BeautifulSoup, config: CalendarConfig) -> BeautifulSoup:
        # hooks get their own copy; the fetched page stays untouched
        return self.prepare(copy.copy(doc), config)


# -- processors ----------------------------------------------------------------

def trailing_token(values: List[str], spec: FieldSpec, event: EventBuilder) -> str:
    """"7:00 PM ET" -> "ET": the zone is the last word of a composite time."""
    parts = text(join_values(values, spec, event)).split(" ")
    return parts[-1] if parts else ""


def drop_sponsorship(values: List[str], spec: FieldSpec, event: EventBuilder) -> str:
    """"USA vs Mexico, presented by Acme" -> "USA vs Mexico"."""
    joined = text(join_values(values, spec, event))
    return joined.split(",", 1)[0].strip()


# -- document hooks --------------------------------------------------------------

def propagate_date_headers(doc: BeautifulSoup, config: CalendarConfig) -> BeautifulSoup:
    """
    Pages that list many rows under one date heading only carry the time in
    each row. Prefix every row's starttime element with the text of the most
    recent heading so the row can be parsed on its own.
    """
    header = config.date_header
    target = config.field_spec("starttime").selector
    if not header or not target:
        logging.warning("%s: date_header variant needs 'date_header' and events.starttime.selector", config.name)
        return doc

    try:
        nodes = doc.select(f"{header}, {config.events_selector}")
        headers = set(id(n) for n in doc.select(header))
    except SelectorSyntaxError as e:
        logging.warning("%s: bad date_header selector %r: %s", config.name, header, e)
        return doc

    current = ""
    for node in nodes:
        if id(node) in headers:
            current = text(node)
            continue
        if not current:
            continue
        for el in node.select(target):
            existing = el.decode_contents()
            el.clear()
            el.append(f"{current} {text(existing)}".strip())
    return doc


# -- registry ----------------------------------------------------------------------

_VARIANTS: Dict[str, CalendarVariant] = {}


def register_variant(variant: CalendarVariant) -> CalendarVariant:
    _VARIANTS[variant.name] = variant
    return variant


DEFAULT = register_variant(CalendarVariant(name="default"))

register_variant(CalendarVariant(
    name="trailing_timezone",
    processors=MappingProxyType({
        "timezone": trailing_token,
        "title": drop_sponsorship,
    }),
))

register_variant(CalendarVariant(
    name="date_header",
    prepare=propagate_date_headers,
))


def get_variant(name: Optional[str]) -> CalendarVariant:
    if not name:
        return DEFAULT
    try:
        return _VARIANTS[name]
    except KeyError:
        known = ", ".join(sorted(_VARIANTS))
        raise ConfigParseFailure(f"Unknown calendar variant {name!r} (known: {known})") from None
