# caldom/calendar.py
"""
Calendar orchestration: config -> fetched pages -> events -> .ics file.

    cal = Calendar.load("calendars/usmnt.yml")
    cal.generate_calendar("public/ics")
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from . import templating
from .config import FIELD_ORDER, CalendarConfig, load_config
from .dom import soupify
from .errors import FetchFailure, WriteFailure
from .event import Event, build_event
from .fetch import fetch_html
from .timezones import ZoneResolver, default_resolver
from .variants import CalendarVariant, get_variant

Fetcher = Callable[[str], str]

_HAS_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


class Calendar:
    def __init__(
        self,
        config: CalendarConfig,
        variant: Optional[CalendarVariant] = None,
        fetcher: Optional[Fetcher] = None,
        resolver: Optional[ZoneResolver] = None,
    ):
        self.config = config
        self.variant = variant or get_variant(config.variant)
        self.resolver = resolver or default_resolver
        self._fetcher = fetcher
        self._documents: Optional[List[BeautifulSoup]] = None
        self._events: Optional[List[Event]] = None

    @classmethod
    def load(
        cls,
        source: Union[str, Path, Mapping[str, Any]],
        variant: Optional[CalendarVariant] = None,
        fetcher: Optional[Fetcher] = None,
        resolver: Optional[ZoneResolver] = None,
    ) -> "Calendar":
        """Raises ConfigParseFailure for a bad file or an unknown variant."""
        config = load_config(source)
        return cls(config, variant=variant, fetcher=fetcher, resolver=resolver)

    @property
    def name(self) -> str:
        return self.config.name

    # -- fetch & prepare ---------------------------------------------------------

    def _fetch(self, url: str) -> str:
        if self._fetcher is not None:
            return self._fetcher(url)
        return fetch_html(url, render_js=self.config.render_js, wait_selector=self.config.events_selector)

    def fetch_documents(self) -> List[BeautifulSoup]:
        """Every configured url, in order. Any FetchFailure aborts the calendar."""
        documents = []
        for url in self.config.urls:
            html = self._fetch(url)
            if not html or not html.strip():
                raise FetchFailure(url, "empty response")
            logging.info("%s: fetched %s (%d bytes)", self.name, url, len(html))
            documents.append(self.prepare_document(soupify(html)))
        self._documents = documents
        return documents

    def prepare_document(self, document: BeautifulSoup) -> BeautifulSoup:
        return self.variant.prepare_document(document, self.config)

    @property
    def documents(self) -> List[BeautifulSoup]:
        if self._documents is None:
            self.fetch_documents()
        return self._documents

    # -- events ------------------------------------------------------------------

    def extract_events(self) -> List[Event]:
        processors = {name: self.variant.processor(name) for name in FIELD_ORDER}
        events: List[Event] = []
        for document in self.documents:
            try:
                fragments = document.select(self.config.events_selector)
            except SelectorSyntaxError as e:
                logging.warning("%s: bad events selector %r: %s", self.name, self.config.events_selector, e)
                fragments = []
            for node in fragments:
                events.append(build_event(
                    node,
                    self.config,
                    processors=processors,
                    resolver=self.resolver,
                    url_host=self.set_url_host,
                ))
        self._events = events
        return events

    @property
    def events(self) -> List[Event]:
        if self._events is None:
            self.extract_events()
        return self._events

    def valid_events(self) -> List[Event]:
        return [e for e in self.events if e.is_valid()]

    # -- output ------------------------------------------------------------------

    def render(self) -> str:
        events = self.valid_events()
        skipped = len(self.events) - len(events)
        if skipped:
            logging.info("%s: skipped %d event(s) without a usable start time", self.name, skipped)

        context = {
            "title": self.config.title,
            "name": self.name,
            "stamp": datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"),
            "events": [e.render(self.name) for e in events],
        }
        return templating.render(templating.CALENDAR_TEMPLATE, context)

    def generate_calendar(self, output_dir: Union[str, Path] = ".") -> Path:
        """Write <output_dir>/<name>.ics and return its path."""
        calendar = self.render()
        path = Path(output_dir) / f"{self.name}.ics"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the CRLF endings the template produced
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(calendar)
        except OSError as e:
            raise WriteFailure(path, str(e)) from e

        logging.info("Calendar '%s.ics' successfully created!", self.name)
        return path

    # -- helpers -----------------------------------------------------------------

    def set_url_host(self, url: str) -> str:
        """Ensure a URL has a hostname; absolute URLs pass through."""
        url = (url or "").strip()
        if not url or _HAS_SCHEME.match(url) or not self.config.base_url:
            return url
        return self.config.base_url.rstrip("/") + "/" + url.lstrip("/")

    def get_cal_info(self, key: Optional[str] = None) -> Any:
        if key is None:
            return dict(self.config.raw)
        return self.config.raw.get(key)
