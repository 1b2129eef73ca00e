# caldom/templating.py
"""
Jinja2 rendering for .ics output.

Templates live in caldom/templates. Rendered text is cleaned up to what
RFC 5545 expects: no blank lines, CRLF endings, lines folded at 75 octets.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List

from icalendar.parser import escape_char, foldline
from jinja2 import Environment, PackageLoader, StrictUndefined

CALENDAR_TEMPLATE = "ical.ics.j2"

MAX_LINE_OCTETS = 75


def ics_escape(value: Any) -> str:
    s = "" if value is None else str(value)
    return escape_char(s.replace("\r\n", "\n").replace("\r", "\n"))


def fold_line(line: str) -> List[str]:
    """Split one content line into RFC 5545 folded chunks (no mid-character splits)."""
    return foldline(line, limit=MAX_LINE_OCTETS).split("\r\n")


def finalize(text: str) -> str:
    lines: List[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        lines.extend(fold_line(line.rstrip()))
    return "\r\n".join(lines) + "\r\n"


@lru_cache(maxsize=1)
def environment() -> Environment:
    env = Environment(
        loader=PackageLoader("caldom", "templates"),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["ics_escape"] = ics_escape
    return env


def render(template_name: str, context: Dict[str, Any]) -> str:
    return finalize(environment().get_template(template_name).render(**context))
