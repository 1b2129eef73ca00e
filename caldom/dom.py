# caldom/dom.py
"""
Small helpers around BeautifulSoup: parsing, selecting within a fragment and
turning markup back into plain text.
"""
from __future__ import annotations

import re
from typing import List, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag

_WS = re.compile(r"\s+")


def soupify(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def fragment(html: str) -> BeautifulSoup:
    # html.parser keeps a fragment as-is instead of wrapping it in <html><body>
    return BeautifulSoup(html or "", "html.parser")


def clean_text(s: Optional[str]) -> str:
    if not s:
        return ""
    return _WS.sub(" ", s).strip()


def inner_html(node: Tag) -> str:
    return node.decode_contents()


def attribute(node: Tag, name: str) -> Optional[str]:
    value = node.get(name)
    if value is None:
        return None
    # multi-valued attributes (class, rel, ...) come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def select_values(node: Tag, selector: str, attr: Optional[str] = None) -> List[str]:
    """Inner HTML (or one attribute) of every element matching `selector`."""
    values = []
    for el in node.select(selector):
        if attr:
            v = attribute(el, attr)
            if v is not None:
                values.append(v)
        else:
            values.append(inner_html(el))
    return values


def strip_markup(value: Union[str, Tag, None]) -> str:
    """Drop tags and decode entities; whitespace is left alone."""
    if value is None:
        return ""
    if isinstance(value, Tag):
        return value.get_text()
    if isinstance(value, NavigableString):
        return str(value)
    if "<" not in value and "&" not in value:
        return value
    return fragment(value).get_text()


def text(value: Union[str, Tag, None]) -> str:
    """Visible text with whitespace collapsed."""
    return clean_text(strip_markup(value))
