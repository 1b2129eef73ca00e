# caldom/errors.py
from __future__ import annotations


class CalDomError(Exception):
    """Base class for every failure raised while building a calendar."""


class ConfigParseFailure(CalDomError):
    pass


class FetchFailure(CalDomError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class WriteFailure(CalDomError):
    def __init__(self, path, reason: str):
        super().__init__(f"Failed to save calendar to {path}: {reason}")
        self.path = path
        self.reason = reason


class FieldExtractionFailure(CalDomError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"Could not extract field '{field}': {reason}")
        self.field = field
        self.reason = reason
