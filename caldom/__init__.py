# Keep this package lightweight; re-export the public entry points only.
from .calendar import Calendar
from .config import CalendarConfig, FieldSpec, load_config
from .errors import CalDomError, ConfigParseFailure, FetchFailure, FieldExtractionFailure, WriteFailure
from .event import Event, Status, build_event
from .timezones import ZoneResolver, resolve_timezone
from .variants import CalendarVariant, register_variant

__all__ = [
    "Calendar",
    "CalendarConfig",
    "FieldSpec",
    "load_config",
    "CalDomError",
    "ConfigParseFailure",
    "FetchFailure",
    "FieldExtractionFailure",
    "WriteFailure",
    "Event",
    "Status",
    "build_event",
    "ZoneResolver",
    "resolve_timezone",
    "CalendarVariant",
    "register_variant",
]
