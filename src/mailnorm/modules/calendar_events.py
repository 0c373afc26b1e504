"""
Calendar Normalizer
Turns text/calendar attachments into CalendarEvent records

Instants are resolved from the iCalendar text form of each property
(``YYYYMMDD``, ``YYYYMMDDTHHMMSS``, ``YYYYMMDDTHHMMSSZ``) plus its TZID
parameter, then converted to Unix epoch milliseconds:

- floating date-time (no zone): UTC
- UTC date-time: as is
- date-time with TZID: localized with zoneinfo; an unknown zone or a local
  time that is ambiguous or skipped by a DST transition yields None
- date only: midnight UTC

A calendar that fails to parse contributes no events. Nothing here raises.
"""

import logging
import re
from concurrent.futures import Executor
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from icalendar import Calendar

from .email_data import CalendarEvent, CalendarEventStatus
from .email_parser import Attachment
from ..utils.parallel import ordered_flat_map


logger = logging.getLogger(__name__)

CALENDAR_CONTENT_TYPE = "text/calendar"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ICAL_DATE_TIME_PATTERN = re.compile(
    r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})(Z)?)?$"
)

_STATUSES = {status.value: status for status in CalendarEventStatus}


def to_epoch_millis(
    value: Union[date, datetime],
    tzid: Optional[str] = None,
) -> Optional[int]:
    """
    Resolve a date or date-time to Unix epoch milliseconds

    Args:
        value: date, naive datetime (floating or local to tzid) or aware datetime
        tzid: IANA zone identifier for a naive value

    Returns:
        Milliseconds since the epoch, or None if the local time cannot be
        placed unambiguously in tzid
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            if tzid:
                value = _localize(value, tzid)
                if value is None:
                    return None
            else:
                value = value.replace(tzinfo=timezone.utc)
        resolved = value
    else:
        resolved = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    delta = resolved - EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def _localize(value: datetime, tzid: str) -> Optional[datetime]:
    try:
        zone = ZoneInfo(tzid)
    except (ZoneInfoNotFoundError, ValueError):
        logger.debug("Unknown TZID %r", tzid)
        return None

    earlier = value.replace(tzinfo=zone, fold=0)
    later = value.replace(tzinfo=zone, fold=1)
    # differing offsets mean the wall time is ambiguous or does not exist
    if earlier.utcoffset() != later.utcoffset():
        return None
    return earlier


def parse_ical_date_time(text: str) -> Optional[Union[date, datetime]]:
    """
    Parse the iCalendar text form of a DATE or DATE-TIME value

    Returns:
        date, naive datetime (floating) or UTC datetime; None if malformed
    """
    match = ICAL_DATE_TIME_PATTERN.match(text.strip())
    if match is None:
        return None

    year, month, day, hour, minute, second, utc = match.groups()
    try:
        if hour is None:
            return date(int(year), int(month), int(day))
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second),
            tzinfo=timezone.utc if utc else None,
        )
    except ValueError:
        return None


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text(component, name: str) -> Optional[str]:
    value = _first(component.get(name))
    if value is None:
        return None
    return str(value)


def _property_instant(component, name: str) -> Optional[int]:
    """Read a DATE/DATE-TIME property by its text form and TZID"""
    prop = _first(component.get(name))
    if prop is None:
        return None

    try:
        raw = prop.to_ical()
    except Exception as e:
        logger.debug("Unreadable %s property: %s", name, e)
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    value = parse_ical_date_time(raw)
    if value is None:
        return None

    params = getattr(prop, "params", None) or {}
    return to_epoch_millis(value, params.get("TZID"))


def _modified_time(component) -> Optional[int]:
    """
    LAST-MODIFIED through the typed accessor, falling back to the raw
    property text only when the accessor yields nothing
    """
    try:
        decoded = component.decoded("LAST-MODIFIED")
    except Exception:
        decoded = None

    if isinstance(decoded, (date, datetime)):
        return to_epoch_millis(decoded)
    return _property_instant(component, "LAST-MODIFIED")


def _status(component) -> Optional[CalendarEventStatus]:
    value = _text(component, "STATUS")
    if value is None:
        return None
    return _STATUSES.get(value.strip().upper())


def parse_event(component) -> CalendarEvent:
    """Normalize one VEVENT; missing or malformed fields become None"""
    return CalendarEvent(
        uid=_text(component, "UID"),
        summary=_text(component, "SUMMARY"),
        description=_text(component, "DESCRIPTION"),
        location=_text(component, "LOCATION"),
        organizer=_text(component, "ORGANIZER"),
        url=_text(component, "URL"),
        status=_status(component),
        timestamp=_property_instant(component, "DTSTAMP"),
        last_modified=_modified_time(component),
        created=_property_instant(component, "CREATED"),
        start=_property_instant(component, "DTSTART"),
        end=_property_instant(component, "DTEND"),
    )


def parse_calendar(text: str) -> List[CalendarEvent]:
    """All events of an iCalendar document; an unparsable one has none"""
    try:
        calendars = Calendar.from_ical(text, multiple=True)
    except Exception as e:
        logger.debug("Skipping unparsable calendar attachment: %s", e)
        return []

    return [
        parse_event(component)
        for calendar in calendars
        for component in calendar.walk("VEVENT")
    ]


def parse_calendar_events(
    attachments: List[Attachment],
    executor: Optional[Executor] = None,
) -> List[CalendarEvent]:
    """Events from every text/calendar attachment, in attachment order"""
    calendars = [
        attachment.content
        for attachment in attachments
        if attachment.content_type == CALENDAR_CONTENT_TYPE
    ]
    return ordered_flat_map(parse_calendar, calendars, executor)
