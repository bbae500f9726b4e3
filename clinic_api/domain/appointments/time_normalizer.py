"""
Canonical date/time strings for appointments.

Dates are YYYY-MM-DD and times HH:MM:SS, both wall-clock with no time zone.
Values are never round-tripped through an aware datetime: a timestamp string
keeps the calendar day written before its "T", whatever offset follows.
The same functions run on input and on rows read back from storage, so
drivers that hand back date/time objects still produce canonical strings.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Union

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"([0-1][0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?")

DateInput = Union[str, date, datetime]
TimeInput = Union[str, time, datetime, timedelta]


class InvalidFormat(ValueError):
    """Raised when a value cannot be expressed as a canonical date or time"""


def normalize_date(value: DateInput) -> str:
    if isinstance(value, date):
        # datetime is a date subclass; its own (local) fields are used as-is
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"

    if not isinstance(value, str):
        raise InvalidFormat(f'Invalid date format: "{value}". Expected format: YYYY-MM-DD')

    candidate = value.split("T", 1)[0] if "T" in value else value
    if not DATE_PATTERN.fullmatch(candidate):
        raise InvalidFormat(f'Invalid date format: "{candidate}". Expected format: YYYY-MM-DD')
    return candidate


def normalize_time(value: TimeInput) -> str:
    if isinstance(value, datetime):
        value = value.time()

    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"

    if isinstance(value, timedelta):
        # Some drivers return TIME columns as an offset from midnight
        total = int(value.total_seconds())
        if not 0 <= total < 24 * 3600:
            raise InvalidFormat(f'Invalid time value: "{value}"')
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
        raise InvalidFormat(f'Invalid time format: "{value}". Expected format: HH:MM:SS or HH:MM')

    if len(value) == 5:
        return f"{value}:00"
    return value
