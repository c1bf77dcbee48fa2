"""
Date and Time utilities

This module handles UTC normalisation, XMLTV timestamp parsing and the
broadcast-day boundary used by window replacement.
"""
from datetime import datetime, timezone


XMLTV_TIME_FORMAT = "%Y%m%d%H%M%S"


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def ensure_utc(value: datetime) -> datetime:
    """
    Return ``value`` as a timezone-aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_xmltv_time(time_str: str) -> datetime:
    """
    Convert an XMLTV timestamp to a UTC datetime

    Args:
        time_str: XMLTV time like '20080715003000 -0600'. The offset is optional
            and defaults to UTC when missing.

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If the timestamp cannot be parsed
    """
    cleaned = time_str.strip() if time_str else ""
    parts = cleaned.split()
    try:
        if len(parts) == 1:
            parsed = datetime.strptime(parts[0], XMLTV_TIME_FORMAT)
        elif len(parts) == 2:
            parsed = datetime.strptime(f"{parts[0]} {parts[1]}", f"{XMLTV_TIME_FORMAT} %z")
        else:
            raise ValueError("unexpected number of fields")
    except ValueError as e:
        raise DateFormatError(f"Invalid XMLTV datetime format: '{time_str}'") from e

    return ensure_utc(parsed)


def end_of_utc_day(value: datetime) -> datetime:
    """
    Last whole second (23:59:59) of the UTC calendar day ``value`` falls on.

    A programme starting at 23:50 and ending after midnight is still bounded by
    the day it starts on.
    """
    return ensure_utc(value).replace(hour=23, minute=59, second=59, microsecond=0)
