"""Parsing and formatting of HH:MM:SS timestamps."""

import re
from datetime import timedelta

from clip_extractor.domain.models import TimeRange
from clip_extractor.exceptions import InvalidTimeRangeError, InvalidTimestampError

_TIMESTAMP = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2})")


def parse_timestamp(timestamp: str) -> timedelta:
    """
    Parses a timestamp of exactly two digits per hour, minute and second group.

    Groups are not range checked, so "00:00:90" is ninety seconds.

    Raises:
        InvalidTimestampError: If the string does not match HH:MM:SS.
    """
    match = _TIMESTAMP.fullmatch(timestamp)
    if match is None:
        raise InvalidTimestampError(timestamp)
    hours, minutes, seconds = (int(group) for group in match.groups())
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def format_timestamp(duration: timedelta) -> str:
    """Renders a duration as HH:MM:SS, rounded to the nearest second."""
    total = duration.total_seconds()
    sign = "-" if total < 0 else ""
    # Round half away from zero
    seconds = int(abs(total) + 0.5)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_time_range(start: str, end: str) -> TimeRange:
    """
    Parses both clip boundaries and checks their order.

    Raises:
        InvalidTimestampError: If either timestamp is malformed.
        InvalidTimeRangeError: If end is not strictly after start.
    """
    start_offset = parse_timestamp(start)
    end_offset = parse_timestamp(end)
    if end_offset <= start_offset:
        raise InvalidTimeRangeError(start, end)
    return TimeRange(start=start_offset, end=end_offset)
