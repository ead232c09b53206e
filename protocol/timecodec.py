"""
Timestamp parsing and formatting for FDSN web-service payloads.

Upstream services are not consistent about timestamp shape; all of these
occur in practice and must parse:

    2020-01-01
    2020-01-01T00:00:00
    2020-01-01T00:00:00.000
    2004-11-22T18:56:51.535840Z
    2020-01-01T00:00:00+00:00

Parsed values are naive datetimes in UTC. Output always uses the second
precision form ``YYYY-MM-DDTHH:MM:SS`` that FDSN text responses carry.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import re

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_TIMESTAMP = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:[T ](?P<time>\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<zone>Z|[+-]\d{2}:?\d{2})?)?$"
)


def parse_time(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an FDSN timestamp string.

    Returns:
        Naive UTC datetime, or None when the value is empty or unparseable
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    match = _TIMESTAMP.match(value)
    if match is None:
        return None

    clock = match.group("time") or "00:00:00"
    if clock.count(":") == 1:
        clock += ":00"

    try:
        parsed = datetime.strptime(f"{match.group('date')}T{clock}", TIME_FORMAT)
    except ValueError:
        return None

    fraction = match.group("fraction")
    if fraction:
        # Microsecond resolution; extra digits are truncated
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))

    zone = match.group("zone")
    if zone and zone != "Z":
        sign = 1 if zone[0] == "+" else -1
        digits = zone[1:].replace(":", "")
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        parsed = parsed - sign * offset

    return parsed


def format_time(value: Optional[datetime]) -> str:
    """Format a datetime for FDSN output; None becomes the empty string"""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIME_FORMAT)


def truncate_to_second(value: Optional[datetime]) -> Optional[datetime]:
    """Drop sub-second precision, matching what format_time emits"""
    if value is None:
        return None
    return value.replace(microsecond=0)
