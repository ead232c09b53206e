"""
FDSN pipe-delimited text rendering.

Each response starts with a ``#`` header naming the columns, followed by one
row per record terminated by a newline. Missing values render as empty
fields.
"""

from datetime import datetime
from typing import Optional

from protocol.timecodec import format_time

NETWORK_HEADER = "#Network|Description|StartTime|EndTime|TotalStations"
STATION_HEADER = "#Network|Station|Latitude|Longitude|Elevation|SiteName|StartTime|EndTime"
CHANNEL_HEADER = (
    "#Network|Station|Location|Channel|Latitude|Longitude|Elevation|Depth|"
    "Azimuth|Dip|SensorDescription|Scale|ScaleFreq|ScaleUnits|SampleRate|"
    "StartTime|EndTime"
)
AVAILABILITY_HEADER = "#Network|Station|Location|Channel|Earliest|Latest"


def _num(value: Optional[float], fmt: str) -> str:
    if value is None:
        return ""
    return format(value, fmt)


def network_line(
    code: str,
    description: str,
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    total_stations: int,
) -> str:
    return (
        f"{code}|{description or ''}|{format_time(start_time)}|"
        f"{format_time(end_time)}|{total_stations}\n"
    )


def station_line(
    network: str,
    station: str,
    latitude: Optional[float],
    longitude: Optional[float],
    elevation: Optional[float],
    site_name: str,
    start_time: Optional[datetime],
    end_time: Optional[datetime],
) -> str:
    return "|".join([
        network,
        station,
        _num(latitude, ".6f"),
        _num(longitude, ".6f"),
        _num(elevation, ".1f"),
        site_name or "",
        format_time(start_time),
        format_time(end_time),
    ]) + "\n"


def channel_line(
    network: str,
    station: str,
    location: str,
    channel: str,
    latitude: Optional[float],
    longitude: Optional[float],
    elevation: Optional[float],
    depth: Optional[float],
    azimuth: Optional[float],
    dip: Optional[float],
    sensor_description: str,
    scale: Optional[float],
    scale_freq: Optional[float],
    scale_units: str,
    sample_rate: Optional[float],
    start_time: Optional[datetime],
    end_time: Optional[datetime],
) -> str:
    return "|".join([
        network,
        station,
        location or "",
        channel,
        _num(latitude, ".6f"),
        _num(longitude, ".6f"),
        _num(elevation, ".1f"),
        _num(depth, ".1f"),
        _num(azimuth, ".1f"),
        _num(dip, ".1f"),
        sensor_description or "",
        _num(scale, ".4e"),
        _num(scale_freq, ".4f"),
        scale_units or "",
        _num(sample_rate, ".1f"),
        format_time(start_time),
        format_time(end_time),
    ]) + "\n"


def availability_line(
    network: str,
    station: str,
    location: str,
    channel: str,
    earliest: Optional[datetime],
    latest: Optional[datetime],
) -> str:
    return (
        f"{network}|{station}|{location or ''}|{channel}|"
        f"{format_time(earliest)}|{format_time(latest)}\n"
    )
