"""
Parsers for FDSN text-format responses.

Upstream services differ in column counts, so parsing is lenient:
- blank lines and ``#`` header/comment lines are skipped
- rows with fewer than the required fields are dropped
- extra trailing columns are ignored
- unparseable numbers become 0.0, unparseable timestamps become None
"""

from typing import Any, Iterable, List, Optional, Union
import logging

from protocol.timecodec import parse_time
from schemas.fdsn import StationTextRow, ChannelTextRow, AvailabilityExtentRow

logger = logging.getLogger(__name__)

STATION_MIN_FIELDS = 6
CHANNEL_MIN_FIELDS = 15
AVAILABILITY_MIN_FIELDS = 8

# Wire spelling of the empty location code
EMPTY_LOCATION = "--"


def _lines(body: Union[str, Iterable[str]]) -> Iterable[str]:
    if isinstance(body, str):
        body = body.splitlines()
    for line in body:
        line = line.strip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        yield line


def _float(value: Any) -> float:
    try:
        return float(str(value).strip())
    except (ValueError, TypeError):
        return 0.0


def _field(fields: List[str], index: int) -> Optional[str]:
    if index < len(fields):
        return fields[index].strip()
    return None


def _location(value: str) -> str:
    value = value.strip()
    return "" if value == EMPTY_LOCATION else value


def parse_station_text(body: Union[str, Iterable[str]]) -> List[StationTextRow]:
    """
    Parse a station-level response.

    Format: Network|Station|Latitude|Longitude|Elevation|SiteName|StartTime|EndTime
    """
    rows = []
    dropped = 0
    for line in _lines(body):
        fields = line.split("|")
        if len(fields) < STATION_MIN_FIELDS:
            dropped += 1
            continue
        rows.append(StationTextRow(
            network=fields[0].strip(),
            station=fields[1].strip(),
            latitude=_float(fields[2]),
            longitude=_float(fields[3]),
            elevation=_float(fields[4]),
            site_name=fields[5].strip(),
            start_time=parse_time(_field(fields, 6)),
            end_time=parse_time(_field(fields, 7)),
        ))
    if dropped:
        logger.debug(f"Dropped {dropped} short station rows")
    return rows


def parse_channel_text(body: Union[str, Iterable[str]]) -> List[ChannelTextRow]:
    """
    Parse a channel-level response.

    Format: Network|Station|Location|Channel|Latitude|Longitude|Elevation|Depth|
            Azimuth|Dip|SensorDescription|Scale|ScaleFreq|ScaleUnits|SampleRate|
            StartTime|EndTime
    """
    rows = []
    dropped = 0
    for line in _lines(body):
        fields = line.split("|")
        if len(fields) < CHANNEL_MIN_FIELDS:
            dropped += 1
            continue
        rows.append(ChannelTextRow(
            network=fields[0].strip(),
            station=fields[1].strip(),
            location=_location(fields[2]),
            channel=fields[3].strip(),
            latitude=_float(fields[4]),
            longitude=_float(fields[5]),
            elevation=_float(fields[6]),
            depth=_float(fields[7]),
            azimuth=_float(fields[8]),
            dip=_float(fields[9]),
            sensor_description=fields[10].strip(),
            scale=_float(fields[11]),
            scale_freq=_float(fields[12]),
            scale_units=fields[13].strip(),
            sample_rate=_float(fields[14]),
            start_time=parse_time(_field(fields, 15)),
            end_time=parse_time(_field(fields, 16)),
        ))
    if dropped:
        logger.debug(f"Dropped {dropped} short channel rows")
    return rows


def parse_availability_extent(body: Union[str, Iterable[str]]) -> List[AvailabilityExtentRow]:
    """
    Parse an availability extent response.

    Format: Network|Station|Location|Channel|Quality|SampleRate|Earliest|Latest
    Space-delimited rows (with trailing Updated/TimeSpans/Restriction
    columns) are accepted as well.
    """
    rows = []
    dropped = 0
    for line in _lines(body):
        fields = line.split("|") if "|" in line else line.split()
        if len(fields) < AVAILABILITY_MIN_FIELDS:
            dropped += 1
            continue
        rows.append(AvailabilityExtentRow(
            network=fields[0].strip(),
            station=fields[1].strip(),
            location=_location(fields[2]),
            channel=fields[3].strip(),
            quality=fields[4].strip(),
            sample_rate=_float(fields[5]),
            earliest=parse_time(fields[6]),
            latest=parse_time(fields[7]),
        ))
    if dropped:
        logger.debug(f"Dropped {dropped} short availability rows")
    return rows
