"""
FDSN web service request parameters.

GET requests carry parameters in the query string. POST requests may also
send them as ``key=value`` lines in the body, which take precedence over the
query string. Short aliases (``net``, ``sta``, ``loc``, ``cha``, ``start``,
``end``) win over the long names when both are given.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from fastapi import Request

from core.exceptions import InvalidQueryError
from models.base import Level
from protocol.timecodec import parse_time

LEVELS = (Level.NETWORK.value, Level.STATION.value, Level.CHANNEL.value)

# (short, long) parameter names
ALIASES = {
    "network": ("net", "network"),
    "station": ("sta", "station"),
    "location": ("loc", "location"),
    "channel": ("cha", "channel"),
    "starttime": ("start", "starttime"),
    "endtime": ("end", "endtime"),
}


@dataclass
class FDSNParams:
    networks: List[str] = field(default_factory=list)
    stations: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    channels: List[str] = field(default_factory=list)
    starttime: Optional[datetime] = None
    endtime: Optional[datetime] = None
    minlat: Optional[float] = None
    maxlat: Optional[float] = None
    minlon: Optional[float] = None
    maxlon: Optional[float] = None
    level: str = "station"
    format: str = "xml"

    def overlaps(self, start_time: Optional[datetime], end_time: Optional[datetime]) -> bool:
        """Epoch overlap with the requested window; None bounds are open"""
        if self.starttime is not None and end_time is not None and end_time < self.starttime:
            return False
        if self.endtime is not None and start_time is not None and start_time > self.endtime:
            return False
        return True

    def has_box(self) -> bool:
        return any(v is not None for v in (self.minlat, self.maxlat, self.minlon, self.maxlon))

    def in_box(self, latitude: Optional[float], longitude: Optional[float]) -> bool:
        """Inclusive bounding-box test; with a box set, unknown coordinates never match"""
        if not self.has_box():
            return True
        if latitude is None or longitude is None:
            return False
        if self.minlat is not None and latitude < self.minlat:
            return False
        if self.maxlat is not None and latitude > self.maxlat:
            return False
        if self.minlon is not None and longitude < self.minlon:
            return False
        if self.maxlon is not None and longitude > self.maxlon:
            return False
        return True


def parse_body(body: str) -> Dict[str, str]:
    """``key=value`` lines of a POST body; other lines are ignored"""
    values = {}
    for line in body.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip().lower()] = value.strip()
    return values


async def collect_params(request: Request) -> Dict[str, str]:
    """Query string merged with the ``key=value`` lines of a POST body"""
    values = {key.lower(): value for key, value in request.query_params.items()}
    if request.method == "POST":
        body = await request.body()
        values.update(parse_body(body.decode("utf-8", errors="replace")))
    return values


def pick(values: Dict[str, str], name: str) -> str:
    """Value for a parameter, preferring its short alias"""
    short, long = ALIASES.get(name, (name, name))
    if short in values:
        return values[short].strip()
    return values.get(long, "").strip()


def split_list(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _time(values: Dict[str, str], name: str) -> Optional[datetime]:
    raw = pick(values, name)
    if not raw:
        return None
    parsed = parse_time(raw)
    if parsed is None:
        raise InvalidQueryError(f"invalid {name}: {raw!r}", context={name: raw})
    return parsed


def _float(values: Dict[str, str], name: str) -> Optional[float]:
    raw = pick(values, name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise InvalidQueryError(f"invalid {name}: {raw!r}", context={name: raw})


def parse_params(
    values: Dict[str, str],
    default_format: str = "xml",
    formats: Tuple[str, ...] = ("text", "xml")
) -> FDSNParams:
    """
    Validate raw parameters.

    Raises:
        InvalidQueryError: Unknown level or format, bad number or timestamp
    """
    level = (pick(values, "level") or "station").lower()
    if level == Level.RESPONSE.value:
        level = Level.CHANNEL.value
    if level not in LEVELS:
        raise InvalidQueryError(f"invalid level: {level!r}", context={"level": level})

    fmt = (pick(values, "format") or default_format).lower()
    if fmt not in formats:
        raise InvalidQueryError(f"unsupported format: {fmt!r}", context={"format": fmt})

    return FDSNParams(
        networks=split_list(pick(values, "network")),
        stations=split_list(pick(values, "station")),
        locations=split_list(pick(values, "location")),
        channels=split_list(pick(values, "channel")),
        starttime=_time(values, "starttime"),
        endtime=_time(values, "endtime"),
        minlat=_float(values, "minlat"),
        maxlat=_float(values, "maxlat"),
        minlon=_float(values, "minlon"),
        maxlon=_float(values, "maxlon"),
        level=level,
        format=fmt,
    )


async def request_params(request: Request, **kwargs) -> FDSNParams:
    return parse_params(await collect_params(request), **kwargs)
