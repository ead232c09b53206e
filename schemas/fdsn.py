"""
Pydantic schemas for FDSN rows, upstream queries and import records
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, Dict
from datetime import datetime


# ============================================================================
# Parsed upstream rows
# ============================================================================

class StationTextRow(BaseModel):
    """One row of a station-level text response"""
    network: str
    station: str
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0
    site_name: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class ChannelTextRow(BaseModel):
    """One row of a channel-level text response"""
    network: str
    station: str
    location: str = ""
    channel: str
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0
    depth: float = 0.0
    azimuth: float = 0.0
    dip: float = 0.0
    sensor_description: str = ""
    scale: float = 0.0
    scale_freq: float = 0.0
    scale_units: str = ""
    sample_rate: float = 0.0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class AvailabilityExtentRow(BaseModel):
    """One row of an availability extent response"""
    network: str
    station: str
    location: str = ""
    channel: str
    quality: str = ""
    sample_rate: float = 0.0
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None

    @property
    def channel_key(self) -> str:
        """Key used to match extents to stored channels"""
        return f"{self.location}.{self.channel}"


# ============================================================================
# Upstream queries
# ============================================================================

class StationQuery(BaseModel):
    """
    Filters for the upstream station service.

    Empty fields are left out of the request URL.
    """
    network: str = ""
    station: str = ""
    channel: str = ""
    location: str = ""
    starttime: str = ""
    endtime: str = ""
    minlat: str = ""
    maxlat: str = ""
    minlon: str = ""
    maxlon: str = ""

    def to_params(self) -> Dict[str, str]:
        names = {
            "network": "net",
            "station": "sta",
            "channel": "cha",
            "location": "loc",
        }
        params = {}
        for field, value in self.dict().items():
            if value:
                params[names.get(field, field)] = value
        return params


class AvailabilityQuery(BaseModel):
    """Filters for the upstream availability extent service"""
    network: str = ""
    station: str = ""
    channel: str = ""
    location: str = ""

    def to_params(self) -> Dict[str, str]:
        params = {}
        for key, value in (
            ("net", self.network),
            ("sta", self.station),
            ("cha", self.channel),
            ("loc", self.location),
        ):
            if value:
                params[key] = value
        return params


# ============================================================================
# Import records
# ============================================================================

class ImportChannel(BaseModel):
    """
    One channel ready to be merged into the store, carrying the network and
    station values it implies.
    """
    network_code: str = Field(..., min_length=1)
    network_description: str = ""

    station_code: str = Field(..., min_length=1)
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0
    site_name: str = ""
    station_start_time: Optional[datetime] = None
    station_end_time: Optional[datetime] = None

    location_code: str = ""
    channel_code: str = Field(..., min_length=1)
    chan_latitude: Optional[float] = None
    chan_longitude: Optional[float] = None
    chan_elevation: Optional[float] = None
    depth: Optional[float] = None
    azimuth: Optional[float] = None
    dip: Optional[float] = None
    sensor_description: str = ""
    scale: Optional[float] = None
    scale_freq: Optional[float] = None
    scale_units: str = ""
    sample_rate: Optional[float] = None
    chan_start_time: Optional[datetime] = None
    chan_end_time: Optional[datetime] = None

    @validator("network_code", "station_code", "channel_code", "location_code", pre=True)
    def strip_codes(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AvailabilityItem(BaseModel):
    """Resolved availability extent ready for upsert"""
    channel_id: int
    earliest: datetime
    latest: datetime
