"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from models.base import AvailabilityStatus


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: ok or degraded")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool

    class Config:
        json_schema_extra = {
            "example": {
                "status": "ok",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True
            }
        }


# ============================================================================
# Source Schemas
# ============================================================================

class SourceCreate(BaseModel):
    """Create or replace an upstream FDSN source"""
    name: str = Field(..., min_length=1, max_length=100)
    base_url: str = Field(..., min_length=1, max_length=2048)
    description: str = ""
    enabled: bool = True

    @validator("name", "base_url", pre=True)
    def strip_required(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @validator("base_url")
    def strip_trailing_slash(cls, v):
        """Paths are appended to the base URL, so drop a trailing slash"""
        return v.rstrip("/")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "IRIS",
                "base_url": "https://service.iris.edu",
                "description": "IRIS Data Management Center",
                "enabled": True
            }
        }


class SourceResponse(BaseModel):
    """Response model for a source"""
    id: int
    name: str
    base_url: str
    description: str
    enabled: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SourceSummary(SourceResponse):
    """Source with aggregate counts of what has been imported from it"""
    network_count: int = 0
    station_count: int = 0
    availability_count: int = 0


# ============================================================================
# Inventory Schemas
# ============================================================================

class NetworkResponse(BaseModel):
    """Response model for a network"""
    id: int
    source_id: int
    code: str
    description: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StationResponse(BaseModel):
    """Response model for a station, with joined network/source fields"""
    id: int
    network_id: int
    code: str
    latitude: float
    longitude: float
    elevation: float
    site_name: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime

    network_code: Optional[str] = None
    source_id: Optional[int] = None
    source_name: Optional[str] = None
    has_availability: bool = False

    class Config:
        from_attributes = True


class StationListResponse(BaseModel):
    """Paginated station list"""
    stations: List[StationResponse] = Field(default_factory=list)
    total: int = 0


class ChannelResponse(BaseModel):
    """Response model for a channel"""
    id: int
    station_id: int
    location_code: str
    code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None
    depth: Optional[float] = None
    azimuth: Optional[float] = None
    dip: Optional[float] = None
    sensor_description: str = ""
    scale: Optional[float] = None
    scale_freq: Optional[float] = None
    scale_units: str = ""
    sample_rate: Optional[float] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ChannelAvailabilityResponse(BaseModel):
    """A channel paired with one availability window (or none)"""
    channel_id: int
    location_code: str
    channel_code: str
    sample_rate: Optional[float] = None
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None


class StationDetailResponse(StationResponse):
    """Station with its channels and availability"""
    channels: List[ChannelResponse] = Field(default_factory=list)
    availability: List[ChannelAvailabilityResponse] = Field(default_factory=list)


# ============================================================================
# Import Schemas
# ============================================================================

class ImportRequest(BaseModel):
    """Import channels from one source, optionally filtered by codes"""
    source_id: int = Field(..., gt=0, description="Source to import from")
    network: str = Field("", description="Network code or wildcard pattern")
    station: str = Field("", description="Station code or wildcard pattern")
    channel: str = Field("", description="Channel code or wildcard pattern")
    location: str = Field("", description="Location code or wildcard pattern")

    class Config:
        json_schema_extra = {
            "example": {
                "source_id": 1,
                "network": "IU",
                "station": "ANMO",
                "channel": "BH?",
                "location": "00"
            }
        }


class ImportResponse(BaseModel):
    """Outcome of an import call"""
    imported: int = 0
    availability_count: int = 0
    availability_status: AvailabilityStatus = AvailabilityStatus.NOT_CONFIGURED
    availability_error: Optional[str] = None

    class Config:
        use_enum_values = True


class RefreshTarget(BaseModel):
    """A (source, network) pair that can be re-imported"""
    source_id: int
    source_name: str
    network_code: str


# ============================================================================
# Stats Schemas
# ============================================================================

class StatsResponse(BaseModel):
    """Dashboard summary counts"""
    sources: int = 0
    networks: int = 0
    stations: int = 0
    channels: int = 0


# ============================================================================
# Error Schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Resource not found",
                "detail": "source 42 not found",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
