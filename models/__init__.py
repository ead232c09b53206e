"""
SQLAlchemy ORM models for database tables.

This package defines the normalized station metadata schema:

Models:
    base: Base declarative class and shared enums (AvailabilityStatus, Level)
    source: Upstream FDSN data centres
    inventory: Network → Station → Channel hierarchy
    availability: Per-channel availability extents

Database Schema:
    All models inherit from the Base declarative class and use only
    column types SQLite understands. Foreign keys cascade on delete, so
    removing a Source removes everything imported from it.

Usage:
    from models import Source, Network, Station, Channel, AvailabilityExtent
    from models.base import AvailabilityStatus

Relationships:
    - Source → Network (one-to-many, natural key source_id + code)
    - Network → Station (one-to-many, natural key network_id + code)
    - Station → Channel (one-to-many, natural key station_id + location + code)
    - Channel → AvailabilityExtent (one-to-many, natural key channel_id + earliest)
"""

from models.base import Base, AvailabilityStatus, Level
from models.source import Source
from models.inventory import Network, Station, Channel
from models.availability import AvailabilityExtent

__all__ = [
    "Base",
    "AvailabilityStatus",
    "Level",
    "Source",
    "Network",
    "Station",
    "Channel",
    "AvailabilityExtent",
]
