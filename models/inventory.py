from sqlalchemy import Column, String, Integer, Float, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base


class Network(Base):
    """
    Seismic network as reported by one source.

    Natural key: (source_id, code). A re-import overwrites the description.
    """
    __tablename__ = "networks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(Integer, ForeignKey("sources.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(8), nullable=False)
    description = Column(Text, nullable=False, default="")
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    source = relationship("Source", back_populates="networks")
    stations = relationship(
        "Station",
        back_populates="network",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_networks_source_code", "source_id", "code", unique=True),
        Index("idx_networks_code", "code"),
    )


class Station(Base):
    """
    Station within a network.

    Natural key: (network_id, code). A re-import overwrites position and
    site metadata.
    """
    __tablename__ = "stations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    network_id = Column(Integer, ForeignKey("networks.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(8), nullable=False)
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)
    elevation = Column(Float, nullable=False, default=0.0)
    site_name = Column(Text, nullable=False, default="")
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    network = relationship("Network", back_populates="stations")
    channels = relationship(
        "Channel",
        back_populates="station",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_stations_network_code", "network_id", "code", unique=True),
    )


class Channel(Base):
    """
    Channel epoch of a station.

    Natural key: (station_id, location_code, code). A re-import replaces
    every other column; the id stays the same so availability rows remain
    attached.
    """
    __tablename__ = "channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    station_id = Column(Integer, ForeignKey("stations.id", ondelete="CASCADE"), nullable=False)
    location_code = Column(String(8), nullable=False, default="")
    code = Column(String(8), nullable=False)

    # Position and orientation
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    elevation = Column(Float, nullable=True)
    depth = Column(Float, nullable=True)
    azimuth = Column(Float, nullable=True)
    dip = Column(Float, nullable=True)

    # Instrument
    sensor_description = Column(Text, nullable=False, default="")
    scale = Column(Float, nullable=True)
    scale_freq = Column(Float, nullable=True)
    scale_units = Column(String(32), nullable=False, default="")
    sample_rate = Column(Float, nullable=True)

    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    station = relationship("Station", back_populates="channels")
    availability = relationship(
        "AvailabilityExtent",
        back_populates="channel",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_channels_station_loc_code", "station_id", "location_code", "code", unique=True),
    )

    # Columns rewritten when a channel is imported again
    REPLACEABLE_FIELDS = (
        "latitude", "longitude", "elevation", "depth", "azimuth", "dip",
        "sensor_description", "scale", "scale_freq", "scale_units",
        "sample_rate", "start_time", "end_time",
    )
