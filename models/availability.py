from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base


class AvailabilityExtent(Base):
    """
    Earliest/latest recorded data for one channel.

    Natural key: (channel_id, earliest). On conflict the stored latest only
    ever grows.
    """
    __tablename__ = "availability"

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel_id = Column(Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False)
    earliest = Column(DateTime, nullable=False)
    latest = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    channel = relationship("Channel", back_populates="availability")

    __table_args__ = (
        Index("idx_availability_channel_earliest", "channel_id", "earliest", unique=True),
    )
