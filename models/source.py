from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base


class Source(Base):
    """
    One upstream FDSN data centre.

    Sources are created by preset seeding or through the sources API and are
    never merged with each other; every Network belongs to exactly one Source.
    """
    __tablename__ = "sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    base_url = Column(String(2048), nullable=False)
    description = Column(Text, nullable=False, default="")
    enabled = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    networks = relationship(
        "Network",
        back_populates="source",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<Source(id={self.id}, name={self.name}, base_url={self.base_url})>"
