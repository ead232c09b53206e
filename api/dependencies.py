"""
Shared FastAPI dependencies
"""

from typing import AsyncGenerator, Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import settings
from core.database import get_session
from core.exceptions import ResourceNotFoundError
from ingestion.extractors.fdsn_client import FDSNClient
from ingestion.loaders.availability_loader import AvailabilityLoader
from models.source import Source


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session per request (overridden in tests)"""
    async for session in get_session():
        yield session


def get_availability_loader(db: AsyncSession = Depends(get_db)) -> Optional[AvailabilityLoader]:
    """Availability loader, or None when availability import is switched off"""
    if not settings.AVAILABILITY_ENABLED:
        return None
    return AvailabilityLoader(db)


async def load_source(db: AsyncSession, source_id: int) -> Source:
    """Fetch a source or raise ResourceNotFoundError"""
    source = await db.get(Source, source_id)
    if source is None:
        raise ResourceNotFoundError(
            "source not found",
            context={"source_id": source_id}
        )
    return source


def client_for(source: Source) -> FDSNClient:
    """Upstream client for a source"""
    return FDSNClient(source.base_url, source_name=source.name)
