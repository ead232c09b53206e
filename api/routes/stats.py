"""
Dashboard statistics endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from api.dependencies import get_db
from schemas.api import StatsResponse
from models.source import Source
from models.inventory import Network, Station, Channel
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Statistics"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """
    Row counts of the store.

    Returns:
    - sources, networks, stations, channels
    """
    counts = {}
    for key, model in (
        ("sources", Source),
        ("networks", Network),
        ("stations", Station),
        ("channels", Channel),
    ):
        result = await db.execute(select(func.count()).select_from(model))
        counts[key] = result.scalar() or 0

    logger.info(
        f"Stats: {counts['sources']} sources, {counts['networks']} networks, "
        f"{counts['stations']} stations, {counts['channels']} channels"
    )

    return StatsResponse(**counts)
