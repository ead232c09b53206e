"""
Import trigger endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_availability_loader, load_source, client_for
from schemas.api import ImportRequest, ImportResponse, RefreshTarget
from schemas.fdsn import StationQuery
from ingestion.runner import ImportRunner
from ingestion.loaders.availability_loader import AvailabilityLoader
from ingestion.loaders.station_loader import StationLoader
from core.exceptions import InvalidQueryError
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/import", tags=["Import"])


@router.post("/stations", response_model=ImportResponse)
async def import_stations(
    payload: ImportRequest,
    db: AsyncSession = Depends(get_db),
    availability_loader: Optional[AvailabilityLoader] = Depends(get_availability_loader)
):
    """
    Fetch channels from a source and merge them into the store.

    The channel import is all-or-nothing. Availability is reconciled
    afterwards on a best-effort basis and reported in the response.
    """
    source = await load_source(db, payload.source_id)
    if not source.enabled:
        raise InvalidQueryError(
            f"source {source.name} is disabled",
            context={"source_id": source.id}
        )

    query = StationQuery(
        network=payload.network,
        station=payload.station,
        channel=payload.channel,
        location=payload.location,
    )

    runner = ImportRunner(db, client_for(source), availability_loader=availability_loader)
    result = await runner.run(source, query)

    return ImportResponse(**result.to_dict())


@router.get("/refresh-targets", response_model=List[RefreshTarget])
async def refresh_targets(db: AsyncSession = Depends(get_db)):
    """Every (source, network) pair imported so far, for scheduled re-imports"""
    targets = await StationLoader(db).list_refresh_targets()
    return [RefreshTarget(**target) for target in targets]
