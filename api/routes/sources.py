"""
Source management endpoints, plus per-source inventory and live exploration
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from api.dependencies import get_db, load_source, client_for
from core.database import release_connection
from api.routes.stations import list_station_page
from schemas.api import (
    SourceCreate,
    SourceResponse,
    SourceSummary,
    NetworkResponse,
    StationListResponse,
)
from schemas.fdsn import StationQuery, StationTextRow
from models.source import Source
from models.inventory import Network, Station, Channel
from models.availability import AvailabilityExtent
from core.exceptions import InvalidQueryError
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Sources"])


async def _counts_by_source(db: AsyncSession, query) -> Dict[int, int]:
    result = await db.execute(query)
    return {source_id: count for source_id, count in result.all()}


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[int] = None):
    query = select(Source.id).where(Source.name == name)
    if exclude_id is not None:
        query = query.where(Source.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise InvalidQueryError(
            f"source name {name!r} already exists",
            context={"name": name}
        )


@router.get("/sources", response_model=List[SourceSummary])
async def list_sources(db: AsyncSession = Depends(get_db)):
    """All sources with network, station and availability counts"""
    result = await db.execute(select(Source).order_by(Source.id))
    sources = result.scalars().all()

    networks = await _counts_by_source(
        db,
        select(Network.source_id, func.count(Network.id)).group_by(Network.source_id)
    )
    stations = await _counts_by_source(
        db,
        select(Network.source_id, func.count(Station.id))
        .join(Station, Station.network_id == Network.id)
        .group_by(Network.source_id)
    )
    availability = await _counts_by_source(
        db,
        select(Network.source_id, func.count(AvailabilityExtent.id))
        .join(Station, Station.network_id == Network.id)
        .join(Channel, Channel.station_id == Station.id)
        .join(AvailabilityExtent, AvailabilityExtent.channel_id == Channel.id)
        .group_by(Network.source_id)
    )

    return [
        SourceSummary.from_orm(source).copy(update={
            "network_count": networks.get(source.id, 0),
            "station_count": stations.get(source.id, 0),
            "availability_count": availability.get(source.id, 0),
        })
        for source in sources
    ]


@router.post("/sources", response_model=SourceResponse, status_code=201)
async def create_source(payload: SourceCreate, db: AsyncSession = Depends(get_db)):
    """Register a new upstream source"""
    await _ensure_unique_name(db, payload.name)

    source = Source(**payload.dict())
    db.add(source)
    await db.commit()
    await db.refresh(source)

    logger.info(f"Created source {source.name} ({source.base_url})")
    return SourceResponse.from_orm(source)


@router.get("/sources/{source_id}", response_model=SourceResponse)
async def get_source(source_id: int, db: AsyncSession = Depends(get_db)):
    source = await load_source(db, source_id)
    return SourceResponse.from_orm(source)


@router.put("/sources/{source_id}", response_model=SourceResponse)
async def update_source(source_id: int, payload: SourceCreate, db: AsyncSession = Depends(get_db)):
    """Replace a source's name, URL, description and enabled flag"""
    source = await load_source(db, source_id)
    await _ensure_unique_name(db, payload.name, exclude_id=source_id)

    for key, value in payload.dict().items():
        setattr(source, key, value)
    await db.commit()
    await db.refresh(source)

    logger.info(f"Updated source id={source_id}")
    return SourceResponse.from_orm(source)


@router.delete("/sources/{source_id}", status_code=204)
async def delete_source(source_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a source and everything imported from it"""
    source = await load_source(db, source_id)
    await db.delete(source)
    await db.commit()

    logger.info(f"Deleted source id={source_id}")
    return Response(status_code=204)


@router.get("/sources/{source_id}/explore/stations", response_model=List[StationTextRow])
async def explore_stations(
    source_id: int,
    net: str = Query("", description="Network code or pattern"),
    sta: str = Query("", description="Station code or pattern"),
    cha: str = Query("", description="Channel code or pattern"),
    loc: str = Query("", description="Location code or pattern"),
    minlat: str = Query(""),
    maxlat: str = Query(""),
    minlon: str = Query(""),
    maxlon: str = Query(""),
    db: AsyncSession = Depends(get_db)
):
    """Live station query against the source; nothing is stored"""
    source = await load_source(db, source_id)
    query = StationQuery(
        network=net,
        station=sta,
        channel=cha,
        location=loc,
        minlat=minlat,
        maxlat=maxlat,
        minlon=minlon,
        maxlon=maxlon,
    )
    await release_connection(db)
    return await client_for(source).query_stations(query)


@router.get("/sources/{source_id}/networks", response_model=List[NetworkResponse])
async def list_source_networks(source_id: int, db: AsyncSession = Depends(get_db)):
    await load_source(db, source_id)
    result = await db.execute(
        select(Network).where(Network.source_id == source_id).order_by(Network.code)
    )
    return [NetworkResponse.from_orm(n) for n in result.scalars().all()]


@router.get("/sources/{source_id}/stations", response_model=StationListResponse)
async def list_source_stations(
    source_id: int,
    network: Optional[str] = Query(None, description="Network code"),
    limit: int = Query(100, ge=1, le=1000, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    db: AsyncSession = Depends(get_db)
):
    """Stations imported from one source"""
    await load_source(db, source_id)
    filters = [Network.source_id == source_id]
    if network:
        filters.append(Network.code == network)
    return await list_station_page(db, filters, limit, offset)
