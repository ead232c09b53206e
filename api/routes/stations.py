"""
Stored inventory endpoints: stations, their channels and availability, networks
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from api.dependencies import get_db
from schemas.api import (
    StationResponse,
    StationListResponse,
    StationDetailResponse,
    ChannelResponse,
    ChannelAvailabilityResponse,
    NetworkResponse,
)
from models.source import Source
from models.inventory import Network, Station, Channel
from models.availability import AvailabilityExtent
from ingestion.loaders.availability_loader import AvailabilityLoader
from core.exceptions import ResourceNotFoundError
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Stations"])


def _station_select():
    """Stations joined with their network code, source and availability flag"""
    has_availability = (
        select(AvailabilityExtent.id)
        .join(Channel, AvailabilityExtent.channel_id == Channel.id)
        .where(Channel.station_id == Station.id)
        .exists()
        .label("has_availability")
    )
    return (
        select(Station, Network.code, Network.source_id, Source.name, has_availability)
        .join(Network, Station.network_id == Network.id)
        .join(Source, Network.source_id == Source.id)
    )


def _to_station_response(row) -> StationResponse:
    station, network_code, source_id, source_name, has_availability = row
    return StationResponse.from_orm(station).copy(update={
        "network_code": network_code,
        "source_id": source_id,
        "source_name": source_name,
        "has_availability": bool(has_availability),
    })


async def list_station_page(
    db: AsyncSession,
    filters: list,
    limit: int,
    offset: int
) -> StationListResponse:
    """Paginated station list ordered by network and station code"""
    count_query = (
        select(func.count())
        .select_from(Station)
        .join(Network, Station.network_id == Network.id)
    )
    query = _station_select()
    if filters:
        count_query = count_query.where(and_(*filters))
        query = query.where(and_(*filters))

    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    query = query.order_by(Network.code, Station.code, Network.source_id).offset(offset).limit(limit)
    result = await db.execute(query)

    return StationListResponse(
        stations=[_to_station_response(row) for row in result.all()],
        total=total
    )


async def _load_station_row(db: AsyncSession, station_id: int):
    result = await db.execute(_station_select().where(Station.id == station_id))
    row = result.first()
    if row is None:
        raise ResourceNotFoundError(
            "station not found",
            context={"station_id": station_id}
        )
    return row


@router.get("/stations", response_model=StationListResponse)
async def list_stations(
    network: Optional[str] = Query(None, description="Network code"),
    station: Optional[str] = Query(None, description="Station code"),
    limit: int = Query(100, ge=1, le=1000, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    db: AsyncSession = Depends(get_db)
):
    """Stations across every source, filtered by exact network/station codes"""
    filters = []
    if network:
        filters.append(Network.code == network)
    if station:
        filters.append(Station.code == station)

    logger.info(f"GET /stations network={network} station={station} limit={limit} offset={offset}")
    return await list_station_page(db, filters, limit, offset)


@router.get("/stations/{station_id}", response_model=StationDetailResponse)
async def get_station(station_id: int, db: AsyncSession = Depends(get_db)):
    """Station with its channels and availability windows"""
    row = await _load_station_row(db, station_id)

    channels_result = await db.execute(
        select(Channel)
        .where(Channel.station_id == station_id)
        .order_by(Channel.location_code, Channel.code, Channel.start_time)
    )
    channels = [ChannelResponse.from_orm(ch) for ch in channels_result.scalars().all()]

    availability = [
        ChannelAvailabilityResponse(**item)
        for item in await AvailabilityLoader(db).get_by_station_id(station_id)
    ]

    summary = _to_station_response(row)
    return StationDetailResponse(**summary.dict(), channels=channels, availability=availability)


@router.delete("/stations/{station_id}", status_code=204)
async def delete_station(station_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a station; its channels and availability go with it"""
    station = await db.get(Station, station_id)
    if station is None:
        raise ResourceNotFoundError(
            "station not found",
            context={"station_id": station_id}
        )

    await db.delete(station)
    await db.commit()
    logger.info(f"Deleted station id={station_id}")
    return Response(status_code=204)


@router.get(
    "/stations/{station_id}/availability",
    response_model=List[ChannelAvailabilityResponse]
)
async def get_station_availability(station_id: int, db: AsyncSession = Depends(get_db)):
    """Every channel of the station with its availability windows (null when none)"""
    station = await db.get(Station, station_id)
    if station is None:
        raise ResourceNotFoundError(
            "station not found",
            context={"station_id": station_id}
        )

    items = await AvailabilityLoader(db).get_by_station_id(station_id)
    return [ChannelAvailabilityResponse(**item) for item in items]


@router.get("/networks", response_model=List[NetworkResponse])
async def list_networks(db: AsyncSession = Depends(get_db)):
    """All networks from every source, ordered by code"""
    result = await db.execute(select(Network).order_by(Network.code, Network.source_id))
    return [NetworkResponse.from_orm(n) for n in result.scalars().all()]
