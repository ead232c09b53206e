"""
fdsnws-availability: stored availability windows in FDSN text format
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from api.dependencies import get_db
from api.fdsnws.params import FDSNParams, request_params
from api.fdsnws.wadl import AVAILABILITY_WADL
from models.availability import AvailabilityExtent
from models.inventory import Network, Station, Channel
from protocol import text
from protocol.wildcard import match_any, match_location

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/availability/1", tags=["fdsnws-availability"])

VERSION = "1.0.0"


def _codes_match(params: FDSNParams, network: str, station: str, location: str, channel: str) -> bool:
    return (
        match_any(params.networks, network)
        and match_any(params.stations, station)
        and match_location(params.locations, location)
        and match_any(params.channels, channel)
    )


def _base_select(*columns):
    return (
        select(Network.code, Station.code, Channel.location_code, Channel.code, *columns)
        .select_from(Channel)
        .join(Station, Channel.station_id == Station.id)
        .join(Network, Station.network_id == Network.id)
        .join(AvailabilityExtent, AvailabilityExtent.channel_id == Channel.id)
    )


def _render(params: FDSNParams, rows) -> str:
    lines = [text.AVAILABILITY_HEADER + "\n"]
    for network, station, location, channel, earliest, latest in rows:
        if not _codes_match(params, network, station, location, channel):
            continue
        if not params.overlaps(earliest, latest):
            continue
        lines.append(text.availability_line(network, station, location, channel, earliest, latest))
    return "".join(lines)


async def _text_params(request: Request) -> FDSNParams:
    return await request_params(request, default_format="text", formats=("text",))


@router.api_route("/query", methods=["GET", "POST"])
async def query(request: Request, db: AsyncSession = Depends(get_db)):
    """Every stored availability window, one row each"""
    params = await _text_params(request)
    result = await db.execute(
        _base_select(AvailabilityExtent.earliest, AvailabilityExtent.latest)
        .order_by(Network.code, Station.code, Channel.location_code, Channel.code, AvailabilityExtent.earliest)
    )
    logger.info(f"fdsnws-availability query net={params.networks} sta={params.stations}")
    return PlainTextResponse(_render(params, result.all()))


@router.api_route("/extent", methods=["GET", "POST"])
async def extent(request: Request, db: AsyncSession = Depends(get_db)):
    """Earliest and latest stored time per channel"""
    params = await _text_params(request)
    result = await db.execute(
        _base_select(func.min(AvailabilityExtent.earliest), func.max(AvailabilityExtent.latest))
        .group_by(Network.code, Station.code, Channel.location_code, Channel.code)
        .order_by(Network.code, Station.code, Channel.location_code, Channel.code)
    )
    logger.info(f"fdsnws-availability extent net={params.networks} sta={params.stations}")
    return PlainTextResponse(_render(params, result.all()))


@router.get("/version")
async def version():
    return PlainTextResponse(VERSION)


@router.get("/application.wadl")
async def application_wadl():
    return Response(content=AVAILABILITY_WADL, media_type="application/xml")
