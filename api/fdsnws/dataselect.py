"""
fdsnws-dataselect: miniSEED passthrough to the source that owns the network.

Nothing is decoded or stored; the upstream status and body are relayed
byte for byte.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from starlette.background import BackgroundTask
import logging

from api.dependencies import get_db
from api.fdsnws.params import collect_params, pick
from api.fdsnws.wadl import DATASELECT_WADL
from core.database import release_connection
from core.exceptions import InvalidQueryError, ResourceNotFoundError
from ingestion.extractors.fdsn_client import FDSNClient
from models.inventory import Network
from models.source import Source

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dataselect/1", tags=["fdsnws-dataselect"])

VERSION = "1.1.0"
MSEED_MEDIA_TYPE = "application/vnd.fdsn.mseed"

REQUIRED = ("network", "station", "channel", "starttime", "endtime")


async def resolve_source(db: AsyncSession, network_code: str) -> Source:
    """First source (by id) that has imported the network"""
    result = await db.execute(
        select(Source)
        .join(Network, Network.source_id == Source.id)
        .where(Network.code == network_code)
        .order_by(Source.id)
        .limit(1)
    )
    source = result.scalars().first()
    if source is None:
        raise ResourceNotFoundError(
            "Network source not found",
            context={"network": network_code}
        )
    return source


@router.api_route("/query", methods=["GET", "POST"])
async def query(request: Request, db: AsyncSession = Depends(get_db)):
    values = await collect_params(request)
    fields = {name: pick(values, name) for name in REQUIRED + ("location",)}

    missing = [name for name in REQUIRED if not fields[name]]
    if missing:
        raise InvalidQueryError(
            f"missing required parameters: {', '.join(missing)}",
            context={"missing": missing}
        )

    source = await resolve_source(db, fields["network"])
    client = FDSNClient(source.base_url, source_name=source.name)
    params = FDSNClient.dataselect_params(
        fields["network"],
        fields["station"],
        fields["location"],
        fields["channel"],
        fields["starttime"],
        fields["endtime"],
    )

    logger.info(f"fdsnws-dataselect passthrough to {source.name}: {params}")
    await release_connection(db)
    stream = await client.stream_dataselect(params)

    return StreamingResponse(
        stream.aiter_bytes(),
        status_code=stream.status_code,
        media_type=MSEED_MEDIA_TYPE,
        background=BackgroundTask(stream.aclose)
    )


@router.get("/version")
async def version():
    return PlainTextResponse(VERSION)


@router.get("/application.wadl")
async def application_wadl():
    return Response(content=DATASELECT_WADL, media_type="application/xml")
