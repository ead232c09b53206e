"""
Waveform proxy: buffered miniSEED fetch from a chosen source
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, load_source, client_for
from core.database import release_connection
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Waveforms"])

MSEED_MEDIA_TYPE = "application/vnd.fdsn.mseed"


@router.get("/waveforms/proxy")
async def proxy_waveforms(
    source_id: int = Query(..., gt=0),
    net: str = Query(..., min_length=1),
    sta: str = Query(..., min_length=1),
    loc: str = Query(""),
    cha: str = Query(..., min_length=1),
    starttime: str = Query(..., min_length=1),
    endtime: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db)
):
    """
    Fetch miniSEED from the source's dataselect service.

    Returns 204 when the upstream has no data; upstream failures surface
    as 502.
    """
    source = await load_source(db, source_id)
    client = client_for(source)
    await release_connection(db)

    data = await client.fetch_miniseed(net, sta, loc, cha, starttime, endtime)
    if not data:
        logger.info(f"No waveform data from {source.name} for {net}.{sta}.{loc}.{cha}")
        return Response(status_code=204)

    logger.info(f"Proxied {len(data)} bytes from {source.name} for {net}.{sta}.{loc}.{cha}")
    return Response(content=data, media_type=MSEED_MEDIA_TYPE)
