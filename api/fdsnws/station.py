"""
fdsnws-station: serves stored inventory as FDSN text or StationXML.

Codes are filtered with FDSN wildcard patterns in Python after loading the
candidate rows, so matching is identical to what upstream services do.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from api.dependencies import get_db
from api.fdsnws.params import FDSNParams, request_params
from api.fdsnws.wadl import STATION_WADL
from core.config import settings
from models.inventory import Network, Station, Channel
from protocol import text
from protocol.stationxml import StationXMLBuilder
from protocol.wildcard import match_any, match_location

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/station/1", tags=["fdsnws-station"])

VERSION = "1.1.0"


@dataclass
class NetworkNode:
    code: str
    description: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_stations: int = 0
    stations: List["StationNode"] = field(default_factory=list)


@dataclass
class StationNode:
    network_code: str
    station: Station
    channels: List[Channel] = field(default_factory=list)


def channel_matches(params: FDSNParams, channel: Channel) -> bool:
    return (
        match_any(params.channels, channel.code)
        and match_location(params.locations, channel.location_code)
        and params.overlaps(channel.start_time, channel.end_time)
    )


async def load_inventory(db: AsyncSession, params: FDSNParams) -> List[NetworkNode]:
    """
    Networks, stations and channels matching the request, nested and ordered
    by network code, station code, location code and channel code.

    Networks with the same code from different sources are presented as one.
    """
    result = await db.execute(select(Network).order_by(Network.code, Network.source_id))
    networks: Dict[str, NetworkNode] = OrderedDict()
    for network in result.scalars().all():
        if not match_any(params.networks, network.code):
            continue
        if not params.overlaps(network.start_time, network.end_time):
            continue
        node = networks.get(network.code)
        if node is None:
            networks[network.code] = NetworkNode(
                code=network.code,
                description=network.description,
                start_time=network.start_time,
                end_time=network.end_time,
            )
        elif not node.description:
            node.description = network.description

    if not networks:
        return []

    if params.level == "network":
        counts = await db.execute(
            select(Network.code, func.count(Station.id))
            .join(Station, Station.network_id == Network.id)
            .group_by(Network.code)
        )
        for code, count in counts.all():
            if code in networks:
                networks[code].total_stations = count
        return list(networks.values())

    result = await db.execute(
        select(Station, Network.code)
        .join(Network, Station.network_id == Network.id)
        .order_by(Network.code, Station.code, Network.source_id)
    )
    station_nodes: Dict[int, StationNode] = OrderedDict()
    for station, network_code in result.all():
        if network_code not in networks:
            continue
        if not match_any(params.stations, station.code):
            continue
        if not params.overlaps(station.start_time, station.end_time):
            continue
        if not params.in_box(station.latitude, station.longitude):
            continue
        station_nodes[station.id] = StationNode(network_code=network_code, station=station)

    # Channel filters also restrict which stations are listed
    channel_filtered = bool(params.channels or params.locations)
    if station_nodes and (params.level == "channel" or channel_filtered):
        result = await db.execute(
            select(Channel)
            .where(Channel.station_id.in_(list(station_nodes.keys())))
            .order_by(Channel.location_code, Channel.code, Channel.start_time)
        )
        for channel in result.scalars().all():
            if channel_matches(params, channel):
                station_nodes[channel.station_id].channels.append(channel)

        station_nodes = OrderedDict(
            (station_id, node) for station_id, node in station_nodes.items() if node.channels
        )

    for node in station_nodes.values():
        networks[node.network_code].stations.append(node)
    return [n for n in networks.values() if n.stations]


def render_text(params: FDSNParams, networks: List[NetworkNode]) -> str:
    if params.level == "network":
        lines = [text.NETWORK_HEADER + "\n"]
        for n in networks:
            lines.append(text.network_line(n.code, n.description, n.start_time, n.end_time, n.total_stations))
        return "".join(lines)

    if params.level == "station":
        lines = [text.STATION_HEADER + "\n"]
        for n in networks:
            for node in n.stations:
                s = node.station
                lines.append(text.station_line(
                    n.code, s.code, s.latitude, s.longitude, s.elevation,
                    s.site_name, s.start_time, s.end_time
                ))
        return "".join(lines)

    lines = [text.CHANNEL_HEADER + "\n"]
    for n in networks:
        for node in n.stations:
            for c in node.channels:
                lines.append(text.channel_line(
                    n.code, node.station.code, c.location_code, c.code,
                    c.latitude, c.longitude, c.elevation, c.depth,
                    c.azimuth, c.dip, c.sensor_description,
                    c.scale, c.scale_freq, c.scale_units, c.sample_rate,
                    c.start_time, c.end_time
                ))
    return "".join(lines)


def render_xml(params: FDSNParams, networks: List[NetworkNode]) -> str:
    builder = StationXMLBuilder(source=settings.STATIONXML_SOURCE, sender=settings.STATIONXML_SENDER)
    for n in networks:
        xml_network = builder.add_network(n.code, n.description, n.start_time, n.end_time)
        for node in n.stations:
            s = node.station
            xml_station = builder.add_station(
                xml_network, s.code, s.latitude, s.longitude, s.elevation,
                s.site_name, s.start_time, s.end_time
            )
            if params.level != "channel":
                continue
            for c in node.channels:
                builder.add_channel(
                    xml_station, c.code, c.location_code,
                    c.latitude, c.longitude, c.elevation, c.depth,
                    azimuth=c.azimuth,
                    dip=c.dip,
                    sample_rate=c.sample_rate,
                    sensor_description=c.sensor_description,
                    start_time=c.start_time,
                    end_time=c.end_time,
                )
    return builder.to_string()


@router.api_route("/query", methods=["GET", "POST"])
async def query(request: Request, db: AsyncSession = Depends(get_db)):
    params = await request_params(request)
    networks = await load_inventory(db, params)
    logger.info(
        f"fdsnws-station level={params.level} format={params.format} "
        f"net={params.networks} sta={params.stations} -> {len(networks)} networks"
    )

    if params.format == "text":
        return PlainTextResponse(render_text(params, networks))
    return Response(content=render_xml(params, networks), media_type="application/xml")


@router.get("/version")
async def version():
    return PlainTextResponse(VERSION)


@router.get("/application.wadl")
async def application_wadl():
    return Response(content=STATION_WADL, media_type="application/xml")
