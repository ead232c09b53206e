"""
Load imported channels into the normalized store with upsert logic (idempotency)
"""

from typing import Dict, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from models.inventory import Network, Station, Channel
from models.source import Source
from schemas.fdsn import ImportChannel
from core.exceptions import UpsertError, ChannelLookupError
import logging

logger = logging.getLogger(__name__)


class StationLoader:
    """
    Merge ImportChannel records into networks/stations/channels.

    Ensures:
    - No duplicate rows on repeated imports
    - Network description and station position/site are overwritten
    - Channels are replaced wholesale, keeping their ids
    - One transaction per import call
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def import_stations(self, source_id: int, channels: List[ImportChannel]) -> int:
        """
        Upsert every channel (and its network/station) in a single transaction.

        Args:
            source_id: Source that produced the rows
            channels: Records in upstream order

        Returns:
            Number of channel rows written

        Raises:
            UpsertError: Any failure; nothing from this call is persisted
        """
        if not channels:
            return 0

        # Scoped to this call so every import re-resolves against the
        # current transaction
        network_ids: Dict[str, int] = {}
        station_ids: Dict[Tuple[int, str], int] = {}

        current = None
        table_name = "networks"
        try:
            for current in channels:
                network_id = network_ids.get(current.network_code)
                if network_id is None:
                    table_name = "networks"
                    network_id = await self._upsert_network(source_id, current)
                    network_ids[current.network_code] = network_id

                station_key = (network_id, current.station_code)
                station_id = station_ids.get(station_key)
                if station_id is None:
                    table_name = "stations"
                    station_id = await self._upsert_station(network_id, current)
                    station_ids[station_key] = station_id

                table_name = "channels"
                await self._upsert_channel(station_id, current)

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            natural_key = None
            if current is not None:
                natural_key = (
                    f"{current.network_code}.{current.station_code}."
                    f"{current.location_code}.{current.channel_code}"
                )
            logger.error(f"Station import rolled back for source_id={source_id}: {str(e)}")
            raise UpsertError(
                "Failed to import stations",
                context={
                    "source_id": source_id,
                    "table_name": table_name,
                    "natural_key": natural_key,
                    "records_to_load": len(channels)
                },
                original_exception=e
            )

        logger.info(
            f"Imported {len(channels)} channels for source_id={source_id} "
            f"({len(network_ids)} networks, {len(station_ids)} stations)"
        )
        return len(channels)

    async def _upsert_network(self, source_id: int, ch: ImportChannel) -> int:
        stmt = insert(Network).values(
            source_id=source_id,
            code=ch.network_code,
            description=ch.network_description,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["source_id", "code"],
            set_={"description": stmt.excluded.description}
        ).returning(Network.id)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _upsert_station(self, network_id: int, ch: ImportChannel) -> int:
        stmt = insert(Station).values(
            network_id=network_id,
            code=ch.station_code,
            latitude=ch.latitude,
            longitude=ch.longitude,
            elevation=ch.elevation,
            site_name=ch.site_name,
            start_time=ch.station_start_time,
            end_time=ch.station_end_time,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["network_id", "code"],
            set_={
                "latitude": stmt.excluded.latitude,
                "longitude": stmt.excluded.longitude,
                "elevation": stmt.excluded.elevation,
                "site_name": stmt.excluded.site_name,
                "start_time": stmt.excluded.start_time,
                "end_time": stmt.excluded.end_time,
            }
        ).returning(Station.id)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _upsert_channel(self, station_id: int, ch: ImportChannel):
        stmt = insert(Channel).values(
            station_id=station_id,
            location_code=ch.location_code,
            code=ch.channel_code,
            latitude=ch.chan_latitude,
            longitude=ch.chan_longitude,
            elevation=ch.chan_elevation,
            depth=ch.depth,
            azimuth=ch.azimuth,
            dip=ch.dip,
            sensor_description=ch.sensor_description,
            scale=ch.scale,
            scale_freq=ch.scale_freq,
            scale_units=ch.scale_units,
            sample_rate=ch.sample_rate,
            start_time=ch.chan_start_time,
            end_time=ch.chan_end_time,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["station_id", "location_code", "code"],
            set_={field: getattr(stmt.excluded, field) for field in Channel.REPLACEABLE_FIELDS}
        )
        await self.db.execute(stmt)

    async def lookup_channel_ids(self, source_id: int, network_code: str, station_code: str) -> Dict[str, int]:
        """
        Channel ids of one station keyed by ``"{location}.{channel}"``.

        Raises:
            ChannelLookupError: Query failure
        """
        try:
            result = await self.db.execute(
                select(Channel.id, Channel.location_code, Channel.code)
                .join(Station, Channel.station_id == Station.id)
                .join(Network, Station.network_id == Network.id)
                .where(
                    Network.source_id == source_id,
                    Network.code == network_code,
                    Station.code == station_code
                )
            )
        except Exception as e:
            raise ChannelLookupError(
                f"channel lookup failed for {network_code}.{station_code}",
                context={
                    "source_id": source_id,
                    "network": network_code,
                    "station": station_code
                },
                original_exception=e
            )

        return {f"{loc}.{code}": channel_id for channel_id, loc, code in result.all()}

    async def list_refresh_targets(self) -> List[Dict]:
        """Unique (source, network) pairs that have been imported"""
        result = await self.db.execute(
            select(Source.id, Source.name, Network.code)
            .join(Network, Network.source_id == Source.id)
            .distinct()
            .order_by(Source.name, Network.code)
        )
        return [
            {"source_id": source_id, "source_name": name, "network_code": code}
            for source_id, name, code in result.all()
        ]
