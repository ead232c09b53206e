"""
Transform parsed upstream channel rows into import records
"""

from typing import List, Iterable
from pydantic import ValidationError
import logging

from schemas.fdsn import ChannelTextRow, ImportChannel

logger = logging.getLogger(__name__)


class ChannelNormalizer:
    """
    Map channel text rows onto ImportChannel records.

    A channel-level response carries no station-only columns, so the
    station position is taken from the channel row and the network
    description, site name and station epoch are left empty.
    """

    def normalize(self, row: ChannelTextRow) -> ImportChannel:
        return ImportChannel(
            network_code=row.network,
            station_code=row.station,
            latitude=row.latitude,
            longitude=row.longitude,
            elevation=row.elevation,
            location_code=row.location,
            channel_code=row.channel,
            chan_latitude=row.latitude,
            chan_longitude=row.longitude,
            chan_elevation=row.elevation,
            depth=row.depth,
            azimuth=row.azimuth,
            dip=row.dip,
            sensor_description=row.sensor_description,
            scale=row.scale,
            scale_freq=row.scale_freq,
            scale_units=row.scale_units,
            sample_rate=row.sample_rate,
            chan_start_time=row.start_time,
            chan_end_time=row.end_time,
        )

    def normalize_all(self, rows: Iterable[ChannelTextRow]) -> List[ImportChannel]:
        """
        Normalize in input order.

        Rows missing a network, station or channel code are dropped.
        """
        channels = []
        dropped = 0
        for row in rows:
            try:
                channels.append(self.normalize(row))
            except ValidationError as e:
                dropped += 1
                logger.warning(
                    f"Dropping channel row {row.network}.{row.station}.{row.location}.{row.channel}: "
                    f"{e.error_count()} validation errors"
                )
        logger.debug(f"Normalized {len(channels)} channel rows, dropped {dropped}")
        return channels
