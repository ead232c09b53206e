# ============================================================================
# File: ingestion/runner.py
# Description: Import/reconciliation orchestrator for one upstream source
# ============================================================================
"""
Import Runner - Orchestrates fetch, normalize, load and availability reconciliation.

This module provides:
- Hard failure on the primary channel fetch (nothing to import without it)
- A single atomic transaction for the channel import
- Best-effort availability reconciliation that never undoes the import
- A status summary describing how the availability step went
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.extractors.fdsn_client import FDSNClient
from ingestion.transformers.normalizer import ChannelNormalizer
from ingestion.loaders.station_loader import StationLoader
from ingestion.loaders.availability_loader import AvailabilityLoader
from models.base import AvailabilityStatus
from models.source import Source
from protocol.timecodec import truncate_to_second
from schemas.fdsn import AvailabilityItem, AvailabilityQuery, ChannelTextRow, StationQuery
from core.database import release_connection
from core.exceptions import (
    UpstreamError,
    ReconciliationError,
    UpsertError,
    is_not_supported,
)

logger = logging.getLogger(__name__)

NOT_SUPPORTED_MESSAGE = "availability not supported by this source"


@dataclass
class SoftCondition:
    """Non-fatal problem recorded during availability reconciliation"""
    message: str
    not_supported: bool = False


@dataclass
class AvailabilityResult:
    count: int = 0
    conditions: List[SoftCondition] = field(default_factory=list)
    configured: bool = True

    @property
    def error(self) -> Optional[str]:
        if not self.conditions:
            return None
        return self.conditions[-1].message

    @property
    def status(self) -> AvailabilityStatus:
        if not self.configured:
            return AvailabilityStatus.NOT_CONFIGURED
        if self.conditions and self.conditions[-1].not_supported:
            return AvailabilityStatus.NOT_SUPPORTED
        if self.conditions and self.count == 0:
            return AvailabilityStatus.ERROR
        if self.count > 0:
            return AvailabilityStatus.OK
        return AvailabilityStatus.NO_DATA


@dataclass
class ImportResult:
    imported: int = 0
    availability: AvailabilityResult = field(default_factory=AvailabilityResult)

    def to_dict(self) -> dict:
        return {
            "imported": self.imported,
            "availability_count": self.availability.count,
            "availability_status": self.availability.status.value,
            "availability_error": self.availability.error,
        }


def unique_network_stations(rows: List[ChannelTextRow]) -> List[Tuple[str, str]]:
    """(network, station) pairs in first-seen order"""
    seen = set()
    pairs = []
    for row in rows:
        key = (row.network, row.station)
        if key not in seen:
            seen.add(key)
            pairs.append(key)
    return pairs


class ImportRunner:
    """
    Import orchestrator for one source.

    Responsibilities:
    - Fetch channel rows from the upstream station service
    - Normalize and merge them into the store in one transaction
    - Fetch availability extents per network/station and attach them to
      the channels just imported (when an availability loader is configured)
    """

    def __init__(
        self,
        db_session: AsyncSession,
        client: FDSNClient,
        availability_loader: Optional[AvailabilityLoader] = None
    ):
        self.db = db_session
        self.client = client
        self.station_loader = StationLoader(db_session)
        self.availability_loader = availability_loader
        self.normalizer = ChannelNormalizer()

    async def run(self, source: Source, query: StationQuery) -> ImportResult:
        """
        Run the full import for a source.

        Args:
            source: Source to import from
            query: Network/station/channel/location filters

        Returns:
            ImportResult with channel count and availability summary

        Raises:
            UpstreamError: The channel fetch failed
            UpsertError: The channel import transaction was rolled back
        """
        # Plain values: a rollback expires ORM instances
        source_id, source_name = source.id, source.name

        # --------------------------------------------------
        # PHASE 1: FETCH CHANNELS
        # --------------------------------------------------
        logger.info(f"Starting import from {source_name} with filters {query.to_params()}")
        await release_connection(self.db)
        rows = await self.client.query_channels(query)

        if not rows:
            logger.info(f"No channels returned by {source_name}")
            result = ImportResult(imported=0)
            result.availability.configured = self.availability_loader is not None
            return result

        # --------------------------------------------------
        # PHASE 2: NORMALIZE + LOAD (ATOMIC)
        # --------------------------------------------------
        channels = self.normalizer.normalize_all(rows)
        imported = await self.station_loader.import_stations(source_id, channels)
        logger.info(f"Imported {imported} channels from {source_name}")

        result = ImportResult(imported=imported)

        # --------------------------------------------------
        # PHASE 3: AVAILABILITY (BEST EFFORT)
        # --------------------------------------------------
        if self.availability_loader is None:
            result.availability.configured = False
            return result

        result.availability = await self.reconcile_availability(source_id, source_name, rows)
        return result

    async def reconcile_availability(
        self,
        source_id: int,
        source_name: str,
        rows: List[ChannelTextRow]
    ) -> AvailabilityResult:
        """
        Fetch availability extents for every network/station in rows and
        upsert those that match a stored channel.
        """
        outcome = AvailabilityResult()
        items: List[AvailabilityItem] = []

        for network, station in unique_network_stations(rows):
            # The previous lookup checked the connection out again
            await release_connection(self.db)
            try:
                extents = await self.client.query_availability_extent(
                    AvailabilityQuery(network=network, station=station)
                )
            except UpstreamError as e:
                if is_not_supported(e):
                    logger.info(f"Availability not supported by {source_name} for {network}.{station}")
                    outcome.conditions.append(SoftCondition(NOT_SUPPORTED_MESSAGE, not_supported=True))
                else:
                    logger.warning(f"Failed to fetch availability extent for {network}.{station}: {e.message}")
                    outcome.conditions.append(SoftCondition(
                        f"availability fetch error for {network}.{station}: {e.message}"
                    ))
                continue

            if not extents:
                continue

            try:
                channel_ids = await self.station_loader.lookup_channel_ids(source_id, network, station)
            except ReconciliationError as e:
                logger.warning(f"Failed to lookup channel IDs for {network}.{station}: {str(e)}")
                outcome.conditions.append(SoftCondition(
                    f"channel lookup error for {network}.{station}: {e.message}"
                ))
                continue

            for extent in extents:
                channel_id = channel_ids.get(extent.channel_key)
                if channel_id is None:
                    continue
                if extent.earliest is None or extent.latest is None:
                    continue
                earliest = truncate_to_second(extent.earliest)
                latest = truncate_to_second(extent.latest)
                if earliest > latest:
                    continue
                items.append(AvailabilityItem(channel_id=channel_id, earliest=earliest, latest=latest))

        if items:
            try:
                outcome.count = await self.availability_loader.upsert_batch(items)
            except UpsertError as e:
                logger.warning(f"Failed to upsert availability batch of {len(items)} items: {str(e)}")
                outcome.count = 0
                outcome.conditions.append(SoftCondition(
                    f"availability upsert error: {e.original_exception or e.message}"
                ))

        logger.info(f"Availability import complete for {source_name}: {outcome.count} records, status={outcome.status.value}")
        return outcome
