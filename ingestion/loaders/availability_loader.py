"""
Load availability extents with upsert logic
"""

from datetime import datetime
from typing import Any, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, case
from sqlalchemy.dialects.sqlite import insert
from models.availability import AvailabilityExtent
from models.inventory import Channel
from schemas.fdsn import AvailabilityItem
from core.exceptions import UpsertError
import logging

logger = logging.getLogger(__name__)


class AvailabilityLoader:
    """
    Upsert availability extents keyed by (channel_id, earliest).

    On conflict ``latest`` keeps the greater of the stored and incoming
    values, so recorded coverage never shrinks.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _upsert_statement(self, item: AvailabilityItem):
        now = datetime.utcnow()
        stmt = insert(AvailabilityExtent).values(
            channel_id=item.channel_id,
            earliest=item.earliest,
            latest=item.latest,
            updated_at=now,
        )
        return stmt.on_conflict_do_update(
            index_elements=["channel_id", "earliest"],
            set_={
                "latest": case(
                    (stmt.excluded.latest > AvailabilityExtent.latest, stmt.excluded.latest),
                    else_=AvailabilityExtent.latest
                ),
                "updated_at": now,
            }
        )

    async def upsert(self, channel_id: int, earliest: datetime, latest: datetime):
        """Upsert a single extent in its own transaction"""
        await self.upsert_batch([
            AvailabilityItem(channel_id=channel_id, earliest=earliest, latest=latest)
        ])

    async def upsert_batch(self, items: List[AvailabilityItem]) -> int:
        """
        Upsert all items in one transaction.

        Returns:
            Number of items written

        Raises:
            UpsertError: Any failure; the whole batch is rolled back
        """
        if not items:
            return 0

        try:
            for item in items:
                await self.db.execute(self._upsert_statement(item))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to upsert availability batch",
                context={
                    "table_name": "availability",
                    "records_to_load": len(items)
                },
                original_exception=e
            )

        logger.info(f"Upserted {len(items)} availability extents")
        return len(items)

    async def get_by_station_id(self, station_id: int) -> List[Dict[str, Any]]:
        """
        Every channel of a station with its extents (LEFT JOIN).

        Channels without availability appear once with null bounds.
        """
        result = await self.db.execute(
            select(
                Channel.id,
                Channel.location_code,
                Channel.code,
                Channel.sample_rate,
                AvailabilityExtent.earliest,
                AvailabilityExtent.latest,
            )
            .outerjoin(AvailabilityExtent, AvailabilityExtent.channel_id == Channel.id)
            .where(Channel.station_id == station_id)
            .order_by(Channel.location_code, Channel.code, AvailabilityExtent.earliest)
        )
        return [
            {
                "channel_id": channel_id,
                "location_code": location_code,
                "channel_code": code,
                "sample_rate": sample_rate,
                "earliest": earliest,
                "latest": latest,
            }
            for channel_id, location_code, code, sample_rate, earliest, latest in result.all()
        ]
