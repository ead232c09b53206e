"""
Unit tests for availability upserts (in-memory SQLite)
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock
from sqlalchemy import select
from ingestion.loaders.availability_loader import AvailabilityLoader
from ingestion.loaders.station_loader import StationLoader
from models.availability import AvailabilityExtent
from models.inventory import Channel
from schemas.fdsn import AvailabilityItem, ImportChannel
from core.exceptions import UpsertError


async def import_anmo(db_session, source_id):
    channels = [
        ImportChannel(network_code="IU", station_code="ANMO", location_code="00", channel_code="BHZ", sample_rate=40.0),
        ImportChannel(network_code="IU", station_code="ANMO", location_code="00", channel_code="BH1", sample_rate=40.0),
    ]
    loader = StationLoader(db_session)
    await loader.import_stations(source_id, channels)
    return await loader.lookup_channel_ids(source_id, "IU", "ANMO")


async def stored_extents(db_session):
    result = await db_session.execute(
        select(AvailabilityExtent).order_by(AvailabilityExtent.channel_id, AvailabilityExtent.earliest)
    )
    extents = result.scalars().all()
    for extent in extents:
        await db_session.refresh(extent)
    return extents


class TestAvailabilityLoader:

    @pytest.mark.asyncio
    async def test_upsert_batch_inserts(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)

        written = await loader.upsert_batch([
            AvailabilityItem(channel_id=ids["00.BHZ"], earliest=datetime(2018, 1, 1), latest=datetime(2024, 1, 1)),
            AvailabilityItem(channel_id=ids["00.BH1"], earliest=datetime(2018, 1, 1), latest=datetime(2023, 1, 1)),
        ])

        assert written == 2
        assert len(await stored_extents(db_session)) == 2

    @pytest.mark.asyncio
    async def test_latest_never_shrinks(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)
        channel_id = ids["00.BHZ"]

        await loader.upsert(channel_id, datetime(2018, 1, 1), datetime(2024, 1, 1))
        await loader.upsert(channel_id, datetime(2018, 1, 1), datetime(2020, 1, 1))

        extents = await stored_extents(db_session)
        assert len(extents) == 1
        assert extents[0].latest == datetime(2024, 1, 1)

    @pytest.mark.asyncio
    async def test_latest_grows(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)
        channel_id = ids["00.BHZ"]

        await loader.upsert(channel_id, datetime(2018, 1, 1), datetime(2024, 1, 1))
        await loader.upsert(channel_id, datetime(2018, 1, 1), datetime(2025, 6, 1))

        extents = await stored_extents(db_session)
        assert extents[0].latest == datetime(2025, 6, 1)

    @pytest.mark.asyncio
    async def test_different_earliest_is_a_new_row(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)
        channel_id = ids["00.BHZ"]

        await loader.upsert(channel_id, datetime(2018, 1, 1), datetime(2019, 1, 1))
        await loader.upsert(channel_id, datetime(2020, 1, 1), datetime(2021, 1, 1))

        assert len(await stored_extents(db_session)) == 2

    @pytest.mark.asyncio
    async def test_empty_batch(self, db_session):
        assert await AvailabilityLoader(db_session).upsert_batch([]) == 0

    @pytest.mark.asyncio
    async def test_unknown_channel_rolls_back_whole_batch(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)

        with pytest.raises(UpsertError):
            await loader.upsert_batch([
                AvailabilityItem(channel_id=ids["00.BHZ"], earliest=datetime(2018, 1, 1), latest=datetime(2024, 1, 1)),
                AvailabilityItem(channel_id=99999, earliest=datetime(2018, 1, 1), latest=datetime(2024, 1, 1)),
            ])

        assert await stored_extents(db_session) == []

    @pytest.mark.asyncio
    async def test_failure_calls_rollback(self):
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=RuntimeError("locked"))

        with pytest.raises(UpsertError) as exc_info:
            await AvailabilityLoader(session).upsert_batch([
                AvailabilityItem(channel_id=1, earliest=datetime(2018, 1, 1), latest=datetime(2019, 1, 1))
            ])

        session.rollback.assert_awaited_once()
        assert exc_info.value.context["records_to_load"] == 1

    @pytest.mark.asyncio
    async def test_get_by_station_id_left_join(self, db_session, iris_source):
        ids = await import_anmo(db_session, iris_source.id)
        loader = AvailabilityLoader(db_session)
        await loader.upsert(ids["00.BHZ"], datetime(2018, 1, 1), datetime(2024, 1, 1))

        result = await db_session.execute(select(Channel.station_id).where(Channel.id == ids["00.BHZ"]))
        station_id = result.scalar()

        items = await loader.get_by_station_id(station_id)

        assert [(i["location_code"], i["channel_code"]) for i in items] == [("00", "BH1"), ("00", "BHZ")]
        assert items[0]["earliest"] is None
        assert items[0]["latest"] is None
        assert items[1]["earliest"] == datetime(2018, 1, 1)
        assert items[1]["sample_rate"] == 40.0
