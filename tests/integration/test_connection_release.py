"""
Integration tests for connection handling around upstream calls
(file-backed SQLite with the single-connection pool)
"""

import asyncio
import time
import pytest
import pytest_asyncio
import httpx
import respx
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from core.database import create_engine, init_models
from ingestion.extractors.fdsn_client import FDSNClient
from ingestion.loaders.availability_loader import AvailabilityLoader
from ingestion.runner import ImportRunner
from models.source import Source
from schemas.fdsn import StationQuery

IRIS_URL = "https://service.iris.edu"
STATION_URL = f"{IRIS_URL}/fdsnws/station/1/query"
EXTENT_URL = f"{IRIS_URL}/fdsnws/availability/1/extent"

UPSTREAM_DELAY = 1.5

TWO_STATIONS = (
    "#Network|Station|Location|Channel|Latitude|Longitude|Elevation|Depth|Azimuth|Dip|"
    "SensorDescription|Scale|ScaleFreq|ScaleUnits|SampleRate|StartTime|EndTime\n"
    "IU|ANMO|00|BHZ|34.9|-106.4|1850|0|0|-90|STS|1e9|0.02|M/S|40|2018-01-01T00:00:00|\n"
    "IU|COLA|00|BHZ|64.8|-147.8|200|0|0|-90|STS|1e9|0.02|M/S|40|2018-01-01T00:00:00|\n"
)


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(file_engine):
    maker = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        session.add(Source(name="IRIS", base_url=IRIS_URL, description="IRIS DMC"))
        await session.commit()
    return maker


async def timed_select(session_maker) -> float:
    """Seconds a second session waits for the pooled connection"""
    await asyncio.sleep(0.3)
    started = time.monotonic()
    async with session_maker() as other:
        await other.execute(text("SELECT 1"))
    return time.monotonic() - started


async def run_import(session_maker) -> int:
    async with session_maker() as session:
        # Loading the source checks the connection out
        source = await session.get(Source, 1)
        runner = ImportRunner(
            session,
            FDSNClient(source.base_url, source_name=source.name),
            availability_loader=AvailabilityLoader(session)
        )
        result = await runner.run(source, StationQuery(network="IU"))
        return result.imported


class TestConnectionRelease:

    @pytest.mark.asyncio
    async def test_channel_fetch_does_not_hold_connection(self, session_maker):
        async def slow_station(request):
            await asyncio.sleep(UPSTREAM_DELAY)
            return httpx.Response(204)

        with respx.mock(assert_all_called=False) as respx_mock:
            respx_mock.get(STATION_URL).mock(side_effect=slow_station)
            respx_mock.get(EXTENT_URL).mock(return_value=httpx.Response(204))

            imported, waited = await asyncio.gather(
                run_import(session_maker),
                timed_select(session_maker),
            )

        assert imported == 0
        assert waited < 1.0

    @pytest.mark.asyncio
    async def test_extent_fetch_does_not_hold_connection(self, session_maker):
        async def extent_for(request):
            station = request.url.params["sta"]
            if station == "COLA":
                await asyncio.sleep(UPSTREAM_DELAY)
                return httpx.Response(204)
            return httpx.Response(200, text=(
                "IU ANMO 00 BHZ M 40.0 2018-01-01T00:00:00Z 2024-01-01T00:00:00Z "
                "2024-01-02T00:00:00Z 1 OPEN\n"
            ))

        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(200, text=TWO_STATIONS))
            extent_route = respx.get(EXTENT_URL).mock(side_effect=extent_for)

            imported, waited = await asyncio.gather(
                run_import(session_maker),
                timed_select(session_maker),
            )

        assert imported == 2
        assert extent_route.call_count == 2
        assert waited < 1.0
