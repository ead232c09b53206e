"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
import httpx
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models.base import Base
from models.source import Source
import models  # noqa: F401
import core.database  # noqa: F401  (registers the SQLite foreign key pragma)
from typing import AsyncGenerator

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

IRIS_URL = "https://service.iris.edu"

ANMO_CHANNELS = (
    "#Network|Station|Location|Channel|Latitude|Longitude|Elevation|Depth|Azimuth|Dip|"
    "SensorDescription|Scale|ScaleFreq|ScaleUnits|SampleRate|StartTime|EndTime\n"
    "IU|ANMO|00|BHZ|34.945900|-106.457200|1850.0|100.0|0.0|-90.0|"
    "Streckeisen STS-6A VBB Seismometer|1.9e9|0.02|M/S|40.0|2018-07-09T20:45:00|\n"
    "IU|ANMO|00|BH1|34.945900|-106.457200|1850.0|100.0|164.0|0.0|"
    "Streckeisen STS-6A VBB Seismometer|1.9e9|0.02|M/S|40.0|2018-07-09T20:45:00|\n"
)

ANMO_EXTENT = (
    "#Network Station Location Channel Quality SampleRate Earliest Latest Updated TimeSpans Restriction\n"
    "IU ANMO 00 BHZ M 40.0 2018-07-09T20:45:00.000000Z 2024-01-01T00:00:00.500000Z "
    "2024-01-02T00:00:00Z 12 OPEN\n"
    "IU ANMO 00 BH1 M 40.0 2018-07-09T20:45:00.000000Z 2024-01-01T00:00:00.000000Z "
    "2024-01-02T00:00:00Z 10 OPEN\n"
    "IU ANMO 10 BHZ M 40.0 2018-07-09T20:45:00.000000Z 2024-01-01T00:00:00.000000Z "
    "2024-01-02T00:00:00Z 3 OPEN\n"
)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """In-memory SQLite engine shared by every session of a test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def iris_source(db_session) -> Source:
    source = Source(name="IRIS", base_url=IRIS_URL, description="IRIS DMC")
    db_session.add(source)
    await db_session.commit()
    await db_session.refresh(source)
    return source


@pytest_asyncio.fixture
async def api_client(db_session) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app with the test session injected"""
    from api.main import app
    from api.dependencies import get_db

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def anmo_channels_text():
    return ANMO_CHANNELS


@pytest.fixture
def anmo_extent_text():
    return ANMO_EXTENT
