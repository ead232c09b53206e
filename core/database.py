"""
Database session management with SQLAlchemy async
"""

from typing import AsyncGenerator, Optional
from sqlalchemy import event, select
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from core.config import settings
import logging

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on FK enforcement (and cascades) for every SQLite connection"""
    if "sqlite" not in type(dbapi_connection).__module__:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async engine.

    SQLite allows a single writer, so the pool holds exactly one connection
    and every session queues behind it. In-memory databases already get a
    single shared connection from SQLAlchemy.
    """
    url = database_url or settings.DATABASE_URL
    if ":memory:" in url:
        return create_async_engine(url, echo=False, future=True)
    return create_async_engine(
        url,
        echo=False,
        pool_size=1,
        max_overflow=0,
        future=True
    )


# Create async engine
engine = create_engine()

# Create session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session"""
    async with async_session_maker() as session:
        yield session


async def release_connection(session: AsyncSession):
    """
    End the session's transaction so its pooled connection goes back to
    the pool before slow upstream I/O. Loaded instances stay usable since
    sessions do not expire on commit.
    """
    await session.commit()


async def init_models(bind: Optional[AsyncEngine] = None):
    """Create all tables (development and tests; production uses alembic)"""
    from models.base import Base
    import models  # noqa: F401  (registers tables on Base.metadata)

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_sources(session: AsyncSession) -> int:
    """
    Insert preset sources that are not already present (matched by name).

    Returns:
        Number of sources created
    """
    from models.source import Source

    result = await session.execute(select(Source.name))
    existing = set(result.scalars().all())

    created = 0
    for preset in settings.PRESET_SOURCES:
        if preset["name"] in existing:
            continue
        session.add(Source(
            name=preset["name"],
            base_url=preset["base_url"],
            description=preset.get("description", ""),
            enabled=True
        ))
        created += 1
        logger.info(f"Seeded source {preset['name']} ({preset['base_url']})")

    if created:
        await session.commit()
    return created
