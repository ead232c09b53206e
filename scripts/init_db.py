import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine, init_models, seed_sources
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def init_database():
    logger.info(f"Connecting to database {settings.DATABASE_URL}...")
    engine = create_engine(settings.DATABASE_URL)

    logger.info("Creating tables...")
    await init_models(engine)
    logger.info("Tables created successfully.")

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        created = await seed_sources(session)
    logger.info(f"Seeded {created} preset sources.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_database())
