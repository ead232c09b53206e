"""
Import channels (and availability) from one configured source

Usage:
    python scripts/run_import.py IRIS --network IU --station ANMO
    python scripts/run_import.py --refresh
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from core.config import settings
from core.database import create_engine, init_models
from core.exceptions import PortalError
from core.logging import setup_logging
from ingestion.extractors.fdsn_client import FDSNClient
from ingestion.loaders.availability_loader import AvailabilityLoader
from ingestion.loaders.station_loader import StationLoader
from ingestion.runner import ImportRunner
from models.source import Source
from schemas.fdsn import StationQuery

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import FDSN station metadata from a source")
    parser.add_argument("source", nargs="?", help="Source name, e.g. IRIS")
    parser.add_argument("--network", default="", help="Network code or pattern")
    parser.add_argument("--station", default="", help="Station code or pattern")
    parser.add_argument("--channel", default="", help="Channel code or pattern")
    parser.add_argument("--location", default="", help="Location code or pattern")
    parser.add_argument(
        "--no-availability",
        action="store_true",
        help="Skip availability reconciliation"
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Re-import every (source, network) pair already in the store"
    )
    args = parser.parse_args(argv)
    if not args.refresh and not args.source:
        parser.error("a source name is required unless --refresh is given")
    return args


async def import_one(session: AsyncSession, source: Source, query: StationQuery, with_availability: bool) -> bool:
    loader = AvailabilityLoader(session) if with_availability else None
    runner = ImportRunner(
        session,
        FDSNClient(source.base_url, source_name=source.name),
        availability_loader=loader
    )
    try:
        result = await runner.run(source, query)
    except PortalError as e:
        logger.error(f"Import from {source.name} failed: {str(e)}")
        return False

    logger.info(f"{source.name} {query.to_params()}: {result.to_dict()}")
    return True


async def run_import(args) -> int:
    engine = create_engine(settings.DATABASE_URL)
    await init_models(engine)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    with_availability = settings.AVAILABILITY_ENABLED and not args.no_availability
    failures = 0

    try:
        async with session_maker() as session:
            if args.refresh:
                targets = await StationLoader(session).list_refresh_targets()
                if not targets:
                    logger.warning("Nothing imported yet. Skipping refresh.")
                for target in targets:
                    source = await session.get(Source, target["source_id"])
                    query = StationQuery(network=target["network_code"])
                    if not await import_one(session, source, query, with_availability):
                        failures += 1
            else:
                result = await session.execute(select(Source).where(Source.name == args.source))
                source = result.scalars().first()
                if source is None:
                    logger.error(f"Unknown source: {args.source}")
                    return 1

                query = StationQuery(
                    network=args.network,
                    station=args.station,
                    channel=args.channel,
                    location=args.location,
                )
                if not await import_one(session, source, query, with_availability):
                    failures += 1
    finally:
        await engine.dispose()

    return 1 if failures else 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_import(parse_args())))
