"""
Import pipeline for upstream FDSN metadata.

Modules:
    runner: Import orchestrator (fetch, normalize, load, reconcile availability)

Subpackages:
    extractors: FDSN web service client and text response parsers
    transformers: Channel row normalization into import records
    loaders: Database loaders with idempotent upsert operations

Architecture:
    1. Fetch - Channel-level text query against one source; failure is fatal
    2. Normalize - Parsed rows become ImportChannel records
    3. Load - Networks, stations and channels upserted in one transaction
    4. Reconcile - Availability extents matched to stored channels, best effort

Usage:
    from ingestion.extractors.fdsn_client import FDSNClient
    from ingestion.loaders.availability_loader import AvailabilityLoader
    from ingestion.runner import ImportRunner

Example:
    client = FDSNClient(source.base_url, source_name=source.name)
    runner = ImportRunner(session, client, availability_loader=AvailabilityLoader(session))
    result = await runner.run(source, StationQuery(network="IU", station="ANMO"))

    print(f"Imported {result.imported} channels, availability {result.availability.status.value}")

Error Handling:
    Components raise exceptions from core.exceptions. Upstream and upsert
    failures of the channel import propagate to the caller; availability
    problems are recorded on the result instead.
"""

__all__ = [
    "FDSNClient",
    "ChannelNormalizer",
    "StationLoader",
    "AvailabilityLoader",
    "ImportRunner",
]
