"""
Core utilities and configuration for the FDSN portal.

Modules:
    config: Application configuration and environment variable management
    database: Async engine, session factory, table creation and source seeding
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import get_session
    from core.exceptions import UpstreamError, ResourceNotFoundError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async for session in get_session():
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "get_session",
    "setup_logging",
    # Exceptions
    "PortalError",
    "UpstreamError",
    "UpstreamStatusError",
    "ServiceNotSupportedError",
    "UpstreamConnectionError",
    "ReconciliationError",
    "UpsertError",
    "ChannelLookupError",
    "InvalidQueryError",
    "ResourceNotFoundError",
]
