"""
Pydantic schemas for data validation and serialization.

Schemas:
    fdsn: Parsed upstream text rows, upstream query filters and the
          ImportChannel record consumed by the station loader
    api: Management API request/response models

Features:
    - Automatic data validation
    - Type coercion and conversion
    - JSON serialization/deserialization
    - OpenAPI schema generation for FastAPI

Usage:
    from schemas.fdsn import ChannelTextRow, StationQuery, ImportChannel
    from schemas.api import ImportRequest, ImportResponse

Example:
    query = StationQuery(network="IU", station="ANMO")
    query.to_params()
    # {"net": "IU", "sta": "ANMO"}
"""

__all__ = [
    "StationTextRow",
    "ChannelTextRow",
    "AvailabilityExtentRow",
    "StationQuery",
    "AvailabilityQuery",
    "ImportChannel",
    "AvailabilityItem",
    "ImportRequest",
    "ImportResponse",
    "SourceCreate",
    "SourceResponse",
    "StatsResponse",
    "ErrorResponse",
]
