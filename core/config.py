"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import List, Dict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./fdsn.db"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Upstream FDSN client
    FDSN_TIMEOUT: float = 60.0
    USER_AGENT: str = "fdsn-portal/1.0"
    AVAILABILITY_ENABLED: bool = True

    # StationXML header
    STATIONXML_SOURCE: str = "FDSN Portal"
    STATIONXML_SENDER: str = "FDSN Portal"

    # Sources seeded at startup when missing (matched by name)
    PRESET_SOURCES: List[Dict[str, str]] = [
        {
            "name": "IRIS",
            "base_url": "https://service.iris.edu",
            "description": "IRIS Data Management Center",
        },
        {
            "name": "ORFEUS",
            "base_url": "https://www.orfeus-eu.org",
            "description": "ORFEUS Data Center (Europe)",
        },
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
