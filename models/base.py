from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class AvailabilityStatus(str, enum.Enum):
    """Outcome of the availability step of an import"""
    OK = "ok"
    NO_DATA = "no_data"
    NOT_SUPPORTED = "not_supported"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


class Level(str, enum.Enum):
    """FDSN station service aggregation level"""
    NETWORK = "network"
    STATION = "station"
    CHANNEL = "channel"
    RESPONSE = "response"
