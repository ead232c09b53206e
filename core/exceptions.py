"""
Custom exceptions for the FDSN portal with structured error context.

This module provides the exception hierarchy used by the upstream client,
the import/reconciliation pipeline and the API layer. Each exception carries
context information for debugging and for the JSON error responses.

Exception Hierarchy:
    PortalError (base)
    ├── UpstreamError
    │   ├── UpstreamStatusError
    │   │   └── ServiceNotSupportedError
    │   └── UpstreamConnectionError
    ├── ReconciliationError
    │   ├── UpsertError
    │   └── ChannelLookupError
    ├── InvalidQueryError
    └── ResourceNotFoundError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class PortalError(Exception):
    """
    Base exception for all portal errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (source, url, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Upstream Errors
# ============================================================================

class UpstreamError(PortalError):
    """Base exception for failures talking to an external FDSN service."""
    pass


class UpstreamStatusError(UpstreamError):
    """
    Raised when an upstream service answers with a status other than 200/204.

    Context should include:
        - url: The request URL
        - status_code: HTTP status code
        - response_body: Response body (truncated if large)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.context["status_code"] = status_code


class ServiceNotSupportedError(UpstreamStatusError):
    """Upstream does not offer the requested service (HTTP 404 or 501)."""
    pass


class UpstreamConnectionError(UpstreamError):
    """Transport failure or timeout before a response was received."""
    pass


# ============================================================================
# Reconciliation Errors
# ============================================================================

class ReconciliationError(PortalError):
    """Base exception for failures while merging rows into the store."""
    pass


class UpsertError(ReconciliationError):
    """
    Raised when an import or availability batch cannot be committed.
    The transaction has been rolled back when this is raised.

    Context should include:
        - source_id: Source being imported
        - table_name: Table being written
        - natural_key: Key of the row that failed (if known)
    """
    pass


class ChannelLookupError(ReconciliationError):
    """Raised when local channel ids for a network/station cannot be read."""
    pass


# ============================================================================
# Request Errors
# ============================================================================

class InvalidQueryError(PortalError):
    """Malformed client request (bad parameter, missing required field)."""
    pass


class ResourceNotFoundError(PortalError):
    """A referenced source, station or network does not exist."""
    pass


def is_not_supported(error: Exception) -> bool:
    """True when the error means the upstream lacks the service entirely."""
    return isinstance(error, ServiceNotSupportedError)
