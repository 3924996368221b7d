"""
Shared error handling for the Employee Access Layer.

Every failure surfaced by the core carries one ErrorKind from a closed set.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Closed set of failure classes surfaced by the access layer."""
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    CLIENT_ERROR = "CLIENT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    TRANSPORT_FAULT = "TRANSPORT_FAULT"


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}
    status: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EmployeeAccessException(Exception):
    """Base exception for the Employee Access Layer."""

    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = self.kind.value
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, status: Optional[int] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details,
            status=status
        )


class NotFoundError(EmployeeAccessException):
    """Requested record or aggregate does not exist."""
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(EmployeeAccessException):
    """Upstream rejected the call with 429, or the retry budget ran out."""
    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str = "Your request limit has been reached. Please try again in some time.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)


class ClientError(EmployeeAccessException):
    """Upstream answered with a 4xx other than 429 (or a contextual 404)."""
    kind = ErrorKind.CLIENT_ERROR


class ServerError(EmployeeAccessException):
    """Upstream answered 5xx, reported an ERROR envelope, or sent garbage."""
    kind = ErrorKind.SERVER_ERROR


class TransportFaultError(EmployeeAccessException):
    """Connection or timeout failure below the HTTP layer."""
    kind = ErrorKind.TRANSPORT_FAULT
