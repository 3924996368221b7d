"""
HTTP status classification for upstream employee service responses.
"""

from typing import Optional

from shared.errors import (
    ClientError,
    EmployeeAccessException,
    NotFoundError,
    RateLimitedError,
    ServerError,
)


def classify(status_code: int, *, lookup_id: Optional[str] = None) -> EmployeeAccessException:
    """Map a non-success HTTP status to a typed error.

    ``lookup_id`` marks the single-record lookup path, where a 404 means the
    record does not exist rather than a generic client error.
    """
    details = {"status_code": status_code}

    if status_code == 404 and lookup_id is not None:
        return NotFoundError(f"Employee with id: {lookup_id} not found", details={**details, "id": lookup_id})
    if status_code == 429:
        return RateLimitedError(details=details)
    if 400 <= status_code < 500:
        return ClientError(f"Client error occurred: {status_code}", details=details)
    if 500 <= status_code < 600:
        return ServerError(f"Server error occurred: {status_code}", details=details)

    # 1xx/3xx never reach here from a followed response; treat as a broken upstream
    return ServerError(f"Unexpected status from employee service: {status_code}", details=details)
