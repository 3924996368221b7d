"""
Response envelope decoding for the upstream employee service.

The upstream wraps every payload as ``{"data": ..., "status": ..., "error": ...}``.
``decode_envelope`` unwraps it against an expected payload shape or raises a
ServerError; it never hands back an unchecked payload.
"""

import json
from typing import Any, List, Optional, Union

from pydantic import BaseModel, StrictBool, TypeAdapter, ValidationError, field_validator

from shared.errors import ServerError
from ..models import EmployeeRecord, Status, STATUS_DESCRIPTIONS


# Expected payload shapes
SINGLE_RECORD = TypeAdapter(EmployeeRecord)
RECORD_LIST = TypeAdapter(List[EmployeeRecord])
BOOLEAN = TypeAdapter(StrictBool)

_STATUS_BY_DESCRIPTION = {description: status for status, description in STATUS_DESCRIPTIONS.items()}


class ResponseEnvelope(BaseModel):
    """Upstream envelope with an as-yet unchecked payload."""

    data: Any = None
    status: Status
    error: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _accept_status_description(cls, value: Any) -> Any:
        # The upstream may send either the enum name or its description
        if isinstance(value, str):
            return _STATUS_BY_DESCRIPTION.get(value, value.upper())
        return value


def parse_envelope(body: Union[str, bytes]) -> ResponseEnvelope:
    """Parse a raw response body into an envelope."""
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise ServerError(
            "Malformed response from employee service",
            details={"reason": f"invalid JSON: {exc}"}
        ) from exc

    if not isinstance(payload, dict):
        raise ServerError(
            "Malformed response from employee service",
            details={"reason": "envelope is not an object"}
        )

    try:
        return ResponseEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise ServerError(
            "Malformed response from employee service",
            details={"reason": exc.errors(include_url=False, include_context=False)}
        ) from exc


def decode_envelope(body: Union[str, bytes], shape: TypeAdapter) -> Any:
    """Unwrap ``data`` from an envelope, validated against ``shape``.

    Raises ServerError carrying the envelope's error string when the upstream
    reports ERROR, and ServerError when the body or payload is malformed.
    """
    envelope = parse_envelope(body)

    if envelope.status == Status.ERROR:
        raise ServerError(envelope.error or "Employee service reported an error")

    try:
        return shape.validate_python(envelope.data)
    except ValidationError as exc:
        raise ServerError(
            "Unexpected payload from employee service",
            details={"reason": exc.errors(include_url=False, include_context=False)}
        ) from exc
