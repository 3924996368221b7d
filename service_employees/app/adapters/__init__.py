"""
Adapters package for the Employees Service.

Contains the HTTP client for the upstream employee service. The adapter
encapsulates:

- Base URL, timeout and request shapes
- Envelope decoding against the expected payload shape
- Status classification into shared error kinds
- The retry policy applied to every operation

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .employee_client import EmployeeApiClient
from .envelope import ResponseEnvelope, decode_envelope
from .error_classifier import classify

__all__ = [
    "EmployeeApiClient",
    "ResponseEnvelope",
    "decode_envelope",
    "classify",
]
