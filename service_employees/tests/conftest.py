"""
Shared fixtures for Employees service tests.
"""

from typing import Any, Callable, Dict, List

import httpx
import pytest

from service_employees.app.adapters.employee_client import EmployeeApiClient
from shared.retry import RetryConfig
from shared.test_helpers import TestDataFactory


BASE_URL = "http://employee-api.test/api/v1"


@pytest.fixture
def fifty_employees() -> List[Dict[str, Any]]:
    return TestDataFactory.create_employees(50)


@pytest.fixture
def sleep_calls() -> List[float]:
    """Backoff delays requested by clients built with ``make_api_client``."""
    return []


@pytest.fixture
def make_api_client(sleep_calls) -> Callable[..., EmployeeApiClient]:
    """Build an EmployeeApiClient whose upstream is the given handler."""

    async def fake_sleep(delay: float):
        sleep_calls.append(delay)

    def _make(handler: Callable[[httpx.Request], httpx.Response], **retry_overrides) -> EmployeeApiClient:
        retry_config = RetryConfig(**{"max_retries": 3, "base_delay": 5.0, "jitter": 0.5, **retry_overrides})
        return EmployeeApiClient(
            BASE_URL,
            retry_config=retry_config,
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            sleep=fake_sleep
        )

    return _make
