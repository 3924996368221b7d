"""
Upstream employee service client.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, TYPE_CHECKING
from urllib.parse import quote

import httpx

from shared.errors import EmployeeAccessException, TransportFaultError
from shared.logging import get_logger, upstream_operation
from shared.retry import RetryConfig, RetryPolicy

from ..models import EmployeeDeletion, EmployeeRecord, EmployeeRegister
from .envelope import BOOLEAN, RECORD_LIST, SINGLE_RECORD, decode_envelope
from .error_classifier import classify

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TIMEOUT_SECONDS = 120.0


class EmployeeApiClient:
    """Client for the rate-limited upstream employee service.

    ``get``/``post``/``delete`` are the raw transport calls; the
    ``fetch_*``/``create``/``delete_by_name`` operations decode the envelope
    and run under the retry policy.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_config: Optional[RetryConfig] = None,
        *,
        metrics: Optional["MetricsCollector"] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("employees.api_client")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

        self.retry_policy = RetryPolicy(
            retry_config,
            name="employee_api",
            metrics=metrics,
            sleep=sleep
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    # Transport

    async def get(self, path: str) -> httpx.Response:
        return await self._send("GET", path)

    async def post(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        return await self._send("POST", path, body)

    async def delete(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        return await self._send("DELETE", path, body)

    async def _send(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self._client.request(method, url, json=body, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            raise TransportFaultError(
                f"Timed out calling employee service: {method} {path}",
                details={"method": method, "path": path, "error": str(exc)}
            ) from exc
        except httpx.RequestError as exc:
            raise TransportFaultError(
                f"Could not reach employee service: {exc.__class__.__name__}",
                details={"method": method, "path": path, "error": str(exc)}
            ) from exc

    # Operations

    async def fetch_all(self) -> List[EmployeeRecord]:
        """Fetch the full employee collection."""
        with upstream_operation("fetch_all"):
            return await self.retry_policy.call(self._fetch_all, operation="fetch_all")

    async def fetch_by_id(self, employee_id: str) -> EmployeeRecord:
        """Fetch one employee; NotFoundError when the upstream answers 404."""
        with upstream_operation("fetch_by_id"):
            return await self.retry_policy.call(self._fetch_by_id, employee_id, operation="fetch_by_id")

    async def create(self, employee: EmployeeRegister) -> EmployeeRecord:
        """Create an employee upstream."""
        with upstream_operation("create"):
            return await self.retry_policy.call(self._create, employee, operation="create")

    async def delete_by_name(self, name: str) -> bool:
        """Delete an employee upstream; the upstream keys deletion by name."""
        with upstream_operation("delete"):
            return await self.retry_policy.call(self._delete_by_name, name, operation="delete")

    async def _fetch_all(self) -> List[EmployeeRecord]:
        response = await self._call("fetch_all", self.get("/employee"))
        return decode_envelope(response.content, RECORD_LIST)

    async def _fetch_by_id(self, employee_id: str) -> EmployeeRecord:
        path = f"/employee/{quote(employee_id, safe='')}"
        response = await self._call("fetch_by_id", self.get(path), lookup_id=employee_id)
        return decode_envelope(response.content, SINGLE_RECORD)

    async def _create(self, employee: EmployeeRegister) -> EmployeeRecord:
        response = await self._call("create", self.post("/employee", employee.model_dump()))
        return decode_envelope(response.content, SINGLE_RECORD)

    async def _delete_by_name(self, name: str) -> bool:
        body = EmployeeDeletion(name=name).model_dump()
        response = await self._call("delete", self.delete("/employee", body))
        return decode_envelope(response.content, BOOLEAN)

    async def _call(
        self,
        operation: str,
        request: Awaitable[httpx.Response],
        lookup_id: Optional[str] = None,
    ) -> httpx.Response:
        """Await one transport call, classifying any non-success status."""
        start_time = time.perf_counter()
        try:
            response = await request
            if not response.is_success:
                self.logger.info(
                    "Received non-success status from employee service",
                    operation=operation,
                    status_code=response.status_code
                )
                raise classify(response.status_code, lookup_id=lookup_id)
        except EmployeeAccessException as exc:
            self._record(operation, exc.kind.value.lower(), start_time)
            raise

        self._record(operation, "success", start_time)
        self.logger.debug("Employee service call succeeded", operation=operation)
        return response

    def _record(self, operation: str, outcome: str, start_time: float):
        if self.metrics is not None:
            self.metrics.record_upstream_call(operation, outcome, time.perf_counter() - start_time)
