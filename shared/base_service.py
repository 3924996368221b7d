"""
Base service class for Employee Access Layer services.

Provides the FastAPI app with a lifespan bound to ``start``/``stop``,
request correlation, health and metrics endpoints, and the mapping from
error kinds to HTTP statuses.
"""

import os
import time
from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from shared.config import get_config
from shared.errors import EmployeeAccessException, ErrorKind
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector


SERVICE_VERSION = "1.0.0"

# Outward status for each error kind
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.CLIENT_ERROR: 400,
    ErrorKind.SERVER_ERROR: 500,
    ErrorKind.TRANSPORT_FAULT: 503,
}


def route_template(request: Request) -> str:
    """Matched route path (``/api/v2/employees/{employee_id}``), else the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class BaseService:
    """Base service class with common functionality."""

    # Request field name -> message reported when it is absent or null
    required_field_messages: Dict[str, str] = {}

    def __init__(self, service_name: str, port: int, **config_overrides):
        self.service_name = service_name
        self.port = port
        self.config = get_config(service_name, port, **config_overrides)

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()
        self._setup_error_handlers()

    def _create_app(self) -> FastAPI:

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self.start()
            try:
                yield
            finally:
                await self.stop()

        local = self.config.env == "local"
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Employee Access Layer - {self.service_name.title()} Service",
            version=SERVICE_VERSION,
            docs_url="/docs" if local else None,
            redoc_url="/redoc" if local else None,
            lifespan=lifespan,
        )

    def _setup_middleware(self):
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def correlate_and_time(request: Request, call_next):
            request_id = set_request_id(request.headers.get("X-Request-ID"))
            started = time.perf_counter()
            try:
                response = await call_next(request)
                duration = time.perf_counter() - started
                route = route_template(request)

                self.metrics.record_http_request(request.method, route, response.status_code, duration)
                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    route=route,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )
                response.headers["X-Request-ID"] = request_id
                return response
            finally:
                clear_context()

    def _setup_routes(self):

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            try:
                dependencies = await self._check_dependencies()
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={"service": self.service_name, "status": "error", "error": str(e)}
                )

            self.metrics.record_health_check("ok")
            return {
                "service": self.service_name,
                "status": "ok",
                "uptime_seconds": round(time.time() - self._start_time, 3),
                "dependencies": dependencies,
                "version": SERVICE_VERSION,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(content=generate_latest(self.metrics.registry), media_type=CONTENT_TYPE_LATEST)

    def _setup_error_handlers(self):

        @self.app.exception_handler(EmployeeAccessException)
        async def access_exception_handler(request: Request, exc: EmployeeAccessException):
            status_code = STATUS_BY_KIND.get(exc.kind, 500)
            self.metrics.record_error(exc.code)
            log = self.logger.warning if status_code < 500 else self.logger.error
            log(
                "Employee access error",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                status_code=status_code
            )
            return JSONResponse(
                status_code=status_code,
                content=exc.to_response(status_code).model_dump(mode="json")
            )

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            """Report request validation failures as a flat list of messages."""
            errors = [self._validation_message(error) for error in exc.errors()]
            self.metrics.record_error("VALIDATION_ERROR")
            return JSONResponse(status_code=400, content={"errors": errors})

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}}
            )

    def _validation_message(self, error: Dict[str, Any]) -> str:
        field = error.get("loc", ())[-1] if error.get("loc") else None
        absent = error.get("type") == "missing" or error.get("input", "") is None
        if absent and field in self.required_field_messages:
            return self.required_field_messages[field]

        cause = (error.get("ctx") or {}).get("error")
        return str(cause) if cause is not None else error.get("msg", "Invalid request")

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check service dependencies. Override in subclasses."""
        return {}

    async def start(self):
        """Start background components. Override in subclasses."""

    async def stop(self):
        """Stop background components. Override in subclasses."""

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
