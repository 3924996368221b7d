"""
Shared logging configuration for the Employee Access Layer.

Every event is rendered as one JSON line carrying the service name, the
inbound request id and, while an upstream call is in progress, the upstream
operation being performed.
"""

import sys
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

import structlog

# Correlation for the inbound request being served
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
# Upstream operation in progress (fetch_all, fetch_by_id, create, delete)
upstream_operation_var: ContextVar[Optional[str]] = ContextVar('upstream_operation', default=None)


class ServiceContext:
    """Processor stamping the owning service onto each event."""

    def __init__(self, service_name: str):
        self.service_name = service_name

    def __call__(self, logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", self.service_name)
        return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach request id and upstream operation when set."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    operation = upstream_operation_var.get()
    if operation and "operation" not in event_dict:
        event_dict["operation"] = operation

    return event_dict


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured logging for a service."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            ServiceContext(service_name),
            add_correlation_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    # httpx logs every request at INFO; the client logs its own outcomes
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the inbound request id, generating one when absent."""
    request_id = request_id or str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


@contextmanager
def upstream_operation(operation: str) -> Iterator[None]:
    """Tag log events emitted inside the block with an upstream operation."""
    token = upstream_operation_var.set(operation)
    try:
        yield
    finally:
        upstream_operation_var.reset(token)


def clear_context():
    """Clear request-scoped context."""
    request_id_var.set(None)
    upstream_operation_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
