"""
Shared utilities for the Employee Access Layer.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Closed error taxonomy and error responses
- retry: Jittered exponential backoff policy
- base_service: FastAPI service skeleton (health, metrics, error mapping)

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
