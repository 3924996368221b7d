"""
Prometheus metrics for the Employee Access Layer.

Inbound traffic is recorded per route template, upstream traffic per
operation and outcome. The outcome is ``success`` or the lower-cased error
kind, e.g. ``rate_limited``.
"""

from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info


# name -> (help text, label names)
COUNTERS = {
    "http_requests_total": ("Inbound HTTP requests", ["method", "route", "status_code"]),
    "health_check_total": ("Health check requests", ["status"]),
    "errors_total": ("Errors returned to callers, by error code", ["error_code", "service"]),
    "upstream_requests_total": ("Calls made to the upstream employee service", ["operation", "outcome"]),
    "upstream_retries_total": ("Retries scheduled after rate limiting", ["operation"]),
    "cache_events_total": ("Collection cache events (hit, miss, load, load_failure, evict)", ["event"]),
}

HISTOGRAMS = {
    "http_request_duration_seconds": ("Inbound HTTP request duration", ["method", "route"]),
    # Upstream calls can sit on a 120s timeout
    "upstream_request_duration_seconds": (
        "Upstream call duration",
        ["operation"],
        (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
    ),
}


class MetricsCollector:
    """Per-service metrics registry.

    Each collector owns its registry so several services (or test apps) can
    live in one process without duplicate-timeseries errors.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        info = Info("service", "Service information", registry=self.registry)
        info.info({"service": self.service_name, "version": "1.0.0"})
        self._metrics["service_info"] = info

        for name, (documentation, labels) in COUNTERS.items():
            self._metrics[name] = Counter(name, documentation, labels, registry=self.registry)

        for name, spec in HISTOGRAMS.items():
            documentation, labels = spec[0], spec[1]
            kwargs = {"buckets": spec[2]} if len(spec) > 2 else {}
            self._metrics[name] = Histogram(name, documentation, labels, registry=self.registry, **kwargs)

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read a single sample back from the registry."""
        return self.registry.get_sample_value(name, labels)

    def record_http_request(self, method: str, route: str, status_code: int, duration: float):
        self._metrics["http_requests_total"].labels(
            method=method, route=route, status_code=str(status_code)
        ).inc()
        self._metrics["http_request_duration_seconds"].labels(method=method, route=route).observe(duration)

    def record_health_check(self, status: str):
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_code: str):
        self._metrics["errors_total"].labels(error_code=error_code, service=self.service_name).inc()

    def record_upstream_call(self, operation: str, outcome: str, duration: float):
        """Record one upstream call attempt."""
        self._metrics["upstream_requests_total"].labels(operation=operation, outcome=outcome).inc()
        self._metrics["upstream_request_duration_seconds"].labels(operation=operation).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric; unknown names are ignored."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
