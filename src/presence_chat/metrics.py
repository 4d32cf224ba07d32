"""Prometheus metrics."""

from prometheus_client import CollectorRegistry, Counter

# Registry for isolated metric collection
CUSTOM_REGISTRY = CollectorRegistry()

REQUESTS = Counter(
    "requests_total", "Total requests by endpoint", ["method", "route"], registry=CUSTOM_REGISTRY
)
ERRORS = Counter(
    "errors_total", "Total errors by endpoint", ["method", "route"], registry=CUSTOM_REGISTRY
)
EVICTIONS = Counter(
    "participants_evicted_total", "Participants removed for inactivity", registry=CUSTOM_REGISTRY
)
SWEEP_FAILURES = Counter(
    "sweep_failures_total", "Sweeper errors, per participant or per cycle", registry=CUSTOM_REGISTRY
)
