"""Prometheus metrics for resource apply."""

from prometheus_client import Counter, Histogram

# Apply outcome metrics
apply_total = Counter(
    "resource_apply_total",
    "Total number of apply operations",
    ["kind", "operation", "result"],
)

ca_bundle_preserved_total = Counter(
    "resource_apply_ca_bundle_preserved_total",
    "Total number of webhook CA bundles copied from the existing configuration",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "resource_apply_api_call_total",
    "Total number of Kubernetes API calls",
    ["operation", "plural", "result"],
)

api_call_duration_seconds = Histogram(
    "resource_apply_api_call_duration_seconds",
    "Duration of Kubernetes API calls in seconds",
    ["operation", "plural"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "resource_apply_rate_limit_hits_total",
    "Total number of rate limit responses from the API server",
    ["plural"],
)

event_failures_total = Counter(
    "resource_apply_event_failures_total",
    "Total number of events that could not be posted",
    ["reason"],
)
