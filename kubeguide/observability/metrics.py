"""Prometheus collectors for discovery and object access."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

discovery_passes_total = Counter(
    "kubeguide_discovery_passes_total",
    "Resource discovery passes by outcome",
    ["outcome"],
)

discovery_duration_seconds = Histogram(
    "kubeguide_discovery_duration_seconds",
    "Wall time of one full discovery pass",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

registry_kinds = Gauge(
    "kubeguide_registry_kinds",
    "Resource kinds held by the registry",
    ["origin"],
)

accessor_requests_total = Counter(
    "kubeguide_accessor_requests_total",
    "Accessor get/list calls by strategy and outcome",
    ["operation", "strategy", "outcome"],
)
