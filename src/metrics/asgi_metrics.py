"""ASGI metrics."""

import os

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from prometheus_client import multiprocess as prom_mp
from starlette.requests import Request
from starlette.responses import Response

from src.metrics.default_buckets import DEFAULT_BUCKETS
from src.settings import Settings

TASK = Settings().api_name  # type: ignore[call-arg]

REQUESTS = Counter(
    f"{TASK}_requests_total",
    "Total count of requests by method and path.",
    ["method", "path_template"],
)

RESPONSES = Counter(
    f"{TASK}_responses_total",
    "Total count of responses by method, path and status codes.",
    ["method", "path_template", "status_code"],
)

REQUESTS_PROCESSING_TIME = Histogram(
    f"{TASK}_requests_processing_time_seconds",
    "Histogram of requests processing time by path (in seconds)",
    ["method", "path_template"],
    buckets=DEFAULT_BUCKETS,
)

EXCEPTIONS = Counter(
    f"{TASK}_exceptions_total",
    "Total count of exceptions raised by path and exception type",
    ["method", "path_template", "exception_type"],
)

REQUESTS_IN_PROGRESS = Gauge(
    f"{TASK}_requests_in_progress",
    "Gauge of requests by method and path currently being processed",
    ["method", "path_template"],
)


def metrics_endpoint(request: Request) -> Response:  # noqa: ARG001
    """Get the metrics.

    Under a multi-process server `PROMETHEUS_MULTIPROC_DIR` is set and the
    per-process files are aggregated into a fresh registry.

    Args:
        request: The request.

    Returns:
        Response: The metrics.
    """
    if "PROMETHEUS_MULTIPROC_DIR" in os.environ:
        registry = CollectorRegistry()
        prom_mp.MultiProcessCollector(registry)
    else:
        registry = REGISTRY

    return Response(generate_latest(registry), headers={"Content-Type": CONTENT_TYPE_LATEST})
