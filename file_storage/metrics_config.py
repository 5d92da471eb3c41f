"""File Storage Metrics Configuration.

Local metrics collection using OpenTelemetry with a Prometheus reader.
Records one counter and one latency histogram per storage operation.
"""

from __future__ import annotations

import os
import socket
import time
from typing import Any

from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST
from prometheus_client import generate_latest

# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================

SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "file-storage")
SERVICE_VERSION = os.getenv("OTEL_SERVICE_VERSION", "1.0.0")
DEPLOYMENT_ENVIRONMENT = os.getenv("DEPLOYMENT_ENVIRONMENT", "local")


def is_test_environment() -> bool:
    """Detect if running in test environment."""
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "CI" in os.environ
        or "GITHUB_ACTIONS" in os.environ
    )


# Disable metrics in test/CI environments by default
default_metrics_enabled = "false" if is_test_environment() else "true"
METRICS_ENABLED = os.getenv("STORAGE_METRICS_ENABLED", default_metrics_enabled).lower() == "true"

# Metrics instances
meter = None
operations_counter = None
duration_histogram = None
prometheus_reader = None
meter_provider = None

_metrics_initialized = False


def get_resource() -> Resource:
    """Create OpenTelemetry resource with service information."""
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "deployment.environment": DEPLOYMENT_ENVIRONMENT,
            "host.name": socket.gethostname(),
        }
    )


def initialize_metrics(enabled: bool | None = None) -> None:
    """Initialize metrics collection with a Prometheus reader.

    Args:
        enabled: Overrides STORAGE_METRICS_ENABLED when given; by default
            metrics stay off in test and CI environments
    """
    global meter, operations_counter, duration_histogram, prometheus_reader, meter_provider, _metrics_initialized

    if _metrics_initialized:
        return
    _metrics_initialized = True

    if enabled is None:
        enabled = METRICS_ENABLED and not is_test_environment()
    if not enabled:
        return

    prometheus_reader = PrometheusMetricReader()
    meter_provider = MeterProvider(resource=get_resource(), metric_readers=[prometheus_reader])
    meter = meter_provider.get_meter("file_storage")

    operations_counter = meter.create_counter(
        name="storage_operations",
        description="Total number of storage operations",
    )
    duration_histogram = meter.create_histogram(
        name="storage_operation_duration",
        description="Storage operation latency",
        unit="s",
    )


def is_metrics_enabled() -> bool:
    """Check if metrics collection is enabled."""
    return meter is not None


def record_operation_start() -> float | None:
    """Record start of a storage operation, return start time."""
    if not is_metrics_enabled():
        return None
    return time.perf_counter()


def _record(operation: str, driver: str, status: str, start_time: float | None) -> None:
    attributes = {"operation": operation, "driver": driver, "status": status}
    operations_counter.add(1, attributes)
    if start_time is not None:
        duration_histogram.record(time.perf_counter() - start_time, attributes)


def record_operation_success(operation: str, driver: str, start_time: float | None) -> None:
    """Record a successful storage operation."""
    if is_metrics_enabled():
        _record(operation, driver, "success", start_time)


def record_operation_error(operation: str, driver: str, start_time: float | None, error: Exception) -> None:
    """Record a failed storage operation, labelled with the error code."""
    if is_metrics_enabled():
        status = getattr(error, "error_code", None) or type(error).__name__
        _record(operation, driver, status, start_time)


def get_metrics_export() -> tuple[str, str]:
    """Export metrics in Prometheus format."""
    if not is_metrics_enabled():
        return "# Metrics not available\n", "text/plain"
    return generate_latest().decode("utf-8"), CONTENT_TYPE_LATEST


def get_metrics_summary() -> dict[str, Any]:
    """Get metrics summary for debugging."""
    if not is_metrics_enabled():
        return {"status": "disabled"}

    return {
        "status": "active",
        "service_name": SERVICE_NAME,
        "service_version": SERVICE_VERSION,
        "environment": DEPLOYMENT_ENVIRONMENT,
        "prometheus_enabled": prometheus_reader is not None,
    }


def shutdown_metrics() -> None:
    """Shutdown metrics collection.

    The provider shuts down its readers; the instruments are dropped so later
    operations are not recorded.
    """
    global meter, operations_counter, duration_histogram, prometheus_reader, meter_provider

    if meter_provider is not None:
        meter_provider.shutdown()
    meter = None
    operations_counter = None
    duration_histogram = None
    prometheus_reader = None
    meter_provider = None
