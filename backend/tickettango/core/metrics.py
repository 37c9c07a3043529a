"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

booking_attempts = Counter(
    "booking_attempts_total",
    "Total booking attempts",
    ["status", "backend"],  # success, rejected, error
)

booking_latency = Histogram(
    "booking_latency_seconds",
    "Booking transaction latency",
    ["backend"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

storage_errors = Counter(
    "storage_errors_total",
    "Storage failures surfaced to callers",
    ["backend", "operation"],
)

registrations = Counter(
    "user_registrations_total",
    "User registration attempts",
    ["result"],  # created, duplicate
)


def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_booking_attempt(status: str, backend: str) -> None:
    """Record booking attempt. Status: success, rejected, error"""
    booking_attempts.labels(status=status, backend=backend).inc()


def record_storage_error(backend: str, operation: str) -> None:
    storage_errors.labels(backend=backend, operation=operation).inc()


def record_registration(created: bool) -> None:
    registrations.labels(result="created" if created else "duplicate").inc()
