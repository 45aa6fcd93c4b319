"""
Prometheus metrics for the court reservation backend.

Service timings come from the @measure_operation decorator; the domain
counters track lost races, swept holds, and confirmation emails.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry so tests and reloads do not collide with the default one
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "courtbook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "courtbook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "courtbook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "courtbook_booking_conflicts_total",
    "Conflicts reported to callers, by reason",
    ["reason"],  # SLOT_UNAVAILABLE, HOLD_EXPIRED, ALREADY_PAID, ...
    registry=REGISTRY,
)

expired_holds_swept_total = Counter(
    "courtbook_expired_holds_swept_total",
    "Expired web holds removed by the lazy sweep",
    registry=REGISTRY,
)

confirmation_emails_total = Counter(
    "courtbook_confirmation_emails_total",
    "Confirmation email outcomes",
    ["status"],  # sent | failed | skipped
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'HoldService')
            operation: Operation name (e.g., 'create_hold')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_booking_conflict(reason: str) -> None:
        booking_conflicts_total.labels(reason=reason).inc()

    @staticmethod
    def inc_expired_holds_swept(count: int) -> None:
        if count > 0:
            expired_holds_swept_total.inc(count)

    @staticmethod
    def inc_confirmation_email(status: str) -> None:
        confirmation_emails_total.labels(status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
