"""
Prometheus metrics module for the booking engine.

Service timings come from the @measure_operation decorator on BaseService;
the booking-specific counters are incremented by the transition engine,
the notification dispatcher and the email worker pool.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Custom registry to avoid conflicts with default process metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "booking_engine_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "booking_engine_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "booking_engine_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_transitions_total = Counter(
    "booking_engine_transitions_total",
    "Booking transition requests by action and outcome",
    ["action", "outcome"],  # outcome: applied | forbidden | rule_violation | conflict | not_found | error
    registry=REGISTRY,
)

bookings_created_total = Counter(
    "booking_engine_bookings_created_total",
    "Bookings created",
    registry=REGISTRY,
)

notifications_total = Counter(
    "booking_engine_notifications_total",
    "Notification deliveries by channel and outcome",
    ["channel", "outcome"],  # outcome: sent | skipped | failed | rejected
    registry=REGISTRY,
)

email_jobs_in_flight = Gauge(
    "booking_engine_email_jobs_in_flight",
    "Email jobs queued or running in the background pool",
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
            service: Service name (e.g., 'BookingTransitionService')
            operation: Operation/method name (e.g., 'apply_action')
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
    def record_transition(action: str, outcome: str) -> None:
        booking_transitions_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def record_booking_created() -> None:
        bookings_created_total.inc()

    @staticmethod
    def record_notification(channel: str, outcome: str) -> None:
        notifications_total.labels(channel=channel, outcome=outcome).inc()

    @staticmethod
    def email_job_started() -> None:
        email_jobs_in_flight.inc()

    @staticmethod
    def email_job_finished() -> None:
        email_jobs_in_flight.dec()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
