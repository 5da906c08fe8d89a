"""
Metrics Collection with Prometheus.

Exposes business and system metrics for monitoring.
"""

import time

from prometheus_client import Counter, Gauge, Histogram, Info

from app.config import settings


class LedgerMetrics:
    """
    Centralized metrics for the Creator Credits API.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Consumption attempts (rate by outcome and pool, credits spent)
    - Generation calls (rate by outcome, duration)
    - Account operations (created, admin actions)
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "ledger_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "ledger_http_requests_total",
            "Total HTTP requests",
            ["endpoint", "method", "status_code"],
        )

        self.http_request_duration_seconds = Histogram(
            "ledger_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["endpoint", "method"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
        )

        self.http_requests_in_progress = Gauge(
            "ledger_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            ["endpoint", "method"],
        )

        # ====================================================================
        # Consumption Metrics
        # ====================================================================
        self.consume_attempts_total = Counter(
            "ledger_consume_attempts_total",
            "Total credit consumption attempts",
            ["status", "pool"],
        )

        self.credits_consumed_total = Counter(
            "ledger_credits_consumed_total",
            "Credits deducted from account pools",
            ["pool"],
        )

        # ====================================================================
        # Generation Metrics
        # ====================================================================
        self.generations_total = Counter(
            "ledger_generations_total",
            "Generation collaborator calls",
            ["feature", "success", "error_type"],
        )

        self.generation_duration_seconds = Histogram(
            "ledger_generation_duration_seconds",
            "Generation collaborator call duration in seconds",
            ["feature"],
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
        )

        # ====================================================================
        # Account Metrics
        # ====================================================================
        self.accounts_created_total = Counter(
            "ledger_accounts_created_total",
            "Total accounts created",
            ["role"],
        )

        self.admin_actions_total = Counter(
            "ledger_admin_actions_total",
            "Administrative actions applied",
            ["operation"],
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "ledger_errors_total",
            "Total errors by type",
            ["error_type", "operation"],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_consume(self, status: str, pool: str, cost: int) -> None:
        """Record one consumption attempt."""
        self.consume_attempts_total.labels(status=status, pool=pool).inc()
        if status == "SUCCESS" and pool in ("DAILY", "MONTHLY"):
            self.credits_consumed_total.labels(pool=pool).inc(cost)

    def record_generation(
        self, feature: str, success: bool, duration: float, error_type: str | None = None
    ) -> None:
        """Record generation collaborator metrics."""
        self.generations_total.labels(
            feature=feature, success=str(success), error_type=error_type or "none"
        ).inc()
        self.generation_duration_seconds.labels(feature=feature).observe(duration)

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = LedgerMetrics()


class track_duration:
    """
    Context manager measuring elapsed wall time.

    Usage:
        with track_duration() as timer:
            await call()
        metrics.record_generation("SCRIPT_GENERATION", True, timer.duration)
    """

    def __init__(self) -> None:
        self.start_time: float = 0.0
        self.duration: float = 0.0

    def __enter__(self) -> "track_duration":
        self.start_time = time.perf_counter()
        return self

    def elapsed(self) -> float:
        """Seconds since entering, usable before exit."""
        return time.perf_counter() - self.start_time

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        self.duration = time.perf_counter() - self.start_time
