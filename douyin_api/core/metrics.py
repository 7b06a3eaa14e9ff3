"""Prometheus metrics collection for the API.

This module defines and manages Prometheus metrics for monitoring
request rates, resolutions, cache efficiency, upstream calls and errors.
"""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("douyin_api", "Douyin resolver API application information")

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Resolution metrics
resolutions_total = Counter(
    "resolutions_total",
    "Total share-link resolutions by result code",
    ["result"],
)

resolution_duration_seconds = Histogram(
    "resolution_duration_seconds",
    "Share-link resolution duration in seconds",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# Cache metrics
cache_lookups_total = Counter(
    "cache_lookups_total",
    "Cache lookups by result",
    ["result"],
)

cache_swept_files_total = Counter(
    "cache_swept_files_total",
    "Expired cache records deleted by the sweeper",
)

# Upstream metrics
upstream_requests_total = Counter(
    "upstream_requests_total",
    "Upstream HTTP calls by upstream and status",
    ["upstream", "status"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by error code and endpoint",
    ["error_code", "endpoint"],
)


class MetricsCollector:
    """Static helpers for recording metrics in a consistent manner."""

    @staticmethod
    def record_request(
        method: str,
        endpoint: str,
        status: int,
        duration: float,
    ) -> None:
        """Record HTTP request metrics."""
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    @staticmethod
    def record_resolution(result_code: int, duration: float) -> None:
        """Record a finished resolution.

        Args:
            result_code: Result code carried by the response envelope.
            duration: Resolution duration in seconds.
        """
        resolutions_total.labels(result=str(result_code)).inc()
        resolution_duration_seconds.observe(duration)

    @staticmethod
    def record_cache_lookup(hit: bool) -> None:
        cache_lookups_total.labels(result="hit" if hit else "miss").inc()

    @staticmethod
    def record_cache_sweep(files_deleted: int) -> None:
        if files_deleted > 0:
            cache_swept_files_total.inc(files_deleted)

    @staticmethod
    def record_upstream(upstream: str, status: str) -> None:
        """Record one upstream call.

        Args:
            upstream: Upstream label (e.g. 'tikhub', 'douyin_page', 'size_probe').
            status: HTTP status code, or 'timeout' / 'error'.
        """
        upstream_requests_total.labels(upstream=upstream, status=status).inc()

    @staticmethod
    def record_error(error_code: str, endpoint: str) -> None:
        errors_total.labels(error_code=error_code, endpoint=endpoint).inc()


def initialize_metrics(version: str) -> None:
    """Initialize application metrics with version information."""
    app_info.info({"version": version})
