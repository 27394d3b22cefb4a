"""Prometheus metrics middleware for FastAPI."""

import re
import time
from collections.abc import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total", "Total number of HTTP requests", ["method", "endpoint", "status_code"]
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["method", "endpoint"]
)

IN_PROGRESS_REQUESTS = Gauge(
    "http_requests_in_progress", "Number of HTTP requests currently being processed"
)

# Application-specific metrics
CURRENCY_CONVERSIONS_TOTAL = Counter(
    "currency_conversions_total",
    "Total number of currency conversions performed",
    ["status"],
)

RATES_REQUESTS_TOTAL = Counter(
    "rates_requests_total", "Total number of exchange rates requests", ["endpoint", "status"]
)

SUPPORT_CHECKS_TOTAL = Counter(
    "support_checks_total", "Total number of currency support checks", ["supported"]
)

RATE_SOURCE_FETCHES_TOTAL = Counter(
    "rate_source_fetches_total", "Total number of calls to the rate provider", ["status"]
)

RATE_SOURCE_FETCH_DURATION = Histogram(
    "rate_source_fetch_duration_seconds", "Rate provider call duration in seconds"
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        # Extract route pattern for consistent labeling
        endpoint = self._get_endpoint_pattern(request)
        method = request.method

        # Track in-progress requests
        IN_PROGRESS_REQUESTS.inc()

        # Start timing
        start_time = time.time()

        try:
            # Process request
            response = await call_next(request)

            # Record successful request
            REQUEST_COUNT.labels(
                method=method, endpoint=endpoint, status_code=str(response.status_code)
            ).inc()
            return response

        except Exception:
            # Record failed request
            REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code="500").inc()
            raise

        finally:
            # Record request duration
            REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(
                time.time() - start_time
            )

            # Decrement in-progress requests
            IN_PROGRESS_REQUESTS.dec()

    def _get_endpoint_pattern(self, request: Request) -> str:
        """Extract endpoint pattern from request for consistent labeling."""
        # Try to get the route pattern from FastAPI
        if "route" in request.scope:
            route = request.scope["route"]
            if hasattr(route, "path"):
                return route.path

        # Fallback to actual path with currency codes collapsed
        path = request.url.path
        return re.sub(r"/(rates|supported)/[^/]+", r"/\1/{code}", path)


def get_metrics() -> str:
    """Get current metrics in Prometheus format."""
    return generate_latest().decode("utf-8")


def record_currency_conversion(status: str = "success"):
    """Record currency conversion metrics by outcome."""
    CURRENCY_CONVERSIONS_TOTAL.labels(status=status).inc()


def record_rates_request(endpoint: str, *, success: bool = True):
    """Record exchange rates request metrics."""
    status = "success" if success else "error"
    RATES_REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()


def record_support_check(*, supported: bool):
    """Record the outcome of a currency support check."""
    SUPPORT_CHECKS_TOTAL.labels(supported=str(supported).lower()).inc()


def record_rate_source_fetch(duration_seconds: float, *, success: bool = True):
    """Record a call to the external rate provider."""
    status = "success" if success else "error"
    RATE_SOURCE_FETCHES_TOTAL.labels(status=status).inc()
    RATE_SOURCE_FETCH_DURATION.observe(duration_seconds)
