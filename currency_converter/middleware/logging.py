"""Logging middleware for HTTP request/response tracking."""

import time
from collections.abc import Callable

import uuid_utils.compat as uuid
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from currency_converter.logging_config import get_logger

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests and responses using structlog context binding."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details.

        Args:
            request: The incoming request
            call_next: The next middleware/route handler

        Returns:
            The response from downstream handlers
        """
        # Reuse the caller request ID or generate one
        request_id = request.headers.get("x-request-id") or str(uuid.uuid7())
        method = request.method
        url = str(request.url)

        # Bind initial request context to logger
        request_logger = logger.bind(
            request_id=request_id,
            method=method,
            endpoint=url,
            client_ip=self._get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )

        # Start timer
        start_time = time.time()

        # Log incoming request
        request_logger.info(f"Incoming request: {method} {url}")

        # Add request ID to request state for use in route handlers
        request.state.request_id = request_id

        try:
            # Process request
            response = await call_next(request)
        except Exception as e:
            # Calculate response time for errors
            response_time_ms = round((time.time() - start_time) * 1000, 2)
            request_logger.error(
                f"Request failed: {method} {url} - {e!s}",
                response_time_ms=response_time_ms,
                exc_info=True,
            )
            # Re-raise the exception
            raise

        # Calculate response time
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        request_logger.info(
            f"Request completed: {method} {url} - {response.status_code}",
            status_code=response.status_code,
            response_time_ms=response_time_ms,
        )
        # Echo request ID for client-side correlation
        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request.

        Args:
            request: The HTTP request

        Returns:
            Client IP address
        """
        # Check for forwarded headers (for load balancers/proxies)
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        # Fall back to direct client
        if request.client:
            return request.client.host

        return "unknown"
