"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from currency_converter.dependencies import get_currency_service
from currency_converter.services.currency_service import REFERENCE_CURRENCY, CurrencyService

router = APIRouter(tags=["health"])

SERVICE_NAME = "currency-converter-api"


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint.

    Returns:
        Health status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": SERVICE_NAME,
    }


@router.get("/health/detailed")
async def detailed_health_check(
    currency_service: CurrencyService = Depends(get_currency_service),
) -> dict[str, str | dict[str, str]]:
    """Detailed health check including rate provider reachability.

    Args:
        currency_service: Converter bound to the live rate provider

    Returns:
        Detailed health status
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": SERVICE_NAME,
        "checks": {},
    }

    try:
        await currency_service.fetch_rates(REFERENCE_CURRENCY)
        health_status["checks"]["rate_provider"] = "healthy"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["rate_provider"] = f"unhealthy: {e!s}"

    return health_status
