"""Main FastAPI application for the currency converter API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from currency_converter.config import settings
from currency_converter.logging_config import get_logger
from currency_converter.middleware.logging import LoggingMiddleware
from currency_converter.middleware.metrics import PrometheusMiddleware, get_metrics
from currency_converter.routers import conversion, health, rates
from currency_converter.services.rate_source import HttpRateSource
from currency_converter.tracing_config import configure_tracing, instrument_application

logger = get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Currency Converter API application")

    try:
        configure_tracing(service_name="currency-converter")
        instrument_application()
        logger.info("OpenTelemetry tracing configured successfully")
    except Exception:
        logger.error("Failed to configure tracing", exc_info=True)
        # Don't fail startup for tracing issues

    app.state.rate_source = HttpRateSource(
        base_url=settings.rate_api_base_url,
        timeout_ms=settings.rate_api_timeout_ms,
    )
    logger.info(
        "Rate provider configured",
        rate_api_base_url=settings.rate_api_base_url,
        rate_api_timeout_ms=settings.rate_api_timeout_ms,
    )

    yield

    await app.state.rate_source.close()
    logger.info("Shutting down Currency Converter API application")


app = FastAPI(
    title="Currency Converter API",
    description="Converts amounts between currencies using live exchange rates",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(PrometheusMiddleware)

app.include_router(health.router)
app.include_router(conversion.router)
app.include_router(rates.router)


@app.get("/api")
async def api_info() -> dict[str, str | dict[str, str]]:
    """API information endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "message": "Currency Converter API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "convert": "/api/v1/convert",
            "rates": "/api/v1/rates/{base_currency}",
            "supported": "/api/v1/supported/{currency_code}",
            "metrics": "/metrics",
        },
    }


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns:
        Prometheus metrics in text format
    """
    return Response(content=get_metrics(), media_type="text/plain")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("currency_converter.main:app", host=settings.api_host, port=settings.api_port)
