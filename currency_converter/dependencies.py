"""FastAPI dependency providers."""

from fastapi import Depends, Request

from currency_converter.services.currency_service import CurrencyService
from currency_converter.services.rate_source import RateFetcher


def get_rate_fetcher(request: Request) -> RateFetcher:
    """Dependency returning the rate source created during application startup."""
    return request.app.state.rate_source


def get_currency_service(fetch_rates: RateFetcher = Depends(get_rate_fetcher)) -> CurrencyService:
    """Dependency to get a currency service bound to the current rate fetcher."""
    return CurrencyService(fetch_rates)
