"""API routes for exchange rates and currency support."""

from fastapi import APIRouter, Depends, HTTPException

from currency_converter.dependencies import get_currency_service
from currency_converter.logging_config import get_logger
from currency_converter.middleware.metrics import record_rates_request, record_support_check
from currency_converter.models.conversion import ErrorResponse, RatesResponse, SupportResponse
from currency_converter.services.currency_service import CurrencyService
from currency_converter.services.rate_source import RateSourceError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["rates"])


@router.get("/rates/{base_currency}", response_model=RatesResponse)
async def get_exchange_rates(
    base_currency: str,
    currency_service: CurrencyService = Depends(get_currency_service),
) -> RatesResponse:
    """Get current exchange rates for a base currency.

    Args:
        base_currency: Currency the rates are expressed against
        currency_service: Converter bound to the live rate provider

    Returns:
        Rates keyed by currency code

    Raises:
        HTTPException: If rates cannot be retrieved
    """
    base_currency = base_currency.strip().upper()
    logger.info(f"Fetching rates for: {base_currency}")

    try:
        table = await currency_service.fetch_rates(base_currency)

    except RateSourceError as e:
        record_rates_request(endpoint="rates", success=False)
        error_response = ErrorResponse.create(
            code="RATE_SOURCE_ERROR",
            message=str(e),
            details={"base_currency": base_currency},
        )
        raise HTTPException(status_code=502, detail=error_response.error) from e

    except Exception as e:
        record_rates_request(endpoint="rates", success=False)
        logger.error("Failed to fetch rates", exc_info=True)
        error_response = ErrorResponse.create(
            code="RATES_ERROR",
            message="An unexpected error occurred while retrieving rates",
            details={"error": str(e)},
        )
        raise HTTPException(status_code=500, detail=error_response.error) from e

    record_rates_request(endpoint="rates", success=True)
    return RatesResponse(base_currency=table.base, date=table.date, rates=table.rates)


@router.get("/supported/{currency_code}", response_model=SupportResponse)
async def check_currency_support(
    currency_code: str,
    currency_service: CurrencyService = Depends(get_currency_service),
) -> SupportResponse:
    """Check whether a currency can be converted."""
    currency_code = currency_code.strip().upper()
    supported = await currency_service.is_supported(currency_code)
    record_support_check(supported=supported)
    return SupportResponse(currency=currency_code, supported=supported)
