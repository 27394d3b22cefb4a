"""API routes for currency conversion."""

from fastapi import APIRouter, Depends, HTTPException

from currency_converter.dependencies import get_currency_service
from currency_converter.logging_config import get_logger
from currency_converter.middleware.metrics import record_currency_conversion
from currency_converter.models.conversion import (
    ConversionRequest,
    ConversionResponse,
    ErrorResponse,
)
from currency_converter.services.currency_service import (
    ConversionValidationError,
    CurrencyService,
    UnknownCurrencyError,
)
from currency_converter.services.rate_source import RateSourceError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["conversion"])


@router.post("/convert", response_model=ConversionResponse)
async def convert_currency(
    conversion_request: ConversionRequest,
    currency_service: CurrencyService = Depends(get_currency_service),
) -> ConversionResponse:
    """Convert currency from one type to another.

    Args:
        conversion_request: Conversion request with amount and currencies
        currency_service: Converter bound to the live rate provider

    Returns:
        Conversion response with results

    Raises:
        HTTPException: If the request is invalid or conversion fails
    """
    try:
        response = await currency_service.convert_currency(conversion_request)

    except ConversionValidationError as e:
        record_currency_conversion(status="invalid_amount")
        error_response = ErrorResponse.create(code="INVALID_AMOUNT", message=str(e))
        raise HTTPException(status_code=400, detail=error_response.error) from e

    except UnknownCurrencyError as e:
        record_currency_conversion(status="unknown_currency")
        error_response = ErrorResponse.create(
            code="UNKNOWN_CURRENCY",
            message=str(e),
            details={"currency": e.currency_code},
        )
        raise HTTPException(status_code=400, detail=error_response.error) from e

    except RateSourceError as e:
        record_currency_conversion(status="rate_source_error")
        error_response = ErrorResponse.create(
            code="RATE_SOURCE_ERROR",
            message=f"Failed to convert currency: {e!s}",
        )
        raise HTTPException(status_code=502, detail=error_response.error) from e

    except Exception as e:
        record_currency_conversion(status="error")
        logger.error("Conversion failed unexpectedly", exc_info=True)
        error_response = ErrorResponse.create(
            code="CONVERSION_ERROR",
            message="An unexpected error occurred during conversion",
            details={"error": str(e)},
        )
        raise HTTPException(status_code=500, detail=error_response.error) from e

    record_currency_conversion(status="success")
    return response
