"""Pydantic models for currency conversion."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

import uuid_utils.compat as uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConversionRequest(BaseModel):
    """Request model for currency conversion.

    Amount positivity is checked by the converter, not here, so a request
    carrying a zero or negative amount can still be built and rejected there.
    """

    amount: Decimal = Field(..., description="Amount to convert")
    from_currency: str = Field(..., min_length=1, description="Source currency code")
    to_currency: str = Field(..., min_length=1, description="Target currency code")

    @field_validator("from_currency", "to_currency")
    @classmethod
    def normalize_currency_code(cls, v: str) -> str:
        """Strip and upper-case currency codes."""
        code = v.strip().upper()
        if not code:
            msg = "Currency code cannot be blank"
            raise ValueError(msg)
        return code


class ConversionResponse(BaseModel):
    """Result of a single currency conversion."""

    model_config = ConfigDict(frozen=True)

    conversion_id: UUID = Field(default_factory=uuid.uuid7, description="Unique conversion ID")
    from_currency: str = Field(..., description="Source currency code")
    to_currency: str = Field(..., description="Target currency code")
    amount: Decimal = Field(..., description="Original amount")
    converted_amount: Decimal = Field(..., description="Converted amount, 2 decimals half-up")
    exchange_rate: Decimal = Field(..., description="Exchange rate used")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When conversion was performed",
    )
    rate_date: str | None = Field(None, description="Rate date reported by the provider")
    message: str = Field(default="Conversion successful", description="Outcome message")


class ExchangeRateResponse(BaseModel):
    """Rate table returned by the external rate provider."""

    base: str = Field(..., description="Base currency the rates are expressed against")
    date: str | None = Field(None, description="Provider date for the rates")
    rates: dict[str, Decimal] = Field(..., description="Currency code to rate mapping")

    @field_validator("rates")
    @classmethod
    def validate_rates_positive(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        """Reject tables containing non-positive rates."""
        for code, rate in v.items():
            if not rate.is_finite() or rate <= 0:
                msg = f"Rate for {code} must be a positive number, got {rate}"
                raise ValueError(msg)
        return v


class RatesResponse(BaseModel):
    """Response model for the rate listing endpoint."""

    base_currency: str = Field(..., description="Base currency for all rates")
    date: str | None = Field(None, description="Provider date for the rates")
    rates: dict[str, Decimal] = Field(..., description="Currency code to rate mapping")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When rates were retrieved",
    )


class SupportResponse(BaseModel):
    """Response model for the currency support check."""

    currency: str = Field(..., description="Currency code that was checked")
    supported: bool = Field(..., description="Whether the currency can be converted")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: dict[str, str | dict[str, str]] = Field(..., description="Error details")

    @classmethod
    def create(
        cls,
        code: str,
        message: str,
        details: dict[str, str] | None = None,
    ) -> "ErrorResponse":
        """Create an error response."""
        error_data: dict[str, str | dict[str, str]] = {
            "code": code,
            "message": message,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if details:
            error_data["details"] = details

        return cls(error=error_data)
