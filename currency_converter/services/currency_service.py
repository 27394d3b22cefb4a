"""Currency conversion service backed by a live rate provider."""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import (
    ConversionRequest,
    ConversionResponse,
    ExchangeRateResponse,
)
from currency_converter.services.rate_source import RateFetcher, RateSourceError
from currency_converter.tracing_config import add_span_event, get_tracer

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# Support checks are always made against this table
REFERENCE_CURRENCY = "USD"

AMOUNT_PRECISION = Decimal("0.01")


def convert_amount(amount: Decimal, rate: Decimal) -> Decimal:
    """Multiply ``amount`` by ``rate`` and round half-up to two decimal places.

    The product is computed exactly and the context precision is widened so
    that quantizing never fails, whatever the magnitude of the amount.
    """
    with localcontext() as ctx:
        # Exact product needs at most the sum of both coefficient lengths
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + len(rate.as_tuple().digits))
        product = amount * rate
        # Integer digits plus two decimals
        ctx.prec = max(ctx.prec, product.adjusted() + 3)
        return product.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_UP)


class ConversionValidationError(Exception):
    """Raised when a conversion request fails basic checks."""


class UnknownCurrencyError(Exception):
    """Raised when the target currency is missing from the fetched rate table."""

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(f"Exchange rate not found for currency: {currency_code}")


class CurrencyService:
    """Converts amounts using rate tables obtained from an injected fetcher."""

    def __init__(self, fetch_rates: RateFetcher):
        """Initialize the currency service.

        Args:
            fetch_rates: Async callable returning the rate table for a base currency
        """
        self._fetch_rates = fetch_rates

    async def fetch_rates(self, base_currency: str) -> ExchangeRateResponse:
        """Fetch a fresh rate table for ``base_currency``.

        Raises:
            RateSourceError: If the rate provider fails
        """
        with tracer.start_as_current_span("fetch_rates") as span:
            span.set_attribute("rates.base_currency", base_currency)
            table = await self._fetch_rates(base_currency)
            span.set_attribute("rates.count", len(table.rates))
            return table

    async def convert_currency(self, request: ConversionRequest) -> ConversionResponse:
        """Convert currency based on request.

        Args:
            request: Conversion request with amount and currencies

        Returns:
            Conversion response with results

        Raises:
            ConversionValidationError: If the amount is not strictly positive
            RateSourceError: If rates cannot be fetched
            UnknownCurrencyError: If the target currency has no rate
        """
        with tracer.start_as_current_span("convert_currency") as span:
            span.set_attribute("conversion.amount", str(request.amount))
            span.set_attribute("conversion.from_currency", request.from_currency)
            span.set_attribute("conversion.to_currency", request.to_currency)

            conversion_logger = logger.bind(
                from_currency=request.from_currency,
                to_currency=request.to_currency,
                amount=str(request.amount),
            )

            if not request.amount > 0:
                span.set_attribute("conversion.status", "invalid_amount")
                conversion_logger.warning("Rejected conversion with non-positive amount")
                msg = f"Amount must be positive, got {request.amount}"
                raise ConversionValidationError(msg)

            conversion_logger.info(
                f"Converting {request.amount} {request.from_currency} to {request.to_currency}"
            )

            try:
                table = await self.fetch_rates(request.from_currency)
            except RateSourceError as e:
                span.set_attribute("conversion.status", "rate_source_error")
                conversion_logger.error(f"Failed to fetch exchange rates: {e!s}")
                raise

            rate = table.rates.get(request.to_currency)
            if rate is None:
                span.set_attribute("conversion.status", "unknown_currency")
                conversion_logger.warning(
                    f"No exchange rate for {request.to_currency} in {table.base} table"
                )
                raise UnknownCurrencyError(request.to_currency)

            converted_amount = convert_amount(request.amount, rate)

            span.set_attribute("conversion.result.exchange_rate", str(rate))
            span.set_attribute("conversion.result.converted_amount", str(converted_amount))
            span.set_attribute("conversion.status", "success")
            add_span_event("conversion_completed", {"rate_date": table.date or ""})

            conversion_logger.info(
                f"Conversion successful: {request.amount} {request.from_currency} = "
                f"{converted_amount} {request.to_currency}",
                converted_amount=str(converted_amount),
                exchange_rate=str(rate),
            )

            return ConversionResponse(
                from_currency=request.from_currency,
                to_currency=request.to_currency,
                amount=request.amount,
                converted_amount=converted_amount,
                exchange_rate=rate,
                rate_date=table.date,
            )

    async def list_rates(self, base_currency: str) -> dict[str, Decimal]:
        """Return the rate mapping for ``base_currency`` as fetched."""
        table = await self.fetch_rates(base_currency)
        return table.rates

    async def is_supported(self, currency_code: str) -> bool:
        """Check whether ``currency_code`` appears in the USD rate table.

        Never raises; a failed fetch counts as unsupported, the reference
        currency included.
        """
        try:
            rates = await self.list_rates(REFERENCE_CURRENCY)
        except Exception as e:
            logger.warning(
                f"Error checking currency support: {e!s}",
                currency_code=currency_code,
                exc_info=True,
            )
            return False

        return currency_code == REFERENCE_CURRENCY or currency_code in rates
