"""Unit tests for currency service."""

from decimal import Decimal

import pytest

from currency_converter.models.conversion import ConversionRequest, ExchangeRateResponse
from currency_converter.services.currency_service import (
    ConversionValidationError,
    CurrencyService,
    UnknownCurrencyError,
)
from currency_converter.services.rate_source import RateSourceError


class FakeRateSource:
    """Rate fetcher returning fixed tables and recording every call."""

    def __init__(self, rates: dict[str, str] | None = None, error: Exception | None = None):
        self.rates = {code: Decimal(rate) for code, rate in (rates or {}).items()}
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, base_currency: str) -> ExchangeRateResponse:
        self.calls.append(base_currency)
        if self.error is not None:
            raise self.error
        return ExchangeRateResponse(base=base_currency, date="2024-01-15", rates=self.rates)


class TestConvertCurrency:
    """Test cases for CurrencyService.convert_currency."""

    def setup_method(self):
        """Set up test fixtures."""
        self.rate_source = FakeRateSource({"EUR": "0.85", "GBP": "0.79", "JPY": "149.5"})
        self.currency_service = CurrencyService(self.rate_source)

    async def test_convert_usd_to_eur(self):
        """Test the basic USD to EUR scenario."""
        request = ConversionRequest(
            amount=Decimal("100.00"), from_currency="USD", to_currency="EUR"
        )

        response = await self.currency_service.convert_currency(request)

        assert response.from_currency == "USD"
        assert response.to_currency == "EUR"
        assert response.amount == Decimal("100.00")
        assert response.converted_amount == Decimal("85.00")
        assert response.exchange_rate == Decimal("0.85")
        assert response.rate_date == "2024-01-15"
        assert response.message == "Conversion successful"
        assert response.timestamp.tzinfo is not None
        assert self.rate_source.calls == ["USD"]

    async def test_fetches_rates_for_source_currency(self):
        """Test the rate table is fetched with the source currency as base."""
        request = ConversionRequest(amount=Decimal("10"), from_currency="gbp", to_currency="eur")

        await self.currency_service.convert_currency(request)

        assert self.rate_source.calls == ["GBP"]

    @pytest.mark.parametrize(
        "amount,rate,expected",
        [
            ("100.00", "0.855", "85.50"),
            ("0.125", "1", "0.13"),
            ("0.135", "1", "0.14"),
            ("33.33", "0.8523", "28.41"),
            ("1", "149.505", "149.51"),
            ("2.5", "0.333", "0.83"),
        ],
    )
    async def test_rounds_half_up_to_two_places(self, amount, rate, expected):
        """Test converted amounts are rounded half-up at the second decimal."""
        service = CurrencyService(FakeRateSource({"EUR": rate}))
        request = ConversionRequest(amount=Decimal(amount), from_currency="USD", to_currency="EUR")

        response = await service.convert_currency(request)

        assert response.converted_amount == Decimal(expected)
        assert response.exchange_rate == Decimal(rate)

    @pytest.mark.parametrize(
        "amount,rate,expected",
        [
            ("1" + "0" * 27, "1.5", "15" + "0" * 26 + ".00"),
            ("1E+40", "0.85", "85" + "0" * 38 + ".00"),
            ("1234567890123456789012345678.905", "1", "1234567890123456789012345678.91"),
            ("12345678901234567890123456789.125", "2", "24691357802469135780246913578.25"),
        ],
    )
    async def test_large_amounts_round_exactly(self, amount, rate, expected):
        """Test amounts beyond the default decimal precision still convert exactly."""
        service = CurrencyService(FakeRateSource({"EUR": rate}))
        request = ConversionRequest(amount=Decimal(amount), from_currency="USD", to_currency="EUR")

        response = await service.convert_currency(request)

        assert response.converted_amount == Decimal(expected)
        assert response.converted_amount.as_tuple().exponent == -2

    @pytest.mark.parametrize("amount", ["0", "0.00", "-1", "-50.25"])
    async def test_non_positive_amount_rejected_without_fetch(self, amount):
        """Test non-positive amounts fail before any outbound call."""
        request = ConversionRequest(amount=Decimal(amount), from_currency="USD", to_currency="EUR")

        with pytest.raises(ConversionValidationError) as exc_info:
            await self.currency_service.convert_currency(request)

        assert "positive" in str(exc_info.value)
        assert self.rate_source.calls == []

    async def test_unknown_target_currency(self):
        """Test a target missing from the rate table raises UnknownCurrencyError."""
        service = CurrencyService(FakeRateSource({"EUR": "0.85"}))
        request = ConversionRequest(
            amount=Decimal("100.00"), from_currency="USD", to_currency="XYZ"
        )

        with pytest.raises(UnknownCurrencyError) as exc_info:
            await service.convert_currency(request)

        assert exc_info.value.currency_code == "XYZ"
        assert "XYZ" in str(exc_info.value)

    async def test_rate_source_failure_propagates(self):
        """Test a failed fetch surfaces as RateSourceError."""
        service = CurrencyService(FakeRateSource(error=RateSourceError("provider timed out")))
        request = ConversionRequest(
            amount=Decimal("100.00"), from_currency="USD", to_currency="EUR"
        )

        with pytest.raises(RateSourceError, match="provider timed out"):
            await service.convert_currency(request)

    async def test_result_is_immutable(self):
        """Test the conversion result cannot be modified after construction."""
        request = ConversionRequest(
            amount=Decimal("100.00"), from_currency="USD", to_currency="EUR"
        )

        response = await self.currency_service.convert_currency(request)

        with pytest.raises(ValueError):
            response.converted_amount = Decimal("1.00")


class TestListRates:
    """Test cases for CurrencyService.list_rates."""

    async def test_returns_mapping_unmodified(self):
        """Test the fetched mapping is returned as-is."""
        rate_source = FakeRateSource({"EUR": "0.85", "JPY": "149.5"})
        service = CurrencyService(rate_source)

        rates = await service.list_rates("USD")

        assert rates == {"EUR": Decimal("0.85"), "JPY": Decimal("149.5")}
        assert rate_source.calls == ["USD"]

    async def test_propagates_rate_source_error(self):
        """Test list_rates does not suppress fetch failures."""
        service = CurrencyService(FakeRateSource(error=RateSourceError("unreachable")))

        with pytest.raises(RateSourceError):
            await service.list_rates("EUR")


class TestIsSupported:
    """Test cases for CurrencyService.is_supported."""

    async def test_supported_currency(self):
        """Test a currency in the USD table is supported."""
        rate_source = FakeRateSource({"EUR": "0.85"})
        service = CurrencyService(rate_source)

        assert await service.is_supported("EUR") is True
        assert rate_source.calls == ["USD"]

    async def test_unsupported_currency(self):
        """Test a currency absent from the USD table is not supported."""
        service = CurrencyService(FakeRateSource({"EUR": "0.85"}))

        assert await service.is_supported("XYZ") is False

    async def test_reference_currency_supported(self):
        """Test USD is supported even when the table does not list it."""
        service = CurrencyService(FakeRateSource({"EUR": "0.85"}))

        assert await service.is_supported("USD") is True

    @pytest.mark.parametrize(
        "error",
        [RateSourceError("timed out"), RuntimeError("unexpected"), ValueError("bad")],
    )
    async def test_fetch_failure_returns_false(self, error):
        """Test any fetch failure is reported as unsupported instead of raised."""
        service = CurrencyService(FakeRateSource(error=error))

        assert await service.is_supported("EUR") is False
        assert await service.is_supported("USD") is False
