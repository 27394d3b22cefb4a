"""Client for the external exchange rate provider."""

import json
import time
from collections.abc import Awaitable, Callable
from decimal import Decimal

import aiohttp
from pydantic import ValidationError

from currency_converter.logging_config import get_logger
from currency_converter.middleware.metrics import record_rate_source_fetch
from currency_converter.models.conversion import ExchangeRateResponse

logger = get_logger(__name__)

# Anything that maps a base currency to a rate table can back the converter
RateFetcher = Callable[[str], Awaitable[ExchangeRateResponse]]


class RateSourceError(Exception):
    """Raised when the rate provider is unreachable, too slow or returns bad data."""


class HttpRateSource:
    """Fetches rate tables with GET ``{base_url}/{base_currency}``.

    A single attempt is made per call, bounded by ``timeout_ms``. The client
    session is created on first use and reused until :meth:`close`.
    """

    def __init__(self, base_url: str, timeout_ms: int):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def __call__(self, base_currency: str) -> ExchangeRateResponse:
        """Fetch the rate table for ``base_currency``.

        Raises:
            RateSourceError: If the request fails, times out or the body is malformed
        """
        url = f"{self.base_url}/{base_currency}"
        logger.debug(f"Fetching exchange rates from: {url}")
        start_time = time.time()

        try:
            async with self._get_session().get(url) as response:
                response.raise_for_status()
                body = await response.text()
            payload = json.loads(body, parse_float=Decimal)
            table = ExchangeRateResponse.model_validate(payload)
        except TimeoutError as e:
            record_rate_source_fetch(time.time() - start_time, success=False)
            msg = f"Rate provider did not respond within {self.timeout.total}s for {base_currency}"
            raise RateSourceError(msg) from e
        except aiohttp.ClientError as e:
            record_rate_source_fetch(time.time() - start_time, success=False)
            msg = f"Rate provider request failed for {base_currency}: {e!s}"
            raise RateSourceError(msg) from e
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            record_rate_source_fetch(time.time() - start_time, success=False)
            msg = f"Rate provider returned malformed data for {base_currency}: {e!s}"
            raise RateSourceError(msg) from e

        record_rate_source_fetch(time.time() - start_time, success=True)
        logger.debug(
            f"Fetched {len(table.rates)} rates for {table.base}",
            base_currency=table.base,
            rate_date=table.date,
        )
        return table

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
