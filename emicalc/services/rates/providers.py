from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a built-in USD-anchored table and derives any other supported
base through cross-rates; it keeps development and tests offline.
'exchangerate-api' fetches live tables from the exchangerate-api v6 endpoint.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx

from emicalc.core.config import Settings
from emicalc.core.exceptions import RateFetchError, RateFetchErrorKind
from emicalc.services.http_client import HttpError, InvalidJsonError, get_json
from .base import ExchangeRateTable, RateProvider

logger = logging.getLogger("emicalc.rates")

# Units per 1 USD; approximate, for offline use only
_STATIC_USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 151.5,
    "AUD": 1.53,
    "CAD": 1.37,
    "CHF": 0.9,
    "CNY": 7.24,
    "INR": 83.4,
    "SGD": 1.35,
    "MYR": 4.73,
    "NZD": 1.67,
    "HKD": 7.82,
    "SEK": 10.6,
    "ZAR": 18.7,
}


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, usd_rates: Optional[Mapping[str, float]] = None):
        self._usd_rates = dict(usd_rates or _STATIC_USD_RATES)

    async def fetch_table(self, base_currency: str) -> ExchangeRateTable:
        base = base_currency.upper()
        anchor = self._usd_rates.get(base)
        if not anchor:
            raise RateFetchError(
                RateFetchErrorKind.PROVIDER_FAILURE,
                f"Base currency {base} is not supported by the static provider",
            )
        rates = {code: usd_rate / anchor for code, usd_rate in self._usd_rates.items()}
        return ExchangeRateTable(
            base_currency=base,
            rates=rates,
            fetched_at=datetime.now(timezone.utc),
            provider=self.name,
        )


def parse_conversion_rates(payload: Dict[str, Any], base_currency: str) -> Dict[str, float]:
    """Validate an exchangerate-api ``latest`` payload and return its rates.

    The provider reports some failures inside a 200 response, so the
    ``result`` field is checked before anything else.
    """
    result = payload.get("result")
    if result != "success":
        error_type = payload.get("error-type") or "unknown error"
        raise RateFetchError(
            RateFetchErrorKind.PROVIDER_FAILURE,
            f"Failed to fetch exchange rates ({error_type})",
        )
    base_code = payload.get("base_code")
    if base_code is not None and str(base_code).upper() != base_currency:
        raise RateFetchError(
            RateFetchErrorKind.MALFORMED_PAYLOAD,
            f"Provider returned rates for {base_code}, expected {base_currency}",
        )
    raw = payload.get("conversion_rates")
    if not isinstance(raw, dict) or not raw:
        raise RateFetchError(
            RateFetchErrorKind.MALFORMED_PAYLOAD,
            "Provider response has no conversion rates",
        )
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
            or value <= 0
        ):
            raise RateFetchError(
                RateFetchErrorKind.MALFORMED_PAYLOAD,
                f"Invalid rate for {code}: {value!r}",
            )
        rates[str(code).upper()] = float(value)
    rates.setdefault(base_currency, 1.0)
    return rates


class ExchangeRateApiProvider(RateProvider):
    name = "exchangerate-api"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._transport = transport

    def _latest_url(self, base_currency: str) -> str:
        return f"{self._base_url}/{self._api_key}/latest/{base_currency}"

    async def fetch_table(self, base_currency: str) -> ExchangeRateTable:
        base = base_currency.upper()
        try:
            payload = await get_json(
                self._latest_url(base),
                timeout=self._timeout,
                retries=self._retries,
                backoff=self._backoff,
                transport=self._transport,
            )
        except InvalidJsonError as e:
            raise RateFetchError(
                RateFetchErrorKind.MALFORMED_PAYLOAD,
                f"Rate provider returned an unreadable response: {e}",
            ) from e
        except HttpError as e:
            raise RateFetchError(
                RateFetchErrorKind.NETWORK,
                "Error fetching exchange rates. Please try again later.",
            ) from e
        rates = parse_conversion_rates(payload, base)
        return ExchangeRateTable(
            base_currency=base,
            rates=rates,
            fetched_at=datetime.now(timezone.utc),
            provider=self.name,
        )


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "exchangerate-api": ExchangeRateApiProvider,
}


def make_rate_provider(settings: Settings) -> RateProvider:
    kind = settings.exchange_rate_provider
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExchangeRateApiProvider:
        if not settings.exchange_api_key:
            logger.warning("exchangerate-api provider configured without an API key")
        return ExchangeRateApiProvider(
            str(settings.exchange_api_base_url),
            settings.exchange_api_key,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    return cls()
