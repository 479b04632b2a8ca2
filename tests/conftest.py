"""Pytest fixtures for testing"""

import asyncio
from collections import defaultdict
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient

from emicalc.core.config import Settings
from emicalc.core.exceptions import RateFetchError, RateFetchErrorKind
from emicalc.main import create_app
from emicalc.services.rates.base import ExchangeRateTable, RateProvider


USD_TABLE_RATES = {"USD": 1.0, "EUR": 0.9, "GBP": 0.8, "JPY": 150.0}


class GatedProvider(RateProvider):
    """Fake provider whose fetches block until the test releases them."""

    name = "gated"

    def __init__(self) -> None:
        self.gates: Dict[str, asyncio.Event] = defaultdict(asyncio.Event)
        self.failures: Dict[str, RateFetchError] = {}
        self.calls: list[str] = []

    def release(self, base: str) -> None:
        self.gates[base].set()

    def fail(self, base: str, kind: RateFetchErrorKind = RateFetchErrorKind.NETWORK) -> None:
        self.failures[base] = RateFetchError(kind, f"{base} unavailable")

    async def fetch_table(self, base_currency: str) -> ExchangeRateTable:
        self.calls.append(base_currency)
        await self.gates[base_currency].wait()
        if base_currency in self.failures:
            raise self.failures[base_currency]
        anchor = USD_TABLE_RATES[base_currency]
        return ExchangeRateTable(
            base_currency=base_currency,
            rates={code: rate / anchor for code, rate in USD_TABLE_RATES.items()},
            provider=self.name,
        )


@pytest.fixture
def usd_table() -> ExchangeRateTable:
    """Small USD-based table with round numbers"""
    return ExchangeRateTable(base_currency="USD", rates=USD_TABLE_RATES)


@pytest.fixture
def gated_provider() -> GatedProvider:
    return GatedProvider()


@pytest.fixture
def settings() -> Settings:
    """Offline settings: static provider, no refresh at startup"""
    return Settings(
        _env_file=None,
        exchange_rate_provider="static",
        base_currency="USD",
        refresh_on_startup=False,
        strict_currency_codes=False,
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Client whose rate table has not been fetched yet"""
    return TestClient(create_app(settings_override=settings))


@pytest.fixture
def loaded_client(settings: Settings) -> Generator[TestClient, None, None]:
    """Client started through the lifespan, so the static table is loaded"""
    app = create_app(
        settings_override=settings.model_copy(update={"refresh_on_startup": True})
    )
    with TestClient(app) as c:
        yield c
