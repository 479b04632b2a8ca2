"""Unit tests for the currency conversion service"""

import asyncio

import pytest

from emicalc.core.config import Settings
from emicalc.core.exceptions import RateFetchErrorKind, UnknownCurrencyCodeError
from emicalc.services.rates.providers import StaticRateProvider
from emicalc.services.rates.service import CurrencyConversionService


async def _settle() -> None:
    """Let pending tasks run up to their next suspension point"""
    for _ in range(3):
        await asyncio.sleep(0)


def test_initial_state_is_empty():
    svc = CurrencyConversionService(StaticRateProvider(), "usd")

    assert svc.base_currency == "USD"
    assert svc.table.is_empty
    assert svc.loading is False
    assert svc.last_error is None
    assert svc.convert(100, "USD", "EUR") == 0


def test_from_settings_uses_configured_provider():
    settings = Settings(_env_file=None, base_currency="eur", strict_currency_codes=True)
    svc = CurrencyConversionService.from_settings(settings)

    assert svc.provider_name == "static"
    assert svc.base_currency == "EUR"


@pytest.mark.asyncio
async def test_refresh_success_replaces_table():
    svc = CurrencyConversionService(StaticRateProvider(), "USD")

    assert await svc.refresh() is True
    assert svc.table.base_currency == "USD"
    assert svc.table.provider == "static"
    assert svc.loading is False
    assert svc.last_error is None
    assert svc.convert(100, "USD", "EUR") == pytest.approx(92.0)


@pytest.mark.asyncio
async def test_refresh_with_new_base(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")
    gated_provider.release("EUR")

    await svc.refresh("eur")

    assert svc.base_currency == "EUR"
    assert svc.table.base_currency == "EUR"
    assert svc.table.rates["EUR"] == 1.0
    assert svc.convert(90, "EUR", "USD") == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_loading_while_in_flight(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")

    task = asyncio.create_task(svc.refresh("USD"))
    await _settle()
    assert svc.loading is True
    assert svc.table.is_empty

    gated_provider.release("USD")
    assert await task is True
    assert svc.loading is False
    assert not svc.table.is_empty


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_table(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")
    gated_provider.release("USD")
    await svc.refresh("USD")
    good_table = svc.table

    gated_provider.fail("GBP", RateFetchErrorKind.PROVIDER_FAILURE)
    gated_provider.release("GBP")
    assert await svc.refresh("GBP") is True

    assert svc.table is good_table
    assert svc.last_error is not None
    assert svc.last_error.kind is RateFetchErrorKind.PROVIDER_FAILURE
    assert svc.last_error.message == "GBP unavailable"
    assert svc.loading is False
    # still converting with the stale USD table
    assert svc.convert(100, "USD", "EUR") == pytest.approx(90.0)


@pytest.mark.asyncio
async def test_failed_first_refresh_leaves_table_empty(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")
    gated_provider.fail("USD")
    gated_provider.release("USD")

    await svc.refresh()

    assert svc.table.is_empty
    assert svc.last_error.kind is RateFetchErrorKind.NETWORK
    assert svc.convert(100, "USD", "EUR") == 0


@pytest.mark.asyncio
async def test_success_clears_last_error(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")
    gated_provider.fail("GBP")
    gated_provider.release("GBP")
    await svc.refresh("GBP")
    assert svc.last_error is not None

    gated_provider.release("USD")
    await svc.refresh("USD")
    assert svc.last_error is None


@pytest.mark.asyncio
async def test_newer_refresh_supersedes_older(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")

    older = asyncio.create_task(svc.refresh("EUR"))
    await _settle()
    newer = asyncio.create_task(svc.refresh("GBP"))

    gated_provider.release("GBP")
    assert await newer is True
    assert svc.loading is False

    gated_provider.release("EUR")
    assert await older is False

    assert gated_provider.calls == ["EUR", "GBP"]
    assert svc.base_currency == "GBP"
    assert svc.table.base_currency == "GBP"
    assert svc.loading is False


@pytest.mark.asyncio
async def test_superseded_failure_is_discarded(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")
    gated_provider.fail("EUR")

    older = asyncio.create_task(svc.refresh("EUR"))
    await _settle()
    newer = asyncio.create_task(svc.refresh("USD"))

    gated_provider.release("USD")
    await newer
    gated_provider.release("EUR")
    assert await older is False

    assert svc.last_error is None
    assert svc.table.base_currency == "USD"


@pytest.mark.asyncio
async def test_older_result_arriving_first_does_not_clear_loading(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD")

    older = asyncio.create_task(svc.refresh("EUR"))
    await _settle()
    newer = asyncio.create_task(svc.refresh("GBP"))
    await _settle()

    gated_provider.release("EUR")
    assert await older is False
    assert svc.loading is True
    assert svc.table.is_empty

    gated_provider.release("GBP")
    assert await newer is True
    assert svc.loading is False


@pytest.mark.asyncio
async def test_strict_mode(gated_provider):
    svc = CurrencyConversionService(gated_provider, "USD", strict_currency_codes=True)
    gated_provider.release("USD")
    await svc.refresh()

    with pytest.raises(UnknownCurrencyCodeError):
        svc.convert(1, "USD", "XYZ")
    # per-call override
    assert svc.convert(1, "USD", "XYZ", strict=False) == 1


def test_snapshot_is_consistent():
    svc = CurrencyConversionService(StaticRateProvider(), "USD")
    snap = svc.snapshot()

    assert snap.base_currency == "USD"
    assert snap.table is svc.table
    assert snap.loading is False
    assert snap.last_error is None
    assert snap.fetched_at is None
