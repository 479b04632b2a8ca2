from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from emicalc.core.config import Settings
from emicalc.core.exceptions import RateFetchError
from .base import ExchangeRateTable, RateProvider
from .conversion import convert, normalize_code
from .providers import make_rate_provider

"""Currency conversion service.

Purpose:
    Own the single exchange rate table shared by every consumer, refresh it
    from the configured provider on demand and convert amounts over it.

Design:
    - One instance per application, created by the app factory and injected
      into routes; there is no module-level singleton.
    - `refresh` replaces the table with one assignment. Readers see either the
      old table or the new one, never a mix.
    - A failed refresh records `last_error` and keeps the previous table, so
      conversions degrade to slightly stale rather than blank.
    - Each `refresh` takes a new generation number. When a refresh finishes
      after a newer one has started, its outcome is discarded: the newer call
      owns `table`, `last_error` and `loading`.
"""

logger = logging.getLogger("emicalc.rates")


@dataclass(frozen=True)
class RateServiceSnapshot:
    base_currency: str
    table: ExchangeRateTable
    loading: bool
    last_error: Optional[RateFetchError]

    @property
    def fetched_at(self) -> Optional[datetime]:
        return self.table.fetched_at


class CurrencyConversionService:
    """Shared, refreshable exchange rate table with pure conversion on top."""

    def __init__(
        self,
        provider: RateProvider,
        base_currency: str = "USD",
        *,
        strict_currency_codes: bool = False,
    ):
        self._provider = provider
        self._base_currency = normalize_code(base_currency)
        self._strict = strict_currency_codes
        self._table = ExchangeRateTable.empty(self._base_currency)
        self._loading = False
        self._last_error: Optional[RateFetchError] = None
        self._generation = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "CurrencyConversionService":
        return cls(
            make_rate_provider(settings),
            settings.base_currency,
            strict_currency_codes=settings.strict_currency_codes,
        )

    # Read access -----------------------------------------------
    @property
    def table(self) -> ExchangeRateTable:
        return self._table

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def last_error(self) -> Optional[RateFetchError]:
        return self._last_error

    @property
    def base_currency(self) -> str:
        """Base currency most recently requested (the table may still lag)."""
        return self._base_currency

    @property
    def provider_name(self) -> str:
        return self._provider.name

    def snapshot(self) -> RateServiceSnapshot:
        return RateServiceSnapshot(
            base_currency=self._base_currency,
            table=self._table,
            loading=self._loading,
            last_error=self._last_error,
        )

    # Refresh ---------------------------------------------------
    async def refresh(self, base_currency: Optional[str] = None) -> bool:
        """Fetch a new table for ``base_currency`` (default: the current base).

        Returns True when this call's outcome was applied, success or failure,
        and False when a newer refresh superseded it.
        """
        base = normalize_code(base_currency) if base_currency else self._base_currency
        self._generation += 1
        generation = self._generation
        self._base_currency = base
        self._loading = True
        log_extra = {"base_currency": base, "generation": generation}
        logger.info("refreshing exchange rates", extra=log_extra)

        try:
            table = await self._provider.fetch_table(base)
        except RateFetchError as e:
            if generation != self._generation:
                logger.info("discarding superseded rate refresh", extra=log_extra)
                return False
            self._last_error = e
            self._loading = False
            logger.warning(
                "exchange rate refresh failed: %s",
                e.message,
                extra={**log_extra, "error_kind": e.kind.value},
            )
            return True
        except BaseException:
            # cancelled, or a provider bug: propagate without leaving loading stuck
            if generation == self._generation:
                self._loading = False
            raise

        if generation != self._generation:
            logger.info("discarding superseded rate refresh", extra=log_extra)
            return False
        self._table = table
        self._last_error = None
        self._loading = False
        logger.info(
            "exchange rates refreshed",
            extra={**log_extra, "provider": table.provider, "currencies": len(table)},
        )
        return True

    # Conversion ------------------------------------------------
    def convert(
        self,
        amount: float,
        from_code: str,
        to_code: str,
        *,
        strict: Optional[bool] = None,
    ) -> float:
        strict = self._strict if strict is None else strict
        return convert(self._table, amount, from_code, to_code, strict=strict)
