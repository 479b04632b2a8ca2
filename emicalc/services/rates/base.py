from __future__ import annotations

"""Rate provider abstraction and the exchange rate table value.

A provider turns a base currency into a complete `ExchangeRateTable`; the
conversion service decides when to ask and what to keep.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class ExchangeRateTable:
    """Rates as "units of currency per 1 unit of ``base_currency``".

    Immutable: a refresh builds a new table instead of editing this one.
    """

    base_currency: str
    rates: Mapping[str, float] = field(default_factory=dict)
    fetched_at: Optional[datetime] = None
    provider: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    @classmethod
    def empty(cls, base_currency: str) -> "ExchangeRateTable":
        return cls(base_currency=base_currency)

    @property
    def is_empty(self) -> bool:
        return not self.rates

    def __contains__(self, code: object) -> bool:
        return code in self.rates

    def __len__(self) -> int:
        return len(self.rates)


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    async def fetch_table(self, base_currency: str) -> ExchangeRateTable:
        """Return the full table for ``base_currency``.

        Raises:
            RateFetchError: on network failure, a provider-reported failure or
                a payload that cannot be turned into a table.
        """
        raise NotImplementedError
