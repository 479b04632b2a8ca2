from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from emicalc.core.exceptions import UnknownCurrencyCodeError
from emicalc.models.constants import POPULAR_CURRENCIES, currency_name
from .base import ExchangeRateTable

"""Currency conversion over an exchange rate table.

Everything here is pure and reads only the table it is given:
    - `convert` routes through the table's base currency; no rounding.
    - An empty table converts everything to 0. Callers check whether rates
      are loaded instead of trusting that value.
    - A code missing from the table converts at rate 1 unless ``strict`` is
      set, in which case `UnknownCurrencyCodeError` is raised.
"""


@dataclass(frozen=True)
class CurrencyEntry:
    code: str
    name: str
    rate: float


def normalize_code(code: str) -> str:
    return code.strip().upper()


def lookup_rate(table: ExchangeRateTable, code: str, *, strict: bool = False) -> float:
    rate = table.rates.get(code)
    if rate:
        return rate
    if strict:
        raise UnknownCurrencyCodeError(code)
    return 1.0


def convert(
    table: ExchangeRateTable,
    amount: float,
    from_code: str,
    to_code: str,
    *,
    strict: bool = False,
) -> float:
    if table.is_empty:
        return 0.0
    from_code = normalize_code(from_code)
    to_code = normalize_code(to_code)
    from_rate = lookup_rate(table, from_code, strict=strict)
    to_rate = lookup_rate(table, to_code, strict=strict)

    if from_code == table.base_currency:
        return amount * to_rate
    if to_code == table.base_currency:
        return amount / from_rate
    # cross-rate through the base currency
    return (amount / from_rate) * to_rate


def list_currencies(
    table: ExchangeRateTable, search: Optional[str] = None
) -> List[CurrencyEntry]:
    """Table entries, popular currencies first, each group sorted by code.

    ``search`` keeps entries whose code or display name contains it,
    case-insensitively.
    """
    entries: Iterable[CurrencyEntry] = (
        CurrencyEntry(code=code, name=currency_name(code), rate=rate)
        for code, rate in table.rates.items()
    )
    if search:
        needle = search.strip().lower()
        entries = (
            e for e in entries if needle in e.code.lower() or needle in e.name.lower()
        )
    return sorted(entries, key=_popular_first)


def _popular_first(entry: CurrencyEntry):
    return (entry.code not in POPULAR_CURRENCIES, entry.code)
