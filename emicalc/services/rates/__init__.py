from .base import ExchangeRateTable, RateProvider
from .conversion import CurrencyEntry, convert, list_currencies
from .providers import ExchangeRateApiProvider, StaticRateProvider, make_rate_provider
from .service import CurrencyConversionService, RateServiceSnapshot

__all__ = [
    "ExchangeRateTable",
    "RateProvider",
    "CurrencyEntry",
    "convert",
    "list_currencies",
    "ExchangeRateApiProvider",
    "StaticRateProvider",
    "make_rate_provider",
    "CurrencyConversionService",
    "RateServiceSnapshot",
]
