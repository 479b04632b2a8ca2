"""Pydantic request / response models for the loan calculator API."""

from .constants import (
    CURRENCY_NAMES,
    DEFAULT_BASE_CURRENCY,
    POPULAR_CURRENCIES,
)  # re-export
from .loan import LoanIn, LoanResultOut, LoanSummaryOut, PaymentRowOut, SchedulePageOut
from .rates import (
    ConversionOut,
    CurrencyOut,
    LoanConversionIn,
    LoanConversionOut,
    RateErrorOut,
    RateTableOut,
    RefreshIn,
)

__all__ = [
    "CURRENCY_NAMES",
    "DEFAULT_BASE_CURRENCY",
    "POPULAR_CURRENCIES",
    "LoanIn",
    "LoanResultOut",
    "LoanSummaryOut",
    "PaymentRowOut",
    "SchedulePageOut",
    "ConversionOut",
    "CurrencyOut",
    "LoanConversionIn",
    "LoanConversionOut",
    "RateErrorOut",
    "RateTableOut",
    "RefreshIn",
]
