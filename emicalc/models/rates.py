from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from .loan import LoanIn


def _currency_code(v: str) -> str:
    v = v.strip().upper()
    if not (3 <= len(v) <= 4) or not v.isalpha():
        raise ValueError("currency code must be 3-4 letters")
    return v


class CurrencyOut(BaseModel):
    code: str
    name: str
    rate: float


class RateErrorOut(BaseModel):
    kind: str
    message: str


class RateTableOut(BaseModel):
    base_currency: str
    table_base_currency: str
    provider: Optional[str] = None
    loading: bool
    last_error: Optional[RateErrorOut] = None
    fetched_at: Optional[datetime] = None
    page: int
    page_size: int
    total_currencies: int
    currencies: List[CurrencyOut]


class RefreshIn(BaseModel):
    base_currency: str = Field(..., description="Base currency code, e.g. USD")

    @field_validator("base_currency")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return _currency_code(v)


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted_amount: float
    unit_rate: float = Field(..., description="Value of 1 from_currency, 4 decimals")
    rates_available: bool


class LoanConversionIn(LoanIn):
    from_currency: str = "USD"
    to_currency: str = "EUR"

    @field_validator("from_currency", "to_currency")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return _currency_code(v)


class LoanConversionOut(BaseModel):
    from_currency: str
    to_currency: str
    monthly_payment: float
    total_payment: float
    converted_monthly_payment: float
    converted_total_payment: float
    unit_rate: float
    rates_available: bool
