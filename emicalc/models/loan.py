from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List

from .constants import MAX_TERM_YEARS


class LoanIn(BaseModel):
    """Loan input; immutable and recomputed from scratch on every change."""

    model_config = ConfigDict(frozen=True)

    principal: float = Field(
        ..., gt=0, allow_inf_nan=False, description="Loan amount"
    )
    annual_interest_rate_percent: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Annual interest rate, e.g. 8.5 for 8.5%",
    )
    term_years: float = Field(
        ...,
        gt=0,
        le=MAX_TERM_YEARS,
        allow_inf_nan=False,
        description="Loan duration in years",
    )


class PaymentRowOut(BaseModel):
    month_index: int
    payment: float
    principal_component: float
    interest_component: float
    remaining_balance: float


class LoanSummaryOut(BaseModel):
    principal: float
    annual_interest_rate_percent: float
    term_years: float
    monthly_payment: float
    total_payment: float
    total_interest: float
    number_of_payments: int


class LoanResultOut(LoanSummaryOut):
    schedule: List[PaymentRowOut]


class SchedulePageOut(BaseModel):
    summary: LoanSummaryOut
    page: int
    page_size: int
    total_rows: int
    total_pages: int
    rows: List[PaymentRowOut]
