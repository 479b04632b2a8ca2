from __future__ import annotations

import math

from fastapi import APIRouter, Depends, HTTPException, Query

from emicalc.core.config import Settings
from emicalc.models.constants import MAX_TERM_YEARS
from emicalc.models.loan import (
    LoanIn,
    LoanResultOut,
    LoanSummaryOut,
    PaymentRowOut,
    SchedulePageOut,
)
from emicalc.services.amortization import LoanResult, PaymentRow, calculate_loan
from emicalc.services.money import round2
from .dependencies import get_app_settings

"""Loan router: EMI, totals and the amortization schedule.

Figures are rounded to 2 decimals here, at the edge; the engine itself never
rounds.
"""

router = APIRouter(prefix="/loan", tags=["loan"])


# Helpers ----------------------------------------------------------


def _row_out(row: PaymentRow) -> PaymentRowOut:
    return PaymentRowOut(
        month_index=row.month_index,
        payment=round2(row.payment),
        principal_component=round2(row.principal_component),
        interest_component=round2(row.interest_component),
        remaining_balance=round2(row.remaining_balance),
    )


def _summary_out(result: LoanResult) -> LoanSummaryOut:
    return LoanSummaryOut(
        principal=result.principal,
        annual_interest_rate_percent=result.annual_rate_percent,
        term_years=result.term_years,
        monthly_payment=round2(result.monthly_payment),
        total_payment=round2(result.total_payment),
        total_interest=round2(result.total_interest),
        number_of_payments=len(result.schedule),
    )


def _calculate(payload: LoanIn) -> LoanResult:
    return calculate_loan(
        payload.principal, payload.annual_interest_rate_percent, payload.term_years
    )


# Routes -----------------------------------------------------------
@router.post(
    "/calculate",
    response_model=LoanResultOut,
    summary="Monthly payment, totals and full amortization schedule",
)
async def calculate(payload: LoanIn):
    result = _calculate(payload)
    return LoanResultOut(
        **_summary_out(result).model_dump(),
        schedule=[_row_out(r) for r in result.schedule],
    )


@router.get(
    "/schedule",
    response_model=SchedulePageOut,
    summary="One page of the amortization schedule",
)
async def schedule_page(
    principal: float = Query(..., gt=0, allow_inf_nan=False),
    annual_interest_rate_percent: float = Query(..., ge=0, allow_inf_nan=False),
    term_years: float = Query(..., gt=0, le=MAX_TERM_YEARS, allow_inf_nan=False),
    page: int = Query(0, ge=0, description="0-based page number"),
    page_size: int = Query(12, description="Months per page"),
    settings: Settings = Depends(get_app_settings),
):
    if page_size not in settings.schedule_page_sizes:
        raise HTTPException(
            status_code=422,
            detail=f"page_size must be one of {settings.schedule_page_sizes}",
        )
    result = _calculate(
        LoanIn(
            principal=principal,
            annual_interest_rate_percent=annual_interest_rate_percent,
            term_years=term_years,
        )
    )
    total_rows = len(result.schedule)
    start = page * page_size
    return SchedulePageOut(
        summary=_summary_out(result),
        page=page,
        page_size=page_size,
        total_rows=total_rows,
        total_pages=math.ceil(total_rows / page_size),
        rows=[_row_out(r) for r in result.schedule[start : start + page_size]],
    )
