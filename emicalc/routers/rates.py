from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from emicalc.core.config import Settings
from emicalc.models.rates import (
    ConversionOut,
    CurrencyOut,
    LoanConversionIn,
    LoanConversionOut,
    RateErrorOut,
    RateTableOut,
    RefreshIn,
)
from emicalc.services.amortization import calculate_loan
from emicalc.services.money import round2, round4
from emicalc.services.rates.conversion import list_currencies, normalize_code
from emicalc.services.rates.service import CurrencyConversionService
from .dependencies import get_app_settings, get_rate_service

"""Rates router: the shared exchange rate table and conversions over it.

Endpoints:
    - GET  /rates               -> table snapshot (search + pagination)
    - POST /rates/refresh       -> select a base currency and refetch
    - GET  /rates/convert       -> convert one amount
    - POST /rates/convert-loan  -> monthly payment and total in another currency

Conversions read whatever table is loaded. `rates_available` is false while no
table has been fetched yet, in which case converted figures are 0.
"""

router = APIRouter(prefix="/rates", tags=["rates"])


def _snapshot_out(
    svc: CurrencyConversionService,
    *,
    search: Optional[str] = None,
    page: int = 0,
    page_size: int = 10,
) -> RateTableOut:
    snap = svc.snapshot()
    entries = list_currencies(snap.table, search)
    start = page * page_size
    err = snap.last_error
    return RateTableOut(
        base_currency=snap.base_currency,
        table_base_currency=snap.table.base_currency,
        provider=snap.table.provider,
        loading=snap.loading,
        last_error=RateErrorOut(kind=err.kind.value, message=err.message) if err else None,
        fetched_at=snap.fetched_at,
        page=page,
        page_size=page_size,
        total_currencies=len(entries),
        currencies=[
            CurrencyOut(code=e.code, name=e.name, rate=round4(e.rate))
            for e in entries[start : start + page_size]
        ],
    )


@router.get("", response_model=RateTableOut, summary="Current exchange rate table")
async def get_rates(
    search: Optional[str] = Query(None, description="Filter by code or name"),
    page: int = Query(0, ge=0),
    page_size: int = Query(10),
    settings: Settings = Depends(get_app_settings),
    svc: CurrencyConversionService = Depends(get_rate_service),
):
    if page_size not in settings.rates_page_sizes:
        raise HTTPException(
            status_code=422,
            detail=f"page_size must be one of {settings.rates_page_sizes}",
        )
    return _snapshot_out(svc, search=search, page=page, page_size=page_size)


@router.post(
    "/refresh",
    response_model=RateTableOut,
    summary="Select a base currency and refetch its rates",
)
async def refresh_rates(
    payload: RefreshIn,
    svc: CurrencyConversionService = Depends(get_rate_service),
):
    await svc.refresh(payload.base_currency)
    return _snapshot_out(svc)


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert_amount(
    amount: float = Query(..., allow_inf_nan=False),
    from_currency: str = Query(..., min_length=3, max_length=4),
    to_currency: str = Query(..., min_length=3, max_length=4),
    strict: Optional[bool] = Query(
        None, description="Reject codes missing from the table instead of using rate 1"
    ),
    svc: CurrencyConversionService = Depends(get_rate_service),
):
    from_code = normalize_code(from_currency)
    to_code = normalize_code(to_currency)
    return ConversionOut(
        amount=amount,
        from_currency=from_code,
        to_currency=to_code,
        converted_amount=svc.convert(amount, from_code, to_code, strict=strict),
        unit_rate=round4(svc.convert(1, from_code, to_code, strict=strict)),
        rates_available=not svc.table.is_empty,
    )


@router.post(
    "/convert-loan",
    response_model=LoanConversionOut,
    summary="Monthly payment and total payment in another currency",
)
async def convert_loan(
    payload: LoanConversionIn,
    strict: Optional[bool] = Query(None),
    svc: CurrencyConversionService = Depends(get_rate_service),
):
    result = calculate_loan(
        payload.principal, payload.annual_interest_rate_percent, payload.term_years
    )
    pair = (payload.from_currency, payload.to_currency)
    return LoanConversionOut(
        from_currency=payload.from_currency,
        to_currency=payload.to_currency,
        monthly_payment=round2(result.monthly_payment),
        total_payment=round2(result.total_payment),
        converted_monthly_payment=round2(
            svc.convert(result.monthly_payment, *pair, strict=strict)
        ),
        converted_total_payment=round2(
            svc.convert(result.total_payment, *pair, strict=strict)
        ),
        unit_rate=round4(svc.convert(1, *pair, strict=strict)),
        rates_available=not svc.table.is_empty,
    )
