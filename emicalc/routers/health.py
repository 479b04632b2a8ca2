from fastapi import APIRouter, Depends

from emicalc.services.rates.service import CurrencyConversionService
from .dependencies import get_rate_service

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness check")
async def health(svc: CurrencyConversionService = Depends(get_rate_service)):
    return {
        "status": "ok",
        "rates_loaded": not svc.table.is_empty,
        "rates_provider": svc.provider_name,
    }
