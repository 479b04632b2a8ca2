"""Request-scoped accessors for objects the app factory attaches to app.state."""

from fastapi import Request

from emicalc.core.config import Settings
from emicalc.services.rates.service import CurrencyConversionService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_service(request: Request) -> CurrencyConversionService:
    return request.app.state.rate_service
