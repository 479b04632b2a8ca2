import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.exceptions import LoanValidationError, UnknownCurrencyCodeError
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, loan, rates
from .services.rates.service import CurrencyConversionService


def create_app(
    settings_override: Settings | None = None,
    rate_service: CurrencyConversionService | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    rate_service: inject a prebuilt conversion service (e.g. with a fake
    provider); otherwise one is built from settings.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug, service=settings.app_name)

    service = rate_service or CurrencyConversionService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.refresh_on_startup:
            # Failure is recorded on the service; startup continues either way
            await service.refresh(settings.base_currency)
        yield

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_service = service

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(LoanValidationError, errors.loan_validation_error_handler)
    app.add_exception_handler(UnknownCurrencyCodeError, errors.unknown_currency_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(loan.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "Loan EMI Calculator API", "version": settings.version}

    logging.getLogger("emicalc").debug(
        "app created", extra={"provider": service.provider_name}
    )
    return app


app = create_app()
