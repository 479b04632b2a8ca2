from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .exceptions import LoanValidationError, UnknownCurrencyCodeError

logger = logging.getLogger("emicalc.errors")


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def loan_validation_error_handler(request: Request, exc: LoanValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": [{"loc": [exc.field], "msg": exc.message}],
        },
    )


def unknown_currency_handler(request: Request, exc: UnknownCurrencyCodeError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "unknown_currency", "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
