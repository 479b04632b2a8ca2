"""Domain exceptions shared by the engine, the rate service and the API."""

from __future__ import annotations

from enum import Enum


class LoanValidationError(ValueError):
    """Loan input outside the domain the amortization engine is defined on."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class RateFetchErrorKind(str, Enum):
    NETWORK = "network"
    PROVIDER_FAILURE = "provider_failure"
    MALFORMED_PAYLOAD = "malformed_payload"


class RateFetchError(Exception):
    """Refreshing the exchange rate table failed.

    Never fatal: the rate service records it as ``last_error`` and keeps
    serving the previous table.
    """

    def __init__(self, kind: RateFetchErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class UnknownCurrencyCodeError(KeyError):
    """Raised only in strict mode for a code missing from the rate table."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"unknown currency code '{self.code}'"
