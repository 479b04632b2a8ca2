"""Amortization engine: EMI, month-by-month schedule and loan totals.

All functions are pure and take ``(principal, annual_rate_percent, term_years)``.
Inputs are validated up front (see `loan_validation`); nothing here rounds,
presentation rounding is left to the caller.

Two behaviours are deliberate and covered by tests:

- The schedule stops at the first month whose closing balance is ``<= 0``.
  Floating-point drift can therefore pay the loan off a row early.
- `compute_totals` multiplies the payment by the nominal month count and does
  not sum the emitted schedule rows, so the two can disagree slightly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from emicalc.core.exceptions import LoanValidationError
from .loan_validation import validate_loan_input

# Tolerance when turning a fractional month count into a row count
_MONTHS_EPSILON = 1e-9


@dataclass(frozen=True)
class PaymentRow:
    month_index: int
    payment: float
    principal_component: float
    interest_component: float
    remaining_balance: float


@dataclass(frozen=True)
class LoanTotals:
    total_payment: float
    total_interest: float


@dataclass(frozen=True)
class LoanResult:
    principal: float
    annual_rate_percent: float
    term_years: float
    monthly_payment: float
    total_payment: float
    total_interest: float
    schedule: List[PaymentRow]

    @property
    def number_of_months(self) -> float:
        return total_months(self.term_years)


def monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / 12 / 100


def total_months(term_years: float) -> float:
    return term_years * 12


def _positive_payment(payment: float) -> float:
    # float underflow for sub-normal principals
    if payment <= 0:
        raise LoanValidationError("principal", "too small to amortize")
    return payment


def compute_monthly_payment(principal, annual_rate_percent, term_years) -> float:
    """Return the EMI for the loan.

    ``P * r * (1+r)^n / ((1+r)^n - 1)`` with ``r`` the monthly rate as a
    decimal and ``n`` the number of months; ``P / n`` when the rate is zero.
    Fractional ``n`` is accepted.
    """
    validate_loan_input(principal, annual_rate_percent, term_years)
    r = monthly_rate(annual_rate_percent)
    n = total_months(term_years)
    if r == 0:
        return _positive_payment(principal / n)
    try:
        factor = (1 + r) ** n
    except OverflowError:
        raise LoanValidationError(
            "annual_interest_rate_percent", "too large for the given term"
        ) from None
    if factor == 1:
        # rate too small to register in float arithmetic
        return _positive_payment(principal / n)
    payment = principal * r * factor / (factor - 1)
    if not math.isfinite(payment):
        raise LoanValidationError(
            "annual_interest_rate_percent", "too large for the given term"
        )
    return _positive_payment(payment)


def build_amortization_schedule(
    principal, annual_rate_percent, term_years
) -> List[PaymentRow]:
    """Build the full schedule eagerly (callers paginate over it).

    Each month charges interest on the opening balance and puts the rest of
    the EMI towards principal. The schedule ends at the first month whose
    balance reaches zero. That row, and always the last month of the term, is
    adjusted to pay off exactly the opening balance: its principal equals the
    balance owed and its payment is that balance plus interest. For integer
    terms this only absorbs float drift; for a fractional term the last row is
    the smaller partial-month payment. The last ``remaining_balance`` is
    always 0 and the principal components add up to the principal.
    """
    payment = compute_monthly_payment(principal, annual_rate_percent, term_years)
    r = monthly_rate(annual_rate_percent)
    months = math.ceil(total_months(term_years) - _MONTHS_EPSILON)

    schedule: List[PaymentRow] = []
    balance = float(principal)
    for month in range(1, months + 1):
        interest = balance * r
        principal_part = payment - interest
        row_payment = payment
        if month == months or principal_part > balance:
            # final adjusted row: pay off exactly what is still owed
            principal_part = balance
            row_payment = principal_part + interest
        balance -= principal_part

        schedule.append(
            PaymentRow(
                month_index=month,
                payment=row_payment,
                principal_component=principal_part,
                interest_component=interest,
                remaining_balance=max(0.0, balance),
            )
        )
        if balance <= 0:
            break

    return schedule


def compute_totals(principal, annual_rate_percent, term_years) -> LoanTotals:
    payment = compute_monthly_payment(principal, annual_rate_percent, term_years)
    total_payment = payment * total_months(term_years)
    return LoanTotals(
        total_payment=total_payment, total_interest=total_payment - principal
    )


def calculate_loan(principal, annual_rate_percent, term_years) -> LoanResult:
    """Run the whole engine for one input and bundle the results."""
    payment = compute_monthly_payment(principal, annual_rate_percent, term_years)
    totals = compute_totals(principal, annual_rate_percent, term_years)
    return LoanResult(
        principal=float(principal),
        annual_rate_percent=float(annual_rate_percent),
        term_years=float(term_years),
        monthly_payment=payment,
        total_payment=totals.total_payment,
        total_interest=totals.total_interest,
        schedule=build_amortization_schedule(
            principal, annual_rate_percent, term_years
        ),
    )
