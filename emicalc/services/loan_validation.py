"""Domain-level loan input validation.

The amortization formulas are only defined for a positive principal, a
positive term of at most `MAX_TERM_YEARS` and a non-negative rate; anything
else would surface as NaN, infinity, a division by zero or an unbounded
schedule loop deep inside the engine. These checks run at the top of every
engine entry point so invalid input fails loudly with a `LoanValidationError`
naming the offending field.
"""

from __future__ import annotations

import math

from emicalc.core.exceptions import LoanValidationError
from emicalc.models.constants import MAX_TERM_YEARS


def _validate_number(value, name: str) -> float:
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LoanValidationError(name, "must be an integer or float")
    if not math.isfinite(value):
        raise LoanValidationError(name, "must be a finite number")
    return float(value)


def validate_positive(value, name: str) -> float:
    value = _validate_number(value, name)
    if value <= 0:
        raise LoanValidationError(name, "must be greater than 0")
    return value


def validate_non_negative(value, name: str) -> float:
    value = _validate_number(value, name)
    if value < 0:
        raise LoanValidationError(name, "must be greater than or equal to 0")
    return value


def validate_loan_input(principal, annual_rate_percent, term_years) -> None:
    validate_positive(principal, "principal")
    validate_non_negative(annual_rate_percent, "annual_interest_rate_percent")
    validate_positive(term_years, "term_years")
    if term_years > MAX_TERM_YEARS:
        raise LoanValidationError(
            "term_years", f"must be at most {MAX_TERM_YEARS} years"
        )
    if term_years * 12 < 1:
        raise LoanValidationError("term_years", "must cover at least one month")
