"""Unit tests for the amortization engine"""

import math

import pytest

from emicalc.core.exceptions import LoanValidationError
from emicalc.models.constants import MAX_TERM_YEARS
from emicalc.services.amortization import (
    build_amortization_schedule,
    calculate_loan,
    compute_monthly_payment,
    compute_totals,
)


def test_monthly_payment_standard_loan():
    """100000 at 8.5% over 20 years"""
    payment = compute_monthly_payment(100000, 8.5, 20)
    assert payment == pytest.approx(867.82, abs=0.005)


def test_totals_standard_loan():
    totals = compute_totals(100000, 8.5, 20)
    payment = compute_monthly_payment(100000, 8.5, 20)

    assert totals.total_payment == payment * 240
    assert totals.total_payment == pytest.approx(208276.53, rel=1e-4)
    assert totals.total_interest == pytest.approx(108276.53, rel=1e-4)


def test_zero_rate_is_straight_division():
    assert compute_monthly_payment(12000, 0, 1) == 1000.0
    assert compute_monthly_payment(5000, 0, 3) == 5000 / (3 * 12)


def test_zero_rate_schedule():
    schedule = build_amortization_schedule(12000, 0, 1)

    assert len(schedule) == 12
    assert [row.month_index for row in schedule] == list(range(1, 13))
    assert all(row.payment == 1000.0 for row in schedule)
    assert all(row.interest_component == 0 for row in schedule)
    assert schedule[-1].remaining_balance == 0


@pytest.mark.parametrize(
    "principal,rate,term",
    [
        (100000, 8.5, 20),
        (250000, 6.0, 30),
        (1000, 0.1, 1),
        (50000, 24.0, 5),
        (75000, 0, 15),
        (1, 99.0, 40),
        (500000, 3.25, 0.5),
    ],
)
def test_payment_is_positive(principal, rate, term):
    assert compute_monthly_payment(principal, rate, term) > 0


@pytest.mark.parametrize(
    "principal,rate,term",
    [(100000, 8.5, 20), (250000, 6.0, 30), (18000, 12.0, 3), (1000, 0.5, 1)],
)
def test_schedule_invariants(principal, rate, term):
    schedule = build_amortization_schedule(principal, rate, term)

    assert schedule[-1].remaining_balance == 0
    assert all(row.remaining_balance >= 0 for row in schedule)

    balances = [row.remaining_balance for row in schedule]
    assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))

    assert [row.month_index for row in schedule] == list(range(1, len(schedule) + 1))
    for row in schedule[:-1]:
        assert row.principal_component + row.interest_component == pytest.approx(
            row.payment, rel=1e-9
        )


def test_schedule_runs_full_term():
    schedule = build_amortization_schedule(100000, 8.5, 20)

    assert len(schedule) == 240
    assert schedule[0].interest_component == pytest.approx(100000 * 0.085 / 12)
    # final row absorbs only float drift
    assert schedule[-1].payment == pytest.approx(schedule[0].payment, abs=1e-6)


def test_interest_share_decreases_over_time():
    schedule = build_amortization_schedule(100000, 8.5, 20)

    assert schedule[0].interest_component > schedule[-1].interest_component
    assert schedule[0].principal_component < schedule[-1].principal_component


def test_fractional_term_pays_off_in_final_partial_month():
    """1.05 years is 12.6 months: 12 full payments then a smaller 13th"""
    payment = compute_monthly_payment(10000, 10, 1.05)
    schedule = build_amortization_schedule(10000, 10, 1.05)

    assert len(schedule) == 13
    assert schedule[-1].remaining_balance == 0
    assert 0 < schedule[-1].payment < payment
    last = schedule[-1]
    assert last.principal_component + last.interest_component == pytest.approx(last.payment)


def test_final_row_principal_is_opening_balance():
    """The last row clears what was owed, so principal sums to the loan amount"""
    schedule = build_amortization_schedule(10000, 10, 1.05)

    opening = schedule[-2].remaining_balance
    assert schedule[-1].principal_component == opening
    assert sum(r.principal_component for r in schedule) == pytest.approx(10000)
    assert all(r.remaining_balance >= 0 for r in schedule)


def test_totals_use_nominal_month_count_not_schedule():
    """Totals multiply by 12.6 months even though 13 rows are emitted"""
    payment = compute_monthly_payment(10000, 10, 1.05)
    totals = compute_totals(10000, 10, 1.05)
    schedule = build_amortization_schedule(10000, 10, 1.05)

    assert totals.total_payment == payment * (1.05 * 12)
    assert totals.total_payment != pytest.approx(sum(r.payment for r in schedule), abs=1e-6)


@pytest.mark.parametrize(
    "principal,rate,term", [(100000, 8.5, 20), (12000, 0, 1), (10000, 10, 1.05)]
)
def test_total_interest_is_total_payment_minus_principal(principal, rate, term):
    totals = compute_totals(principal, rate, term)
    assert totals.total_interest == totals.total_payment - principal


def test_calculate_loan_bundles_engine_outputs():
    result = calculate_loan(12000, 0, 1)

    assert result.monthly_payment == 1000.0
    assert result.total_payment == 12000.0
    assert result.total_interest == 0.0
    assert len(result.schedule) == 12
    assert result.number_of_months == 12


@pytest.mark.parametrize(
    "principal,rate,term,field",
    [
        (0, 5, 10, "principal"),
        (-100, 5, 10, "principal"),
        (1000, -1, 10, "annual_interest_rate_percent"),
        (1000, 5, 0, "term_years"),
        (1000, 5, -2, "term_years"),
        (1000, 5, 0.05, "term_years"),
        (1000, 0, 1e308, "term_years"),
        (1000, 0, 200000, "term_years"),
        (1000, 5, math.inf, "term_years"),
        (5e-324, 0, 10, "principal"),
        (math.nan, 5, 10, "principal"),
        (math.inf, 5, 10, "principal"),
        ("1000", 5, 10, "principal"),
        (True, 5, 10, "principal"),
    ],
)
def test_invalid_input_is_rejected(principal, rate, term, field):
    with pytest.raises(LoanValidationError) as exc_info:
        compute_monthly_payment(principal, rate, term)
    assert exc_info.value.field == field


def test_longest_term_is_accepted():
    schedule = build_amortization_schedule(1000, 5, MAX_TERM_YEARS)

    assert len(schedule) == MAX_TERM_YEARS * 12
    assert schedule[-1].remaining_balance == 0


def test_overflowing_rate_is_rejected():
    with pytest.raises(LoanValidationError):
        build_amortization_schedule(1000, 1_000_000, 50)
