"""Loan EMI calculator with amortization schedules and currency conversion."""

__version__ = "0.1.0"
