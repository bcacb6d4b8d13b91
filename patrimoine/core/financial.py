"""Financial calculation functions.

Time-value-of-money primitives used to value investments and loans.

Rates passed to these functions are fractional (0.05 for 5%). Configuration
values are percentages and must go through `pct_to_rate` first.

Contract: apart from the zero-rate branches documented below, inputs are not
validated. Negative periods or degenerate rates (e.g. -1) produce whatever the
formula yields (possibly inf or nan), never an exception.
"""

from __future__ import annotations

import numpy_financial as npf

from patrimoine.core.exceptions import NumericDomainError


def pct_to_rate(pct: float) -> float:
    """Convert a percentage (5.0) into a fractional rate (0.05)."""
    return pct / 100.0


def future_value(
    payment: float,
    rate: float,
    periods: int,
    initial_value: float = 0.0,
) -> float:
    """Future value of an initial capital plus periodic payments.

    Args:
        payment: Payment made at the end of each period in €
        rate: Interest rate per period (fractional)
        periods: Number of periods
        initial_value: Capital invested at the start in €

    Returns:
        Value at the end of the last period, interests included
    """
    growth = (1.0 + rate) ** periods
    capital = initial_value * growth
    if rate == 0.0:
        return capital + payment * periods
    return capital + payment * (growth - 1.0) / rate


def loan_payment(
    loaned_value: float,
    annual_rate: float,
    periods: int,
) -> float:
    """Yearly repayment (capital + interest) of a monthly-amortized loan.

    Args:
        loaned_value: Loan principal in €, negative (outflow convention)
        annual_rate: Annual interest rate (fractional), must be non-zero
        periods: Loan duration in years

    Returns:
        Yearly repayment in €, with the sign of `loaned_value`

    Raises:
        NumericDomainError: if annual_rate is zero
    """
    if annual_rate == 0.0:
        raise NumericDomainError("loan_payment", "annual_rate must be non-zero")

    # 12 monthly payments of the standard annuity
    return float(-12.0 * npf.pmt(annual_rate / 12.0, periods * 12, loaned_value))


def residual_loan_value(
    loaned_value: float,
    annual_rate: float,
    first_year: int,
    last_year: int,
    current_year: int,
) -> float:
    """Outstanding balance of a loan at the end of `current_year`.

    Args:
        loaned_value: Loan principal in €, negative (outflow convention)
        annual_rate: Annual interest rate (fractional), must be non-zero
        first_year: First repayment year
        last_year: Last repayment year
        current_year: Year of valuation

    Returns:
        Remaining balance in €, with the sign of `loaned_value`

    Raises:
        NumericDomainError: if annual_rate is zero
    """
    if annual_rate == 0.0:
        raise NumericDomainError("residual_loan_value", "annual_rate must be non-zero")

    periods = last_year - first_year + 1
    payment = loan_payment(loaned_value, annual_rate, periods)

    # remaining annuities discounted from current_year up to last_year
    return payment * (1.0 - (1.0 + annual_rate) ** (current_year - last_year)) / annual_rate
