"""
Loan Amortization Calculations

Fixed-payment amortization schedules for a single loan. The level payment
comes from the standard annuity formula (Excel's PMT); the schedule is then
walked period by period so the final entry lands exactly on zero.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, List, Optional, Union

from dateutil.relativedelta import relativedelta

from fincalc.calculations.outcomes import InvalidInput

logger = logging.getLogger(__name__)

PAYMENT_FREQUENCIES = (1, 2, 4, 12, 26, 52)
BALANCE_EPSILON = 0.005  # currency units


@dataclass(frozen=True)
class Loan:
    """A level-payment loan."""

    principal: float
    annual_rate: float  # decimal, e.g. 0.055 for 5.5%
    term_periods: int
    payments_per_year: int = 12
    start_date: Optional[date] = None  # date of the first payment

    @classmethod
    def from_years(
        cls,
        principal: float,
        annual_rate: float,
        years: float,
        payments_per_year: int = 12,
        start_date: Optional[date] = None,
    ) -> "Loan":
        """Build a loan from a term expressed in years."""
        return cls(
            principal=principal,
            annual_rate=annual_rate,
            term_periods=int(round(years * payments_per_year)),
            payments_per_year=payments_per_year,
            start_date=start_date,
        )

    @property
    def period_rate(self) -> float:
        return periodic_rate(self.annual_rate, self.payments_per_year)


@dataclass(frozen=True)
class AmortizationEntry:
    """One row of an amortization schedule."""

    period: int
    starting_balance: float
    payment: float
    principal_portion: float
    interest_portion: float
    ending_balance: float
    payment_date: Optional[date] = None


@dataclass(frozen=True)
class AmortizationSchedule:
    """Ordered amortization entries plus loan-level totals."""

    level_payment: float
    entries: List[AmortizationEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[AmortizationEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    @property
    def total_interest(self) -> float:
        return sum(entry.interest_portion for entry in self.entries)

    @property
    def total_principal(self) -> float:
        return sum(entry.principal_portion for entry in self.entries)

    @property
    def total_paid(self) -> float:
        return sum(entry.payment for entry in self.entries)


def periodic_rate(annual_rate: float, periods_per_year: int) -> float:
    """Convert a nominal annual rate to a per-period rate."""
    return annual_rate / periods_per_year


def accrue_interest(balance: float, period_rate: float) -> float:
    """Interest accrued on a balance over one period."""
    return balance * period_rate


def _compound_growth(period_rate: float, periods: int) -> float:
    """(1 + r)^n - 1, kept accurate for rates too small to move (1 + r)^n off 1.0."""
    if period_rate == 0:
        return 0.0
    return math.expm1(periods * math.log1p(period_rate))


def calculate_payment(principal: float, period_rate: float, periods: int) -> float:
    """
    Calculate the level payment for a fully amortizing loan.

    Matches Excel's PMT() function.

    Args:
        principal: Loan principal amount
        period_rate: Interest rate per payment period as decimal
        periods: Total number of payments

    Returns:
        Payment per period (positive number)
    """
    if principal <= 0 or periods <= 0:
        return 0.0

    growth_less_one = _compound_growth(period_rate, periods)
    if growth_less_one == 0:
        return principal / periods

    return principal * period_rate * (growth_less_one + 1) / growth_less_one


def calculate_remaining_balance(
    principal: float,
    period_rate: float,
    periods: int,
    payments_made: int,
) -> float:
    """Closed-form balance outstanding after a number of level payments."""
    payment = calculate_payment(principal, period_rate, periods)

    growth_less_one = _compound_growth(period_rate, payments_made)
    if growth_less_one == 0:
        return max(0.0, principal - payment * payments_made)

    balance = (
        principal * (growth_less_one + 1) - payment * growth_less_one / period_rate
    )
    return max(0.0, balance)


def _payment_step(payments_per_year: int) -> relativedelta:
    if payments_per_year == 52:
        return relativedelta(weeks=1)
    if payments_per_year == 26:
        return relativedelta(weeks=2)
    return relativedelta(months=12 // payments_per_year)


def _validate(loan: Loan) -> Optional[InvalidInput]:
    if loan.principal <= 0:
        return InvalidInput("Loan principal must be greater than zero.", "principal")
    if loan.term_periods <= 0:
        return InvalidInput("Loan term must be greater than zero.", "term_periods")
    if loan.annual_rate < 0:
        return InvalidInput("Interest rate cannot be negative.", "annual_rate")
    if loan.payments_per_year not in PAYMENT_FREQUENCIES:
        return InvalidInput(
            f"Payments per year must be one of {PAYMENT_FREQUENCIES}.",
            "payments_per_year",
        )
    return None


def compute_schedule(loan: Loan) -> Union[AmortizationSchedule, InvalidInput]:
    """
    Generate the full amortization schedule for a loan.

    Each period accrues interest on the opening balance and applies the rest
    of the level payment to principal. On the last period, or as soon as the
    balance would drop to within BALANCE_EPSILON of zero, the principal
    portion is forced to the remaining balance and the payment for that
    period is recomputed, so the schedule always ends on exactly zero.

    Args:
        loan: Loan to amortize

    Returns:
        AmortizationSchedule, or InvalidInput if the loan is malformed
    """
    error = _validate(loan)
    if error is not None:
        return error

    rate = loan.period_rate
    periods = loan.term_periods
    payment = calculate_payment(loan.principal, rate, periods)
    step = _payment_step(loan.payments_per_year)

    entries: List[AmortizationEntry] = []
    balance = float(loan.principal)

    for period in range(1, periods + 1):
        interest = accrue_interest(balance, rate)
        principal_pmt = payment - interest
        period_payment = payment

        if period == periods or balance - principal_pmt <= BALANCE_EPSILON:
            principal_pmt = balance
            period_payment = principal_pmt + interest

        payment_date = None
        if loan.start_date is not None:
            payment_date = loan.start_date + step * (period - 1)

        ending_balance = balance - principal_pmt
        entries.append(
            AmortizationEntry(
                period=period,
                starting_balance=balance,
                payment=period_payment,
                principal_portion=principal_pmt,
                interest_portion=interest,
                ending_balance=ending_balance,
                payment_date=payment_date,
            )
        )
        balance = ending_balance

        if balance == 0:
            break

    logger.debug(
        f"Amortized {loan.principal:.2f} over {len(entries)} periods "
        f"at {payment:.2f} per period"
    )
    return AmortizationSchedule(level_payment=payment, entries=entries)
