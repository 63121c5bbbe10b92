"""
Debt Payoff Simulation

Simulates month-by-month payoff of several debts under an ordering
strategy:

1. Avalanche - highest APR first
2. Snowball - lowest balance first

Every debt receives its minimum payment each month. The single target debt
(first remaining in strategy order) also receives the extra budget plus the
minimums freed by debts retired in earlier months. A minimum freed in month
k joins the budget from month k + 1 onwards and is never reclaimed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from fincalc.calculations.amortization import (
    BALANCE_EPSILON,
    accrue_interest,
    periodic_rate,
)
from fincalc.calculations.outcomes import Divergent, InvalidInput

logger = logging.getLogger(__name__)

MAX_PERIODS = 1200  # 100 years of monthly payments
MONTHS_PER_YEAR = 12
UNALLOCATED_TOLERANCE = 0.01


class Strategy(str, Enum):
    """Debt ordering policy."""

    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"


@dataclass(frozen=True)
class Debt:
    """A debt entered into a payoff plan."""

    name: str
    balance: float
    apr: float  # decimal, e.g. 0.20 for 20%
    minimum_payment: float

    @property
    def monthly_rate(self) -> float:
        return periodic_rate(self.apr, MONTHS_PER_YEAR)


@dataclass(frozen=True)
class PayoffEvent:
    """A debt retired in a given month."""

    name: str
    period: int


@dataclass(frozen=True)
class PayoffPeriod:
    """Aggregate payments for one simulated month."""

    period: int
    payment: float
    interest: float
    remaining_balance: float


@dataclass(frozen=True)
class PayoffPlan:
    """Outcome of a full payoff simulation."""

    total_periods: int
    total_interest: float
    total_paid: float
    payoff_order: List[PayoffEvent] = field(default_factory=list)
    schedule: List[PayoffPeriod] = field(default_factory=list)
    warning: Optional[str] = None


@dataclass
class _WorkingDebt:
    """Mutable copy of a Debt threaded through the simulation."""

    name: str
    balance: float
    monthly_rate: float
    minimum_payment: float


def _sort_key(strategy: Strategy):
    if strategy is Strategy.AVALANCHE:
        return lambda debt: -debt.apr
    return lambda debt: debt.balance


def _validate(
    debts: List[Debt], extra_monthly_budget: float, strategy
) -> Union[Strategy, InvalidInput]:
    try:
        resolved = Strategy(strategy)
    except ValueError:
        return InvalidInput(
            f"Unknown payoff strategy '{strategy}'. Use 'avalanche' or 'snowball'.",
            "strategy",
        )

    if not debts:
        return InvalidInput("At least one debt is required.", "debts")
    if extra_monthly_budget < 0:
        return InvalidInput(
            "Extra monthly budget cannot be negative.", "extra_monthly_budget"
        )

    for debt in debts:
        if debt.balance <= 0:
            return InvalidInput(
                f"Balance for '{debt.name}' must be greater than zero.", "balance"
            )
        if debt.apr < 0:
            return InvalidInput(f"APR for '{debt.name}' cannot be negative.", "apr")
        if debt.minimum_payment <= 0:
            return InvalidInput(
                f"Minimum payment for '{debt.name}' must be greater than zero.",
                "minimum_payment",
            )

    return resolved


def simulate_payoff(
    debts: Iterable[Debt],
    extra_monthly_budget: float = 0.0,
    strategy: Union[Strategy, str] = Strategy.AVALANCHE,
) -> Union[PayoffPlan, Divergent, InvalidInput]:
    """
    Simulate paying off a set of debts.

    Args:
        debts: Debts to retire; input order breaks strategy ties
        extra_monthly_budget: Amount paid each month on top of all minimums
        strategy: Avalanche or snowball ordering

    Returns:
        PayoffPlan, Divergent if a minimum payment never covers its interest
        or payoff exceeds MAX_PERIODS, or InvalidInput
    """
    debt_list = list(debts)
    resolved = _validate(debt_list, extra_monthly_budget, strategy)
    if isinstance(resolved, InvalidInput):
        return resolved

    for debt in debt_list:
        first_interest = accrue_interest(debt.balance, debt.monthly_rate)
        if debt.minimum_payment <= first_interest:
            reason = (
                f"Minimum payment ({debt.minimum_payment:.2f}) for '{debt.name}' "
                f"doesn't cover its first month's interest ({first_interest:.2f}). "
                "Payoff impossible."
            )
            logger.warning(reason)
            return Divergent(reason=reason, periods_simulated=0)

    ordered = sorted(debt_list, key=_sort_key(resolved))
    remaining = [
        _WorkingDebt(
            name=debt.name,
            balance=float(debt.balance),
            monthly_rate=debt.monthly_rate,
            minimum_payment=debt.minimum_payment,
        )
        for debt in ordered
    ]

    budget = float(extra_monthly_budget)
    period = 0
    total_interest = 0.0
    total_paid = 0.0
    payoff_order: List[PayoffEvent] = []
    schedule: List[PayoffPeriod] = []
    unallocated_periods = 0

    while remaining and period < MAX_PERIODS:
        period += 1
        freed = 0.0
        period_payment = 0.0
        period_interest = 0.0

        for index, debt in enumerate(remaining):
            interest = accrue_interest(debt.balance, debt.monthly_rate)
            payoff_amount = debt.balance + interest

            payment = debt.minimum_payment
            if index == 0:
                payment += budget
                if payment - payoff_amount > UNALLOCATED_TOLERANCE and len(remaining) > 1:
                    unallocated_periods += 1
            payment = min(payment, payoff_amount)

            debt.balance = payoff_amount - payment
            if debt.balance <= BALANCE_EPSILON:
                payment += debt.balance
                debt.balance = 0.0

            period_interest += interest
            period_payment += payment

            if debt.balance == 0:
                freed += debt.minimum_payment
                payoff_order.append(PayoffEvent(name=debt.name, period=period))

        total_interest += period_interest
        total_paid += period_payment
        remaining = [debt for debt in remaining if debt.balance > 0]
        budget += freed

        schedule.append(
            PayoffPeriod(
                period=period,
                payment=period_payment,
                interest=period_interest,
                remaining_balance=sum(debt.balance for debt in remaining),
            )
        )

    if remaining:
        reason = (
            f"Payoff exceeds the time horizon of {MAX_PERIODS // MONTHS_PER_YEAR} "
            "years. Increase the monthly budget or check minimum payments."
        )
        logger.warning(reason)
        return Divergent(reason=reason, periods_simulated=period)

    warning = None
    if unallocated_periods:
        warning = (
            f"In {unallocated_periods} month(s) the target debt was retired with "
            "budget to spare; the surplus is applied from the following month."
        )

    logger.debug(
        f"{resolved.value} payoff of {len(debt_list)} debts in {period} months, "
        f"interest {total_interest:.2f}"
    )
    return PayoffPlan(
        total_periods=period,
        total_interest=total_interest,
        total_paid=total_paid,
        payoff_order=payoff_order,
        schedule=schedule,
        warning=warning,
    )
