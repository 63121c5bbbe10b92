"""
Savings Goal Calculations

Time needed to reach a savings target with monthly contributions and
compound growth. The nominal annual rate is converted to an effective
monthly rate through the effective annual rate, so any compounding
frequency can be combined with monthly contributions.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from fincalc.calculations.outcomes import InvalidInput, Unreachable

logger = logging.getLogger(__name__)

MAX_PERIODS = 1800  # 150 years of monthly contributions
CONTRIBUTIONS_PER_YEAR = 12
COMPOUNDING_FREQUENCIES = (1, 2, 4, 12, 26, 52, 365)


@dataclass(frozen=True)
class SavingsGoal:
    """A savings target with monthly contributions."""

    target_amount: float
    periodic_contribution: float
    annual_rate: float  # decimal, nominal
    initial_balance: float = 0.0
    compounding_periods_per_year: int = 12


@dataclass(frozen=True)
class GoalResult:
    """Months needed to reach a savings goal and the resulting balance."""

    periods: int
    final_balance: float
    total_interest: float
    total_contributions: float
    already_met: bool = False


def effective_annual_rate(annual_rate: float, compounding_periods: int) -> float:
    """Effective annual rate for a nominal rate compounded n times a year."""
    return (1 + annual_rate / compounding_periods) ** compounding_periods - 1


def contribution_period_rate(annual_rate: float, compounding_periods: int) -> float:
    """Effective rate per monthly contribution period."""
    ear = effective_annual_rate(annual_rate, compounding_periods)
    return (1 + ear) ** (1 / CONTRIBUTIONS_PER_YEAR) - 1


def _validate(goal: SavingsGoal) -> Optional[InvalidInput]:
    if goal.target_amount <= 0:
        return InvalidInput("Savings goal must be greater than zero.", "target_amount")
    if goal.initial_balance < 0:
        return InvalidInput("Initial balance cannot be negative.", "initial_balance")
    if goal.periodic_contribution < 0:
        return InvalidInput(
            "Contribution cannot be negative.", "periodic_contribution"
        )
    if goal.annual_rate < 0:
        return InvalidInput("Interest rate cannot be negative.", "annual_rate")
    if goal.compounding_periods_per_year not in COMPOUNDING_FREQUENCIES:
        return InvalidInput(
            f"Compounding frequency must be one of {COMPOUNDING_FREQUENCIES}.",
            "compounding_periods_per_year",
        )
    return None


def _project(initial: float, contribution: float, rate: float, periods: int) -> float:
    balance = initial
    for _ in range(periods):
        balance = balance * (1 + rate) + contribution
    return balance


def solve_time_to_goal(goal: SavingsGoal) -> Union[GoalResult, Unreachable, InvalidInput]:
    """
    Determine how many months it takes to reach a savings goal.

    Interest is credited before each end-of-month contribution. With a zero
    rate the month count is solved directly; otherwise months are simulated
    until the balance reaches the target or MAX_PERIODS is hit.

    Args:
        goal: Savings goal inputs

    Returns:
        GoalResult, Unreachable, or InvalidInput
    """
    error = _validate(goal)
    if error is not None:
        return error

    target = goal.target_amount
    initial = goal.initial_balance
    contribution = goal.periodic_contribution

    if target <= initial:
        return GoalResult(
            periods=0,
            final_balance=initial,
            total_interest=0.0,
            total_contributions=0.0,
            already_met=True,
        )

    if contribution == 0 and (goal.annual_rate == 0 or initial == 0):
        return Unreachable(
            reason="Goal cannot be reached with zero contributions and nothing to grow."
        )

    rate = contribution_period_rate(goal.annual_rate, goal.compounding_periods_per_year)

    if rate == 0 and contribution == 0:
        return Unreachable(
            reason="Goal cannot be reached: the interest rate is too small to grow the balance."
        )

    if rate == 0:
        periods = math.ceil((target - initial) / contribution)
    else:
        balance = initial
        periods = 0
        while balance < target and periods < MAX_PERIODS:
            balance = balance * (1 + rate) + contribution
            periods += 1
        if balance < target:
            reason = (
                f"Goal is not reached within {MAX_PERIODS // CONTRIBUTIONS_PER_YEAR} "
                "years. Increase contributions or the starting balance."
            )
            logger.warning(reason)
            return Unreachable(reason=reason, periods_simulated=periods)

    final_balance = _project(initial, contribution, rate, periods)
    total_contributions = contribution * periods

    logger.debug(f"Savings goal {target:.2f} reached in {periods} months")
    return GoalResult(
        periods=periods,
        final_balance=final_balance,
        total_interest=final_balance - initial - total_contributions,
        total_contributions=total_contributions,
    )
