"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Each request
calls exactly one engine function; error outcomes are translated into
plain-language HTTP errors and never returned as if they were results.
"""

from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from fincalc.calculations import amortization, bond, payoff, savings
from fincalc.calculations.outcomes import Divergent, InvalidInput, NonConvergent
from fincalc.services.history import HistoryEntry, HistoryRecorder, format_amount, get_history

router = APIRouter()


def _raise_for_outcome(result) -> None:
    """Raise an HTTPException if result is an engine error variant."""
    if isinstance(result, InvalidInput):
        raise HTTPException(
            status_code=400,
            detail={"kind": result.kind, "message": result.reason, "field": result.field},
        )
    if isinstance(result, Divergent):
        raise HTTPException(
            status_code=422,
            detail={
                "kind": result.kind,
                "message": result.reason,
                "periods_simulated": result.periods_simulated,
            },
        )
    if isinstance(result, NonConvergent):
        detail = {"kind": result.kind, "message": result.reason}
        if result.fallback_percent is not None:
            detail["approximate_yield_percent"] = result.fallback_percent
            detail["message"] += (
                f" Approximate yield is {result.fallback_percent:.3f}% "
                "(estimate only)."
            )
        raise HTTPException(status_code=422, detail=detail)


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float
    term_years: float
    payments_per_year: int = 12
    start_date: Optional[date] = None


class AmortizationRow(BaseModel):
    """One schedule row."""

    period: int
    starting_balance: float
    payment: float
    principal_portion: float
    interest_portion: float
    ending_balance: float
    payment_date: Optional[date] = None


class AmortizationResponse(BaseModel):
    """Response with schedule and loan totals."""

    payment: float
    total_interest: float
    total_paid: float
    schedule: List[AmortizationRow]


@router.post("/amortization", response_model=AmortizationResponse)
async def calculate_amortization(
    inputs: AmortizationInput,
    history: HistoryRecorder = Depends(get_history),
):
    """Generate loan amortization schedule."""
    loan = amortization.Loan.from_years(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        years=inputs.term_years,
        payments_per_year=inputs.payments_per_year,
        start_date=inputs.start_date,
    )
    schedule = amortization.compute_schedule(loan)
    _raise_for_outcome(schedule)

    history.record(
        HistoryEntry(
            calculator="amortization",
            input=(
                f"Loan Amount: {format_amount(loan.principal)}, "
                f"Interest Rate: {loan.annual_rate * 100:g}%, "
                f"Term: {inputs.term_years:g} years"
            ),
            result=(
                f"Payment: {format_amount(schedule.level_payment)}, "
                f"Total Interest: {format_amount(schedule.total_interest)}, "
                f"Total Payment: {format_amount(schedule.total_paid)}"
            ),
        )
    )

    return AmortizationResponse(
        payment=schedule.level_payment,
        total_interest=schedule.total_interest,
        total_paid=schedule.total_paid,
        schedule=[AmortizationRow(**asdict(entry)) for entry in schedule],
    )


class DebtInput(BaseModel):
    """A single debt in a payoff request."""

    name: str
    balance: float
    apr: float
    minimum_payment: float


class PayoffInput(BaseModel):
    """Input for debt payoff simulation."""

    debts: List[DebtInput]
    extra_monthly_budget: float = 0.0
    strategy: payoff.Strategy = payoff.Strategy.AVALANCHE


class PayoffEventResponse(BaseModel):
    name: str
    period: int


class PayoffResponse(BaseModel):
    """Response with payoff plan totals and order."""

    total_periods: int
    total_interest: float
    total_paid: float
    payoff_order: List[PayoffEventResponse]
    warning: Optional[str] = None


@router.post("/payoff", response_model=PayoffResponse)
async def calculate_payoff(
    inputs: PayoffInput,
    history: HistoryRecorder = Depends(get_history),
):
    """Simulate debt payoff under the selected strategy."""
    debts = [payoff.Debt(**debt.model_dump()) for debt in inputs.debts]
    plan = payoff.simulate_payoff(debts, inputs.extra_monthly_budget, inputs.strategy)
    _raise_for_outcome(plan)

    debt_summary = "; ".join(
        f"{debt.name}: {format_amount(debt.balance)}@{debt.apr * 100:g}%"
        f"({format_amount(debt.minimum_payment)}/mo)"
        for debt in debts
    )
    history.record(
        HistoryEntry(
            calculator="payoff",
            input=(
                f"Debts: {debt_summary}, "
                f"Extra: {format_amount(inputs.extra_monthly_budget)}/mo, "
                f"Strategy: {inputs.strategy.value}"
            ),
            result=(
                f"Payoff Time: {plan.total_periods} months, "
                f"Total Interest: {format_amount(plan.total_interest)}"
            ),
        )
    )

    return PayoffResponse(
        total_periods=plan.total_periods,
        total_interest=plan.total_interest,
        total_paid=plan.total_paid,
        payoff_order=[PayoffEventResponse(**asdict(event)) for event in plan.payoff_order],
        warning=plan.warning,
    )


class BondYieldInput(BaseModel):
    """Input for yield to maturity calculation."""

    price: float
    face_value: float
    annual_coupon_rate: float
    years_to_maturity: float
    payments_per_year: int = 2


class BondYieldResponse(BaseModel):
    yield_percent: float
    iterations: int
    approximate: bool
    caveat: Optional[str] = None


@router.post("/bond/yield", response_model=BondYieldResponse)
async def calculate_bond_yield(
    inputs: BondYieldInput,
    history: HistoryRecorder = Depends(get_history),
):
    """Solve a bond's yield to maturity from its price."""
    terms = bond.Bond(**inputs.model_dump())
    result = bond.solve_yield(terms)
    _raise_for_outcome(result)

    history.record(
        HistoryEntry(
            calculator="bond-yield",
            input=(
                f"Price: {format_amount(inputs.price)}, "
                f"Face Value: {format_amount(inputs.face_value)}, "
                f"Coupon: {inputs.annual_coupon_rate * 100:g}%, "
                f"Maturity: {inputs.years_to_maturity:g} yrs"
            ),
            result=f"YTM: {result.yield_percent:.3f}%",
        )
    )

    return BondYieldResponse(
        yield_percent=result.yield_percent,
        iterations=result.iterations,
        approximate=result.approximate,
        caveat=result.caveat,
    )


class BondPriceInput(BaseModel):
    """Input for bond price calculation."""

    annual_yield: float
    face_value: float
    annual_coupon_rate: float
    years_to_maturity: float
    payments_per_year: int = 2


class BondPriceResponse(BaseModel):
    price: float
    coupon_payment: float
    total_periods: float


@router.post("/bond/price", response_model=BondPriceResponse)
async def calculate_bond_price(
    inputs: BondPriceInput,
    history: HistoryRecorder = Depends(get_history),
):
    """Price a bond from its required yield."""
    terms = bond.Bond(**inputs.model_dump())
    result = bond.price_bond(terms)
    _raise_for_outcome(result)

    history.record(
        HistoryEntry(
            calculator="bond-price",
            input=(
                f"Face Value: {format_amount(inputs.face_value)}, "
                f"Coupon: {inputs.annual_coupon_rate * 100:g}%, "
                f"Maturity: {inputs.years_to_maturity:g} yrs, "
                f"Yield: {inputs.annual_yield * 100:g}%"
            ),
            result=f"Estimated Bond Price: {format_amount(result.price)}",
        )
    )

    return BondPriceResponse(**asdict(result))


class SavingsGoalInput(BaseModel):
    """Input for time-to-goal calculation."""

    target_amount: float
    periodic_contribution: float
    annual_rate: float
    initial_balance: float = 0.0
    compounding_periods_per_year: int = 12


class SavingsGoalResponse(BaseModel):
    periods: int
    years: int
    months: int
    final_balance: float
    total_interest: float
    total_contributions: float
    already_met: bool


@router.post("/savings-goal", response_model=SavingsGoalResponse)
async def calculate_savings_goal(
    inputs: SavingsGoalInput,
    history: HistoryRecorder = Depends(get_history),
):
    """Determine how long it takes to reach a savings goal."""
    goal = savings.SavingsGoal(**inputs.model_dump())
    result = savings.solve_time_to_goal(goal)
    _raise_for_outcome(result)

    history.record(
        HistoryEntry(
            calculator="savings-goal",
            input=(
                f"Goal: {format_amount(inputs.target_amount)}, "
                f"Initial: {format_amount(inputs.initial_balance)}, "
                f"Monthly: {format_amount(inputs.periodic_contribution)}, "
                f"Rate: {inputs.annual_rate * 100:g}%"
            ),
            result=(
                f"Time to Goal: {result.periods} months, "
                f"Final Balance: {format_amount(result.final_balance)}"
            ),
        )
    )

    years, months = divmod(result.periods, 12)
    return SavingsGoalResponse(years=years, months=months, **asdict(result))
