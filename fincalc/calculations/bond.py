"""
Bond Pricing and Yield to Maturity

Prices a fixed-coupon bond from its yield, and solves the inverse problem
(yield from observed price) by bisection over the pricing function.

Bond price as a function of the per-period yield y:
    price(y) = C * (1 - (1 + y)^-N) / y + F * (1 + y)^-N
with price(0) = C * N + F. Price is strictly decreasing in y, so a price
above target means the yield is too low.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from fincalc.calculations.outcomes import InvalidInput, NonConvergent

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 0.00001  # price-currency units
LOW_BOUND = 0.0
HIGH_BOUND = 1.0  # 100% per period
COUPON_FREQUENCIES = (1, 2, 4, 12)


@dataclass(frozen=True)
class Bond:
    """A fixed-coupon bond with either an observed price or a yield."""

    face_value: float
    annual_coupon_rate: float  # decimal
    years_to_maturity: float
    payments_per_year: int = 2
    price: Optional[float] = None
    annual_yield: Optional[float] = None  # decimal, nominal annual

    @property
    def coupon_payment(self) -> float:
        return self.face_value * self.annual_coupon_rate / self.payments_per_year

    @property
    def total_periods(self) -> float:
        return self.years_to_maturity * self.payments_per_year


@dataclass(frozen=True)
class YieldResult:
    """Solved yield to maturity."""

    yield_percent: float  # annualized, e.g. 5.66 for 5.66%
    period_yield: float
    iterations: int
    approximate: bool = False
    caveat: Optional[str] = None


@dataclass(frozen=True)
class PriceResult:
    """Bond price implied by a yield."""

    price: float
    coupon_payment: float
    total_periods: float


def bond_price(bond: Bond, period_yield: float) -> float:
    """
    Present value of a bond's cash flows at a per-period yield.

    Args:
        bond: Bond terms
        period_yield: Discount rate per coupon period as decimal

    Returns:
        Price in the same currency units as face value
    """
    coupon = bond.coupon_payment
    periods = bond.total_periods

    if period_yield == 0:
        return coupon * periods + bond.face_value

    discount = (1 + period_yield) ** -periods
    return coupon * (1 - discount) / period_yield + bond.face_value * discount


def approximate_yield(bond: Bond) -> float:
    """
    Closed-form approximate yield to maturity, as a percentage.

    (annual coupon + (F - P) / T) / ((F + P) / 2)
    """
    face = bond.face_value
    price = bond.price
    annual_coupon = bond.annual_coupon_rate * face
    ytm = (annual_coupon + (face - price) / bond.years_to_maturity) / ((face + price) / 2)
    return ytm * 100


def _validate(bond: Bond) -> Optional[InvalidInput]:
    if bond.face_value <= 0:
        return InvalidInput("Face value must be greater than zero.", "face_value")
    if bond.annual_coupon_rate < 0:
        return InvalidInput("Coupon rate cannot be negative.", "annual_coupon_rate")
    if bond.years_to_maturity <= 0:
        return InvalidInput(
            "Years to maturity must be greater than zero.", "years_to_maturity"
        )
    if bond.payments_per_year not in COUPON_FREQUENCIES:
        return InvalidInput(
            f"Coupon frequency must be one of {COUPON_FREQUENCIES}.",
            "payments_per_year",
        )
    return None


def price_bond(bond: Bond) -> Union[PriceResult, InvalidInput]:
    """Price a bond from its nominal annual yield."""
    error = _validate(bond)
    if error is not None:
        return error
    if bond.annual_yield is None:
        return InvalidInput("A yield is required to price the bond.", "annual_yield")
    if bond.annual_yield < 0:
        return InvalidInput("Yield cannot be negative.", "annual_yield")

    period_yield = bond.annual_yield / bond.payments_per_year
    return PriceResult(
        price=bond_price(bond, period_yield),
        coupon_payment=bond.coupon_payment,
        total_periods=bond.total_periods,
    )


def solve_yield(bond: Bond) -> Union[YieldResult, NonConvergent, InvalidInput]:
    """
    Solve for the yield to maturity that reproduces the bond's price.

    Bisects the per-period yield over [LOW_BOUND, HIGH_BOUND]. The price must
    be bracketed by the prices at those bounds, otherwise no root exists in
    the domain and NonConvergent is returned with the approximate yield as
    fallback. If MAX_ITERATIONS pass without the price error dropping below
    TOLERANCE, the approximate yield is returned flagged as approximate.

    Midpoint updates always keep LOW_BOUND <= low < high <= HIGH_BOUND, so
    the bracket-collapse check inside the loop cannot fire in practice; it
    only turns a broken bracket into NonConvergent instead of a bad yield.

    Args:
        bond: Bond terms including observed price

    Returns:
        YieldResult, NonConvergent, or InvalidInput
    """
    error = _validate(bond)
    if error is not None:
        return error
    if bond.price is None or bond.price <= 0:
        return InvalidInput("Price must be greater than zero.", "price")

    target = bond.price
    low = LOW_BOUND
    high = HIGH_BOUND

    if not bond_price(bond, high) <= target <= bond_price(bond, low):
        reason = (
            f"Price {target:.2f} implies a yield outside "
            f"{LOW_BOUND:.0%}-{HIGH_BOUND:.0%} per period."
        )
        logger.warning(reason)
        return NonConvergent(reason=reason, fallback_percent=approximate_yield(bond))

    iterations = 0
    guess = (low + high) / 2

    while iterations < MAX_ITERATIONS:
        iterations += 1
        diff = bond_price(bond, guess) - target

        if abs(diff) < TOLERANCE:
            logger.debug(f"Yield converged after {iterations} iterations")
            return YieldResult(
                yield_percent=guess * bond.payments_per_year * 100,
                period_yield=guess,
                iterations=iterations,
            )

        if diff > 0:
            low = guess
        else:
            high = guess

        if high <= low or low < LOW_BOUND or high > HIGH_BOUND:
            reason = f"Yield bracket collapsed to [{low}, {high}]."
            logger.warning(reason)
            return NonConvergent(reason=reason, iterations=iterations)

        guess = (low + high) / 2

    logger.warning(
        f"Yield did not converge within {MAX_ITERATIONS} iterations; "
        "using approximate formula"
    )
    approx = approximate_yield(bond)
    return YieldResult(
        yield_percent=approx,
        period_yield=approx / 100 / bond.payments_per_year,
        iterations=iterations,
        approximate=True,
        caveat="Approximate yield; bisection did not reach the price tolerance.",
    )
