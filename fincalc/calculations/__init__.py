"""
Financial Calculation Engine

Pure numeric core: loan amortization, multi-debt payoff simulation,
bond yield solving and savings-goal projection. Every function takes plain
input records and returns either a result record or an outcome variant
from fincalc.calculations.outcomes.
"""

from fincalc.calculations import amortization, bond, outcomes, payoff, savings

__all__ = ["amortization", "bond", "outcomes", "payoff", "savings"]
