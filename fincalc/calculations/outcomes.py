"""
Calculation Outcomes

Error variants returned by the calculation engine in place of a result.
Engine functions never raise for bad inputs or numerical trouble; they
return one of these records and let the caller decide what to show.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class InvalidInput:
    """Inputs rejected before any simulation started."""

    kind: ClassVar[str] = "invalid_input"

    reason: str
    field: Optional[str] = None


@dataclass(frozen=True)
class Divergent:
    """A simulation could not reach its terminal condition."""

    kind: ClassVar[str] = "divergent"

    reason: str
    periods_simulated: int = 0


@dataclass(frozen=True)
class Unreachable(Divergent):
    """A savings goal cannot be reached within the horizon."""

    kind: ClassVar[str] = "unreachable"


@dataclass(frozen=True)
class NonConvergent:
    """A numerical solve failed to bracket or converge on a root."""

    kind: ClassVar[str] = "non_convergent"

    reason: str
    fallback_percent: Optional[float] = None
    iterations: int = 0


ERROR_TYPES = (InvalidInput, Divergent, NonConvergent)


def is_error(result: object) -> bool:
    """Return True if result is one of the engine's error variants."""
    return isinstance(result, ERROR_TYPES)
