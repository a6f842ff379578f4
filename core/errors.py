"""
Domain errors raised by the engines.

All of them subclass ValueError so callers that already guard numeric input
with ``except ValueError`` keep working.
"""

from __future__ import annotations


class FinanceEngineError(ValueError):
    """Base class for every engine error."""


class InvalidAssumption(FinanceEngineError):
    """Inputs make a formula divide by zero or by a negative quantity."""


class InsufficientData(FinanceEngineError):
    """A series or record set is empty where at least one value is needed."""


class InvalidDistribution(FinanceEngineError):
    """A simulation variable cannot be sampled within its bounds."""


class NonConvergentIRR(FinanceEngineError):
    """Newton-Raphson stopped without meeting the tolerance."""

    def __init__(self, best_rate: float, iterations: int):
        self.best_rate = best_rate
        self.iterations = iterations
        super().__init__(
            f"IRR did not converge after {iterations} iterations "
            f"(best estimate {best_rate:.6f})."
        )
