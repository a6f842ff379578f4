"""
Discounting and rate-of-return primitives.

Convention used by every caller in this repository:
    cash_flows[t] is received at the end of period t, and cash_flows[0] is the
    (negative) initial outlay at t = 0.

Rates are decimals here (0.10 = 10%). The higher-level engines take percents
and convert at their boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.errors import InvalidAssumption, NonConvergentIRR
from core.logger import setup_logger
from core.utils import as_float_array, sign_changes

logger = setup_logger(__name__)


def _check_rate(rate: float) -> None:
    if rate <= -1.0:
        raise InvalidAssumption(f"Discount rate must exceed -100% (got {rate:.4f}).")


def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """Σ cf_t / (1+rate)^t for t = 0..n."""
    cf = as_float_array(cash_flows)
    _check_rate(rate)
    t = np.arange(cf.size, dtype=float)
    return float(np.sum(cf / (1.0 + rate) ** t))


def _npv_and_derivative(rate: float, cf: np.ndarray, t: np.ndarray):
    base = 1.0 + rate
    value = np.sum(cf / base ** t)
    slope = np.sum(-t * cf / base ** (t + 1.0))
    return float(value), float(slope)


@dataclass(frozen=True)
class IRRResult:
    """
    Outcome of the Newton-Raphson search.

    ``rate`` is the converged root, or the best iterate seen (smallest
    |NPV|) when ``converged`` is False. Series with several sign changes can
    have several roots; ``sign_changes`` lets callers spot that case.
    """

    rate: float
    converged: bool
    iterations: int
    npv_at_rate: float
    sign_changes: int

    @property
    def pct(self) -> float:
        return self.rate * 100.0

    def unwrap(self) -> float:
        """Return the rate, or raise NonConvergentIRR if it is only a guess."""
        if not self.converged:
            raise NonConvergentIRR(self.rate, self.iterations)
        return self.rate


def irr(
    cash_flows: Sequence[float],
    guess: float = 0.10,
    *,
    tol: float = 1e-4,
    max_iter: int = 1000,
) -> IRRResult:
    """
    Internal rate of return via Newton-Raphson with an analytic derivative.

    Stops when |Δr| < tol. A step that would leave the domain r > -1 is
    halved until it lands inside, so losing projects (negative roots) are
    still found. The search stops early, unconverged, when the derivative
    vanishes.
    """
    cf = as_float_array(cash_flows)
    t = np.arange(cf.size, dtype=float)
    n_changes = sign_changes(cf)

    rate = float(guess)
    best_rate = rate
    best_abs = np.inf
    best_value = float("nan")
    iterations = 0

    for iterations in range(1, max_iter + 1):
        if rate <= -1.0 or not np.isfinite(rate):
            break
        value, slope = _npv_and_derivative(rate, cf, t)
        if abs(value) < best_abs:
            best_rate, best_abs, best_value = rate, abs(value), value
        if slope == 0.0 or not np.isfinite(slope):
            break

        step = value / slope
        while rate - step <= -1.0:
            step /= 2.0
        new_rate = rate - step
        if abs(new_rate - rate) < tol:
            return IRRResult(
                rate=new_rate,
                converged=True,
                iterations=iterations,
                npv_at_rate=_npv_and_derivative(new_rate, cf, t)[0],
                sign_changes=n_changes,
            )
        rate = new_rate

    logger.warning(
        f"IRR did not converge after {iterations} iterations "
        f"({n_changes} sign changes); returning best estimate {best_rate:.6f}"
    )
    return IRRResult(
        rate=best_rate,
        converged=False,
        iterations=iterations,
        npv_at_rate=best_value,
        sign_changes=n_changes,
    )


def mirr(
    investment: float,
    flows: Sequence[float],
    finance_rate: float,
    reinvest_rate: float,
) -> float:
    """
    Modified IRR for an outlay at t = 0 followed by flows at t = 1..n.

    Positive flows are compounded to period n at ``reinvest_rate`` (exponent
    n - t), negative flows are discounted to period 0 at ``finance_rate``
    (exponent t), and MIRR = (FV / PV)^(1/n) - 1.

    Example: 1000 out, then 500 for three years at 10% gives
    FV = 605 + 550 + 500 = 1655 and MIRR = 1.655^(1/3) - 1 = 18.29%.
    """
    cf = as_float_array(flows)
    _check_rate(finance_rate)
    _check_rate(reinvest_rate)

    n = cf.size
    t = np.arange(1, n + 1, dtype=float)

    positive = np.where(cf > 0, cf, 0.0)
    negative = np.where(cf < 0, -cf, 0.0)

    fv = float(np.sum(positive * (1.0 + reinvest_rate) ** (n - t)))
    pv = float(investment) + float(np.sum(negative / (1.0 + finance_rate) ** t))

    if pv <= 0:
        raise InvalidAssumption("MIRR needs a positive present value of outflows.")

    return (fv / pv) ** (1.0 / n) - 1.0
