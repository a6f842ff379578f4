"""
Recovery and efficiency measures for an outlay followed by flows at t = 1..n.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.errors import InvalidAssumption
from core.utils import as_float_array


def discount_factors(rate: float, periods: int) -> np.ndarray:
    """1/(1+rate)^t for t = 1..periods."""
    if rate <= -1.0:
        raise InvalidAssumption(f"Discount rate must exceed -100% (got {rate:.4f}).")
    t = np.arange(1, periods + 1, dtype=float)
    return 1.0 / (1.0 + rate) ** t


def present_values(rate: float, flows: Sequence[float]) -> np.ndarray:
    cf = as_float_array(flows)
    return cf * discount_factors(rate, cf.size)


def _recovery_period(investment: float, flows: np.ndarray) -> float:
    if investment <= 0:
        return 0.0
    cumulative = 0.0
    for i, cf in enumerate(flows):
        cumulative += cf
        if cumulative >= investment:
            # linear interpolation inside year i+1
            excess = cumulative - investment
            return (i + 1) - excess / cf
    return float(flows.size + 1)


def payback_period(investment: float, flows: Sequence[float]) -> float:
    """
    Years until cumulative flows reach the investment.

    Returns ``len(flows) + 1`` when the investment is never recovered; use
    is_recovered() rather than comparing the number directly.
    """
    return _recovery_period(float(investment), as_float_array(flows))


def discounted_payback_period(investment: float, flows: Sequence[float], rate: float) -> float:
    """payback_period() on flows discounted at ``rate``; same sentinel."""
    return _recovery_period(float(investment), present_values(rate, flows))


def is_recovered(period: float, flows: Sequence[float]) -> bool:
    return period <= len(flows)


def profitability_index(investment: float, flows: Sequence[float], rate: float) -> float:
    """Σ PV(flows) / investment."""
    if investment <= 0:
        raise InvalidAssumption("Profitability index needs a positive investment.")
    return float(np.sum(present_values(rate, flows))) / float(investment)


def equivalent_annual_annuity(npv_value: float, rate: float, years: int) -> float:
    """Level annual amount with the same NPV over ``years``."""
    if years <= 0:
        raise InvalidAssumption("EAA needs at least one year.")
    if abs(rate) < 1e-12:
        return float(npv_value) / years
    growth = (1.0 + rate) ** years
    return float(npv_value) * (rate * growth) / (growth - 1.0)
