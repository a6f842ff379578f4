"""
Depreciation schedules and the after-tax cash flows they feed.

Three methods:
  - Straight-line:       (cost - salvage) / years, every year
  - Declining balance:   double-declining, rate = 2 / years, never below salvage
  - MACRS:               fixed 5-year percentage table applied to original cost
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Union

import numpy as np

from core.errors import InvalidAssumption
from core.utils import as_float_array

# 5-year MACRS half-year convention; the last rate is reused past the table
MACRS_RATES = (0.20, 0.32, 0.192, 0.1152, 0.1152, 0.0576)


class DepreciationMethod(str, Enum):
    STRAIGHT_LINE = "straight_line"
    DECLINING_BALANCE = "declining_balance"
    MACRS = "macrs"

    @classmethod
    def parse(cls, value: Union[str, "DepreciationMethod"]) -> "DepreciationMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidAssumption(
                f"Unknown depreciation method '{value}'. "
                f"Available: {[m.value for m in cls]}"
            ) from None


def _straight_line(cost: float, salvage: float, years: int) -> np.ndarray:
    depreciable = cost - salvage
    schedule = np.full(years, depreciable / years, dtype=float)
    # final year absorbs float residue so the total is exactly cost - salvage
    schedule[-1] = depreciable - schedule[:-1].sum()
    return schedule


def _declining_balance(cost: float, salvage: float, years: int) -> np.ndarray:
    rate = 2.0 / years
    book = cost
    schedule = np.zeros(years, dtype=float)
    for i in range(years):
        charge = min(book * rate, book - salvage)
        schedule[i] = charge
        book -= charge
    return schedule


def _macrs(cost: float, years: int) -> np.ndarray:
    idx = np.minimum(np.arange(years), len(MACRS_RATES) - 1)
    return cost * np.asarray(MACRS_RATES)[idx]


def depreciation_schedule(
    cost: float,
    salvage: float,
    years: int,
    method: Union[str, DepreciationMethod] = DepreciationMethod.STRAIGHT_LINE,
) -> np.ndarray:
    """Per-year depreciation charges, year 1 first."""
    method = DepreciationMethod.parse(method)
    cost = float(cost)
    salvage = float(salvage)

    if years <= 0:
        raise InvalidAssumption("Depreciation needs a life of at least one year.")
    if cost < 0 or salvage < 0:
        raise InvalidAssumption("Cost and salvage value must be non-negative.")
    if salvage > cost:
        raise InvalidAssumption(f"Salvage value {salvage:,.2f} exceeds cost {cost:,.2f}.")

    if method is DepreciationMethod.DECLINING_BALANCE:
        return _declining_balance(cost, salvage, int(years))
    if method is DepreciationMethod.MACRS:
        return _macrs(cost, int(years))
    return _straight_line(cost, salvage, int(years))


def book_values(cost: float, schedule: Sequence[float]) -> np.ndarray:
    """End-of-year book value after each charge."""
    return float(cost) - np.cumsum(np.asarray(schedule, dtype=float))


def after_tax_cash_flows(
    cash_flows: Sequence[float],
    depreciation: Sequence[float],
    tax_rate: float,
) -> np.ndarray:
    """
    cf - max(0, cf - depreciation) * tax_rate, per year.

    Years past the end of the schedule carry no depreciation. Losses are not
    carried forward.
    """
    cf = as_float_array(cash_flows)
    dep = np.zeros_like(cf)
    sched = np.asarray(depreciation, dtype=float)[: cf.size]
    dep[: sched.size] = sched

    taxable = cf - dep
    taxes = np.maximum(taxable, 0.0) * float(tax_rate)
    return cf - taxes
