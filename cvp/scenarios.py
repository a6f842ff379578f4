"""
CVP scenario tools: one-at-a-time break-even sensitivity, what-if analysis
and the revenue / cost / profit profile used for break-even charts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from core.logger import setup_logger

from .breakeven import BreakEvenPoint, single_product_break_even

logger = setup_logger(__name__)

PROFILE_STEPS = 20


def break_even_sensitivity(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    changes_pct: Sequence[float] = (-20, -10, 0, 10, 20),
) -> pd.DataFrame:
    """
    Exact break-even units when price, variable cost or fixed costs move by
    each relative change, the other two held at base.

    A shifted price at or below the variable cost has no break-even; that
    cell holds NaN with ``feasible=False``.
    """
    base = {
        "selling_price": float(selling_price),
        "variable_cost": float(variable_cost_per_unit),
        "fixed_costs": float(fixed_costs),
    }
    rows = []
    for variable in base:
        for change in changes_pct:
            shifted = dict(base)
            shifted[variable] = base[variable] * (1.0 + float(change) / 100.0)
            cm = shifted["selling_price"] - shifted["variable_cost"]
            feasible = cm > 0 and shifted["selling_price"] > 0
            units = shifted["fixed_costs"] / cm if feasible else np.nan
            rows.append({
                "variable": variable,
                "change_pct": float(change),
                "value": shifted[variable],
                "break_even_units": units,
                "break_even_revenue": units * shifted["selling_price"] if feasible else np.nan,
                "feasible": feasible,
            })

    df = pd.DataFrame(rows)
    infeasible = int((~df["feasible"]).sum())
    if infeasible:
        logger.warning(f"Break-even sensitivity: {infeasible} infeasible cells (price <= variable cost)")
    return df


@dataclass(frozen=True)
class WhatIfResult:
    current: BreakEvenPoint
    projected: BreakEvenPoint
    current_inputs: Dict[str, float]
    projected_inputs: Dict[str, float]
    current_units: float
    projected_units: float
    current_profit: float
    projected_profit: float

    @property
    def break_even_change_units(self) -> int:
        return self.projected.units - self.current.units

    @property
    def break_even_change_pct(self) -> float:
        if self.current.units == 0:
            return float("nan")
        return self.break_even_change_units / self.current.units * 100.0

    @property
    def profit_change(self) -> float:
        return self.projected_profit - self.current_profit

    @property
    def profit_change_pct(self) -> float:
        """Relative to |current profit|; NaN when current profit is zero."""
        if self.current_profit == 0:
            return float("nan")
        return self.profit_change / abs(self.current_profit) * 100.0


def what_if_analysis(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    current_units: float,
    price_change_pct: float = 0.0,
    variable_cost_change_pct: float = 0.0,
    fixed_cost_change_pct: float = 0.0,
    volume_change_pct: float = 0.0,
) -> WhatIfResult:
    """Apply all four changes at once and compare against today."""
    new_price = float(selling_price) * (1.0 + price_change_pct / 100.0)
    new_vc = float(variable_cost_per_unit) * (1.0 + variable_cost_change_pct / 100.0)
    new_fc = float(fixed_costs) * (1.0 + fixed_cost_change_pct / 100.0)
    new_units = float(current_units) * (1.0 + volume_change_pct / 100.0)

    current = single_product_break_even(fixed_costs, variable_cost_per_unit, selling_price)
    projected = single_product_break_even(new_fc, new_vc, new_price)

    return WhatIfResult(
        current=current,
        projected=projected,
        current_inputs={
            "fixed_costs": float(fixed_costs),
            "variable_cost_per_unit": float(variable_cost_per_unit),
            "selling_price": float(selling_price),
        },
        projected_inputs={
            "fixed_costs": new_fc,
            "variable_cost_per_unit": new_vc,
            "selling_price": new_price,
        },
        current_units=float(current_units),
        projected_units=new_units,
        current_profit=current.contribution_margin * float(current_units) - float(fixed_costs),
        projected_profit=projected.contribution_margin * new_units - new_fc,
    )


def cost_volume_profile(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    break_even_units: Optional[float] = None,
    steps: int = PROFILE_STEPS,
) -> pd.DataFrame:
    """
    Revenue, cost and profit from zero to twice the break-even volume in
    roughly ``steps`` equal integer steps.
    """
    if break_even_units is None:
        break_even_units = single_product_break_even(
            fixed_costs, variable_cost_per_unit, selling_price
        ).units

    max_units = math.ceil(float(break_even_units) * 2)
    step = max(math.ceil(max_units / steps), 1)
    units = np.arange(0, max_units + 1, step, dtype=float)

    revenue = units * float(selling_price)
    variable = units * float(variable_cost_per_unit)
    total = float(fixed_costs) + variable
    return pd.DataFrame({
        "units": units.astype(int),
        "revenue": revenue,
        "fixed_costs": np.full(units.size, float(fixed_costs)),
        "variable_costs": variable,
        "total_costs": total,
        "profit": revenue - total,
    })
