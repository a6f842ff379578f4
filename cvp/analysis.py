"""
Full CVP report: break-even, target volume, current performance,
sensitivity sweeps and the cost-volume-profit profile in one call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import pandas as pd

from core.errors import InvalidAssumption
from core.logger import setup_logger

from .breakeven import (
    BreakEvenPoint,
    MultiProductBreakEven,
    TargetVolume,
    margin_of_safety,
    multi_product_break_even,
    operating_leverage,
    single_product_break_even,
    target_profit_volume,
)
from .scenarios import break_even_sensitivity, cost_volume_profile

logger = setup_logger(__name__)

# current volume assumed when the caller has none on file
DEFAULT_CURRENT_UNITS = 5_000


@dataclass(frozen=True)
class CVPAnalysis:
    fixed_costs: float
    variable_cost_per_unit: float
    selling_price: float
    break_even: BreakEvenPoint
    multi_product: Optional[MultiProductBreakEven]
    target: Optional[TargetVolume]

    current_units: float
    current_revenue: float
    current_profit: float
    units_above_break_even: float
    margin_of_safety_pct: float
    operating_leverage: float

    sensitivity: pd.DataFrame
    profile: pd.DataFrame


def analyze_break_even(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    target_profit: float = 0.0,
    current_units: Optional[float] = None,
    products: Optional[Sequence[Any]] = None,
) -> CVPAnalysis:
    """
    Break-even, current-performance metrics, sensitivity and the CVP profile.

    The single-product figures drive sensitivity and the profile even when
    ``products`` is given; the multi-product split is reported alongside and
    its composite break-even is the reference for margin of safety.
    ``current_units`` defaults to DEFAULT_CURRENT_UNITS.
    """
    if fixed_costs < 0:
        raise InvalidAssumption("Fixed costs must be non-negative.")

    point = single_product_break_even(fixed_costs, variable_cost_per_unit, selling_price)
    multi = multi_product_break_even(products, fixed_costs) if products else None
    reference_units = multi.units if multi else point.units

    target = None
    if target_profit > 0:
        target = target_profit_volume(fixed_costs, variable_cost_per_unit, selling_price, target_profit)

    units = DEFAULT_CURRENT_UNITS if current_units is None else float(current_units)
    cm = point.contribution_margin
    profit = cm * units - float(fixed_costs)

    logger.info(
        f"Break-even at {reference_units:,} units; current {units:,.0f} units "
        f"→ profit {profit:,.0f}"
    )

    return CVPAnalysis(
        fixed_costs=float(fixed_costs),
        variable_cost_per_unit=float(variable_cost_per_unit),
        selling_price=float(selling_price),
        break_even=point,
        multi_product=multi,
        target=target,
        current_units=units,
        current_revenue=units * float(selling_price),
        current_profit=profit,
        units_above_break_even=units - reference_units,
        margin_of_safety_pct=margin_of_safety(units, reference_units),
        operating_leverage=operating_leverage(cm, units, fixed_costs),
        sensitivity=break_even_sensitivity(fixed_costs, variable_cost_per_unit, selling_price),
        profile=cost_volume_profile(fixed_costs, variable_cost_per_unit, selling_price, reference_units),
    )
