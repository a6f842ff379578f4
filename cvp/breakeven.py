"""
Cost-volume-profit break-even analysis.

  contribution margin   CM  = price - variable cost
  break-even units          = (fixed costs + target profit) / CM, rounded up
  break-even revenue        = exact units × price (not the rounded units)

Multi-product: the sales mix weights each line's CM and price into a single
composite unit, then the composite break-even is split back by mix.
Margins and ratios are reported in percent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import pandas as pd

from core.errors import InsufficientData, InvalidAssumption


@dataclass(frozen=True)
class BreakEvenPoint:
    units: int
    units_exact: float
    revenue: float
    contribution_margin: float
    contribution_margin_ratio: float  # percent of price
    target_profit: float = 0.0


def _contribution_margin(variable_cost_per_unit: float, selling_price: float) -> float:
    if selling_price <= 0:
        raise InvalidAssumption(f"Selling price must be positive (got {selling_price}).")
    cm = float(selling_price) - float(variable_cost_per_unit)
    if cm <= 0:
        raise InvalidAssumption(
            f"Selling price {selling_price} does not cover variable cost "
            f"{variable_cost_per_unit}; break-even is unreachable."
        )
    return cm


def single_product_break_even(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    target_profit: float = 0.0,
) -> BreakEvenPoint:
    cm = _contribution_margin(variable_cost_per_unit, selling_price)
    exact = (float(fixed_costs) + float(target_profit)) / cm
    return BreakEvenPoint(
        units=math.ceil(exact),
        units_exact=exact,
        revenue=exact * float(selling_price),
        contribution_margin=cm,
        contribution_margin_ratio=cm / float(selling_price) * 100.0,
        target_profit=float(target_profit),
    )


@dataclass(frozen=True)
class Product:
    name: str
    price: float
    variable_cost: float
    sales_mix: Optional[float] = None  # relative weight, any scale

    @classmethod
    def coerce(cls, obj: Any) -> "Product":
        """From a Product, a pydantic ProductLine, or a mapping."""
        if isinstance(obj, cls):
            return obj
        if hasattr(obj, "model_dump"):
            obj = obj.model_dump()
        return cls(
            name=obj.get("name", "Product"),
            price=float(obj["price"]),
            variable_cost=float(obj["variable_cost"]),
            sales_mix=obj.get("sales_mix"),
        )


@dataclass(frozen=True)
class ProductBreakEven:
    name: str
    mix: float  # normalised share, sums to 1 across products
    units: int
    revenue: float


@dataclass(frozen=True)
class MultiProductBreakEven:
    units: int
    units_exact: float
    revenue: float
    weighted_contribution_margin: float
    weighted_price: float
    products: List[ProductBreakEven] = field(default_factory=list)

    @property
    def contribution_margin_ratio(self) -> float:
        return self.weighted_contribution_margin / self.weighted_price * 100.0

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"product": p.name, "mix": p.mix, "units": p.units, "revenue": p.revenue}
            for p in self.products
        ])


def multi_product_break_even(
    products: Sequence[Any],
    fixed_costs: float,
    target_profit: float = 0.0,
) -> MultiProductBreakEven:
    """
    A product without a sales mix gets an equal share (100 / n) before the
    weights are normalised to sum to one.
    """
    lines = [Product.coerce(p) for p in products]
    if not lines:
        raise InsufficientData("Multi-product break-even needs at least one product.")

    raw = [p.sales_mix if p.sales_mix else 100.0 / len(lines) for p in lines]
    negative = [p.name for p, w in zip(lines, raw) if w < 0]
    if negative:
        raise InvalidAssumption(f"Sales mix must be non-negative: {', '.join(negative)}")
    total = sum(raw)
    weights = [w / total for w in raw]

    weighted_cm = sum((p.price - p.variable_cost) * w for p, w in zip(lines, weights))
    weighted_price = sum(p.price * w for p, w in zip(lines, weights))
    if weighted_cm <= 0:
        raise InvalidAssumption(
            f"Weighted contribution margin is {weighted_cm:.2f}; the product mix never breaks even."
        )

    exact = (float(fixed_costs) + float(target_profit)) / weighted_cm
    per_product = [
        ProductBreakEven(
            name=p.name,
            mix=w,
            units=math.ceil(exact * w),
            revenue=exact * w * p.price,
        )
        for p, w in zip(lines, weights)
    ]
    return MultiProductBreakEven(
        units=math.ceil(exact),
        units_exact=exact,
        revenue=exact * weighted_price,
        weighted_contribution_margin=weighted_cm,
        weighted_price=weighted_price,
        products=per_product,
    )


def margin_of_safety(current_units: float, break_even_units: float) -> float:
    """(current - break-even) / current, in percent; 0 with no sales."""
    if current_units <= 0:
        return 0.0
    return (float(current_units) - float(break_even_units)) / float(current_units) * 100.0


def operating_leverage(contribution_margin: float, units: float, fixed_costs: float) -> float:
    """
    Degree of operating leverage, total CM / operating profit.

    NaN at exactly zero profit, where a 1% change in volume moves profit by
    an unbounded percentage.
    """
    total_cm = float(contribution_margin) * float(units)
    profit = total_cm - float(fixed_costs)
    if profit == 0:
        return float("nan")
    return total_cm / profit


@dataclass(frozen=True)
class TargetVolume:
    units: int
    units_exact: float
    revenue: float
    profit: float
    target_margin_pct: Optional[float] = None


def target_profit_volume(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    target_profit: float,
) -> TargetVolume:
    point = single_product_break_even(fixed_costs, variable_cost_per_unit, selling_price, target_profit)
    return TargetVolume(
        units=point.units,
        units_exact=point.units_exact,
        revenue=point.revenue,
        profit=float(target_profit),
    )


def target_margin_volume(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price: float,
    target_margin_pct: float,
) -> TargetVolume:
    """
    Volume at which profit equals target_margin_pct of revenue.

    price × units × m = CM × units - F  →  units = F / (CM - price × m)
    """
    cm = _contribution_margin(variable_cost_per_unit, selling_price)
    m = float(target_margin_pct) / 100.0
    denominator = cm - float(selling_price) * m
    if denominator <= 0:
        raise InvalidAssumption(
            f"A {target_margin_pct:.1f}% margin is unreachable: the contribution margin ratio "
            f"is only {cm / selling_price * 100.0:.1f}%."
        )
    exact = float(fixed_costs) / denominator
    revenue = exact * float(selling_price)
    return TargetVolume(
        units=math.ceil(exact),
        units_exact=exact,
        revenue=revenue,
        profit=revenue * m,
        target_margin_pct=float(target_margin_pct),
    )
