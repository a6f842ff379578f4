"""
Time-value-of-money primitives shared by the budgeting and valuation engines.
"""

from .rates import npv, irr, mirr, IRRResult
from .payback import (
    payback_period,
    discounted_payback_period,
    is_recovered,
    profitability_index,
    equivalent_annual_annuity,
    discount_factors,
    present_values,
)

__all__ = [
    "npv",
    "irr",
    "mirr",
    "IRRResult",
    "payback_period",
    "discounted_payback_period",
    "is_recovered",
    "profitability_index",
    "equivalent_annual_annuity",
    "discount_factors",
    "present_values",
]
