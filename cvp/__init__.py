"""
Break-even / cost-volume-profit engine.
"""

from .breakeven import (
    BreakEvenPoint,
    MultiProductBreakEven,
    Product,
    ProductBreakEven,
    TargetVolume,
    margin_of_safety,
    multi_product_break_even,
    operating_leverage,
    single_product_break_even,
    target_margin_volume,
    target_profit_volume,
)
from .scenarios import WhatIfResult, break_even_sensitivity, cost_volume_profile, what_if_analysis
from .analysis import DEFAULT_CURRENT_UNITS, CVPAnalysis, analyze_break_even

__all__ = [
    "BreakEvenPoint",
    "MultiProductBreakEven",
    "Product",
    "ProductBreakEven",
    "TargetVolume",
    "margin_of_safety",
    "multi_product_break_even",
    "operating_leverage",
    "single_product_break_even",
    "target_margin_volume",
    "target_profit_volume",
    "WhatIfResult",
    "break_even_sensitivity",
    "cost_volume_profile",
    "what_if_analysis",
    "DEFAULT_CURRENT_UNITS",
    "CVPAnalysis",
    "analyze_break_even",
]
