"""
DCF valuation — CAPM/WACC discount rate, FCF projection, Gordon terminal value.
"""

from .wacc import WACCBreakdown, compute_wacc, cost_of_equity
from .dcf import (
    DCFValuation,
    ValuationAssumptions,
    assumptions_from_input,
    net_debt,
    sensitivity_grid,
    terminal_value,
    value_company,
)

__all__ = [
    "WACCBreakdown",
    "compute_wacc",
    "cost_of_equity",
    "DCFValuation",
    "ValuationAssumptions",
    "assumptions_from_input",
    "net_debt",
    "sensitivity_grid",
    "terminal_value",
    "value_company",
]
