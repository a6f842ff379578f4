"""
Working-capital engine — cash conversion cycle, optimisation, benchmarks and
the receivable/payable cash forecaster.
"""

from .cycle import (
    INVENTORY_ACTIONS,
    PAYABLES_ACTIONS,
    RECEIVABLES_ACTIONS,
    Opportunity,
    Scenario,
    WorkingCapitalAnalysis,
    analyze_working_capital,
    find_opportunities,
)
from .benchmarks import INDUSTRY_BENCHMARKS, available_industries, get_industry_benchmarks
from .forecaster import CashForecast, forecast_cash_flow

__all__ = [
    "INVENTORY_ACTIONS",
    "PAYABLES_ACTIONS",
    "RECEIVABLES_ACTIONS",
    "Opportunity",
    "Scenario",
    "WorkingCapitalAnalysis",
    "analyze_working_capital",
    "find_opportunities",
    "INDUSTRY_BENCHMARKS",
    "available_industries",
    "get_industry_benchmarks",
    "CashForecast",
    "forecast_cash_flow",
]
