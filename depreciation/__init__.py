"""
Depreciation engine — schedules that turn nominal project flows into after-tax flows.
"""

from .schedules import (
    MACRS_RATES,
    DepreciationMethod,
    depreciation_schedule,
    book_values,
    after_tax_cash_flows,
)

__all__ = [
    "MACRS_RATES",
    "DepreciationMethod",
    "depreciation_schedule",
    "book_values",
    "after_tax_cash_flows",
]
