"""
Data preparation — loading stored financial records, validation, and estimating
engine inputs from them.
"""

from .loader import load_records_csv, to_frame
from .validators import ValidationResult, validate_records
from .estimates import (
    base_values_from_records,
    break_even_inputs_from_records,
    latest_record,
    net_debt_from_balance_sheet,
    working_capital_inputs_from_records,
)

__all__ = [
    "load_records_csv",
    "to_frame",
    "ValidationResult",
    "validate_records",
    "base_values_from_records",
    "break_even_inputs_from_records",
    "latest_record",
    "net_debt_from_balance_sheet",
    "working_capital_inputs_from_records",
]
