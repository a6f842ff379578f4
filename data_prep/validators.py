"""
Data quality validation for stored financial records before they feed an engine.

Catches problems early:
- Missing critical fields
- Empty tables
- Negative amounts where only non-negative ones make sense
- Dates that don't parse
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

import pandas as pd

from core.schema import (
    BALANCE_SHEET_COLUMNS,
    BALANCE_SHEET_DATE_COLUMN,
    PROFIT_LOSS_COLUMNS,
    PROFIT_LOSS_DATE_COLUMN,
)

RecordKind = Literal["profit_loss", "balance_sheet"]

_LAYOUT = {
    "profit_loss": (PROFIT_LOSS_COLUMNS, PROFIT_LOSS_DATE_COLUMN),
    "balance_sheet": (BALANCE_SHEET_COLUMNS, BALANCE_SHEET_DATE_COLUMN),
}

# net income can legitimately be negative
_SIGNED_COLUMNS = {"net_income"}


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a record table."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_records(df: pd.DataFrame, kind: RecordKind) -> ValidationResult:
    """
    Run all validation checks on a profit/loss or balance-sheet table.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    if kind not in _LAYOUT:
        raise ValueError(f"Unknown record kind '{kind}'. Available: {sorted(_LAYOUT)}")
    columns, date_col = _LAYOUT[kind]
    result = ValidationResult()

    # --- Schema checks ---
    missing = [c for c in columns if c not in df.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result  # can't continue without columns

    if len(df) == 0:
        result.errors.append("Record table is empty (0 rows).")
        return result

    # --- Amounts ---
    for col in columns:
        vals = pd.to_numeric(df[col], errors="coerce")
        n_null = int(vals.isna().sum())
        if n_null > 0:
            result.warnings.append(f"{n_null} rows have null/unparseable {col}.")
        if col in _SIGNED_COLUMNS:
            continue
        n_neg = int((vals < 0).sum())
        if n_neg > 0:
            result.errors.append(f"{n_neg} rows have negative {col}.")

    # --- Dates ---
    if date_col in df.columns:
        dts = pd.to_datetime(df[date_col], errors="coerce")
        n_null = int(dts.isna().sum())
        if n_null > 0:
            result.warnings.append(f"{n_null} rows have null/unparseable {date_col}.")
    else:
        result.warnings.append(f"No {date_col} column; the last row is treated as the latest.")

    # --- Plausibility ---
    if kind == "profit_loss":
        rev = pd.to_numeric(df["revenue"], errors="coerce")
        cogs = pd.to_numeric(df["cost_of_goods_sold"], errors="coerce")
        n_over = int((cogs > rev).sum())
        if n_over > 0:
            result.warnings.append(f"{n_over} rows have COGS above revenue.")

    return result
