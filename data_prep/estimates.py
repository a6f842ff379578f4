"""
Engine inputs estimated from stored profit/loss and balance-sheet records.

When a filing lacks a direct figure (fixed costs, receivables, cash ...), it is
estimated as a share of a parent line item using EstimationDefaults, e.g.
fixed costs = 70% of operating expenses. Pass a custom EstimationDefaults to
tune the shares per industry.

A zero or missing amount counts as "not on file".
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from core.config import EstimationDefaults
from core.errors import InsufficientData, InvalidAssumption
from core.logger import setup_logger
from core.schema import (
    BALANCE_SHEET_COLUMNS,
    BALANCE_SHEET_DATE_COLUMN,
    PROFIT_LOSS_DATE_COLUMN,
    BreakEvenInput,
    WorkingCapitalInput,
)
from core.utils import require_columns
from engine.trials import BaseValues
from valuation.dcf import net_debt

from .loader import RecordSource, to_frame

logger = setup_logger(__name__)


def latest_record(records: RecordSource, order_by: str) -> pd.Series:
    """
    Most recent row by ``order_by``; without that column, the last row.
    """
    df = to_frame(records)
    if df.empty:
        raise InsufficientData("No records on file.")
    if order_by not in df.columns:
        return df.iloc[-1]
    dates = pd.to_datetime(df[order_by], errors="coerce")
    if dates.isna().all():
        return df.iloc[-1]
    return df.loc[dates.idxmax()]


def _amount(row: pd.Series, col: str, fallback: Optional[float] = None) -> float:
    raw = row.get(col)
    value = pd.to_numeric(raw, errors="coerce") if raw is not None else float("nan")
    if pd.isna(value) or value == 0:
        if fallback is None:
            raise InsufficientData(f"Record has no usable '{col}'.")
        return float(fallback)
    return float(value)


def break_even_inputs_from_records(
    profit_loss: RecordSource,
    defaults: EstimationDefaults = EstimationDefaults(),
    selling_price: Optional[float] = None,
    fixed_costs: Optional[float] = None,
    variable_cost_per_unit: Optional[float] = None,
    target_profit: float = 0.0,
) -> BreakEvenInput:
    """
    Cost structure from the latest P&L.

    units ≈ revenue / price (price defaults to defaults.default_unit_price),
    variable cost = COGS / units, fixed costs = opex × fixed_cost_share_of_opex.
    The estimated units double as the current volume.
    """
    row = latest_record(profit_loss, PROFIT_LOSS_DATE_COLUMN)
    revenue = _amount(row, "revenue")
    price = float(selling_price) if selling_price else defaults.default_unit_price
    if price <= 0:
        raise InvalidAssumption(f"Selling price must be positive (got {price}).")
    units = revenue / price

    if fixed_costs is None:
        fixed_costs = _amount(row, "operating_expenses") * defaults.fixed_cost_share_of_opex
    if variable_cost_per_unit is None:
        variable_cost_per_unit = _amount(row, "cost_of_goods_sold") / units

    logger.debug(
        f"Estimated cost structure: F={fixed_costs:,.0f}, v={variable_cost_per_unit:.2f}, "
        f"p={price:.2f} over {units:,.0f} units"
    )
    return BreakEvenInput(
        fixed_costs=fixed_costs,
        variable_cost_per_unit=variable_cost_per_unit,
        selling_price=price,
        target_profit=target_profit,
        current_units=units,
    )


def working_capital_inputs_from_records(
    balance_sheet: RecordSource,
    profit_loss: RecordSource,
    defaults: EstimationDefaults = EstimationDefaults(),
) -> WorkingCapitalInput:
    """
    Receivables / inventory as shares of current assets, payables as a share
    of current liabilities; revenue and COGS from the latest P&L.
    """
    bs = latest_record(balance_sheet, BALANCE_SHEET_DATE_COLUMN)
    pl = latest_record(profit_loss, PROFIT_LOSS_DATE_COLUMN)

    current_assets = _amount(bs, "current_assets")
    current_liabilities = _amount(bs, "current_liabilities")

    return WorkingCapitalInput(
        accounts_receivable=current_assets * defaults.receivables_share_of_current_assets,
        inventory=current_assets * defaults.inventory_share_of_current_assets,
        accounts_payable=current_liabilities * defaults.payables_share_of_current_liabilities,
        revenue=_amount(pl, "revenue"),
        cogs=_amount(pl, "cost_of_goods_sold"),
    )


def net_debt_from_balance_sheet(
    balance_sheet: RecordSource,
    defaults: EstimationDefaults = EstimationDefaults(),
) -> float:
    """Total liabilities less estimated cash (a share of current assets)."""
    df = to_frame(balance_sheet)
    require_columns(df, BALANCE_SHEET_COLUMNS)
    bs = latest_record(df, BALANCE_SHEET_DATE_COLUMN)
    liabilities = _amount(bs, "total_liabilities", fallback=0.0)
    cash = _amount(bs, "current_assets", fallback=0.0) * defaults.cash_share_of_current_assets
    return net_debt(liabilities, cash)


def base_values_from_records(profit_loss: RecordSource) -> BaseValues:
    """Simulation base year from the latest P&L; gaps fall back to BaseValues defaults."""
    row = latest_record(profit_loss, PROFIT_LOSS_DATE_COLUMN)
    fallback = BaseValues()
    return BaseValues(
        revenue=_amount(row, "revenue", fallback.revenue),
        costs=_amount(row, "cost_of_goods_sold", fallback.costs),
        operating_expenses=_amount(row, "operating_expenses", fallback.operating_expenses),
    )
