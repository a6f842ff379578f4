"""
Request records a calling layer validates payloads with before handing them
to an engine.

Only structural constraints live here (types, lengths, signs that no engine
could accept). Domain checks that depend on several fields at once, such as
price versus variable cost or WACC versus terminal growth, stay with the
engines so they raise the typed errors from core.errors.

``model_dump()`` on each record yields the keyword arguments of the engine
function named in its docstring.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

# Stored record tables (one row per filing)
PROFIT_LOSS_COLUMNS = (
    "revenue",
    "cost_of_goods_sold",
    "operating_expenses",
    "net_income",
)
PROFIT_LOSS_DATE_COLUMN = "created_at"

BALANCE_SHEET_COLUMNS = (
    "current_assets",
    "current_liabilities",
    "total_liabilities",
)
BALANCE_SHEET_DATE_COLUMN = "as_of_date"


class ProjectInput(BaseModel):
    """Arguments for budgeting.evaluate_project."""

    name: str = Field(default="Capital Project", max_length=120)
    initial_investment: float = Field(gt=0)
    cash_flows: List[float] = Field(min_length=1, description="Nominal pre-tax flows for years 1..n")
    discount_rate_pct: float = Field(default=10.0, gt=-100.0)
    life_years: Optional[int] = Field(default=None, gt=0)
    salvage_value: float = Field(default=0.0, ge=0)
    tax_rate_pct: float = Field(default=25.0, ge=0, le=100)
    depreciation_method: Literal["straight_line", "declining_balance", "macrs"] = "straight_line"


class ValuationInput(BaseModel):
    """Arguments for valuation.assumptions_from_input (CAPM/WACC + DCF)."""

    initial_fcf: float
    growth_rates: Union[float, List[float]] = Field(default_factory=lambda: [10.0, 10.0, 8.0, 8.0, 6.0])
    projection_years: Optional[int] = Field(default=None, gt=0)

    risk_free_rate: float = 3.0
    market_risk_premium: float = 5.0
    beta: float = 1.2
    cost_of_debt: float = 5.0
    tax_rate: float = Field(default=25.0, ge=0, le=100)
    equity_weight: float = Field(default=70.0, ge=0, le=100)
    debt_weight: float = Field(default=30.0, ge=0, le=100)

    terminal_growth_rate: float = 2.5
    net_debt: float = 0.0

    @model_validator(mode="after")
    def _validate_growth(self) -> "ValuationInput":
        if isinstance(self.growth_rates, list) and len(self.growth_rates) == 0:
            raise ValueError("growth_rates must hold at least one rate")
        return self


class VariableInput(BaseModel):
    mean: float
    std: float = Field(ge=0)
    min: float
    max: float


class SimulationInput(BaseModel):
    """Arguments for engine.run_simulation (via DistributionParams.from_mapping)."""

    iterations: int = Field(default=10_000, gt=0, le=1_000_000)
    projection_years: int = Field(default=5, gt=0, le=50)
    seed: int = 7

    revenue: float = 1_000_000.0
    costs: float = 650_000.0
    operating_expenses: float = 200_000.0

    revenue_growth: VariableInput = VariableInput(mean=10, std=5, min=-10, max=30)
    cost_ratio: VariableInput = VariableInput(mean=65, std=5, min=50, max=80)
    operating_expense_growth: VariableInput = VariableInput(mean=5, std=3, min=-5, max=15)
    discount_rate: VariableInput = VariableInput(mean=10, std=2, min=6, max=15)


class ProductLine(BaseModel):
    name: str = "Product"
    price: float
    variable_cost: float = Field(ge=0)
    sales_mix: Optional[float] = Field(default=None, ge=0)


class BreakEvenInput(BaseModel):
    """Arguments for cvp.analyze_break_even."""

    fixed_costs: float = Field(ge=0)
    variable_cost_per_unit: float = Field(ge=0)
    selling_price: float
    target_profit: float = 0.0
    current_units: Optional[float] = Field(default=None, ge=0)
    products: Optional[List[ProductLine]] = None


class WorkingCapitalInput(BaseModel):
    """Arguments for working_capital.analyze_working_capital."""

    accounts_receivable: float = Field(ge=0)
    inventory: float = Field(ge=0)
    accounts_payable: float = Field(ge=0)
    revenue: float
    cogs: float
    daily_sales: Optional[float] = Field(default=None, gt=0)
    daily_cogs: Optional[float] = Field(default=None, gt=0)
    daily_purchases: Optional[float] = Field(default=None, gt=0)


class CashForecastInput(BaseModel):
    """Arguments for working_capital.forecast_cash_flow."""

    starting_cash: float = 500_000.0
    monthly_revenue: Union[float, List[float]] = 250_000.0
    monthly_expenses: Union[float, List[float]] = 200_000.0
    collection_pattern: List[float] = Field(default_factory=lambda: [0.2, 0.5, 0.25, 0.05], min_length=1)
    payment_pattern: List[float] = Field(default_factory=lambda: [0.3, 0.5, 0.2], min_length=1)
    months: int = Field(default=12, gt=0, le=240)
