"""
Cash conversion cycle and working-capital optimisation.

  DSO = receivables / daily sales
  DIO = inventory   / daily COGS
  DPO = payables    / daily purchases   (purchases default to COGS)
  CCC = DIO + DSO - DPO

Each metric outside its threshold becomes an optimisation opportunity worth
(current days - target days) × the daily base it is measured against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.config import WorkingCapitalThresholds
from core.errors import InvalidAssumption
from core.logger import setup_logger

logger = setup_logger(__name__)

RECEIVABLES_ACTIONS: Tuple[str, ...] = (
    "Implement early payment discounts",
    "Tighten credit policies",
    "Improve collection processes",
    "Use invoice factoring",
)
INVENTORY_ACTIONS: Tuple[str, ...] = (
    "Implement just-in-time inventory",
    "Improve demand forecasting",
    "Reduce slow-moving inventory",
    "Negotiate consignment arrangements",
)
PAYABLES_ACTIONS: Tuple[str, ...] = (
    "Negotiate extended payment terms",
    "Use payment timing strategies",
    "Implement vendor financing",
    "Optimize payment scheduling",
)

# days taken off the cycle and cash multiplier per scenario
SCENARIO_SHIFTS = {
    "optimized": (20.0, 1.0),
    "aggressive": (35.0, 1.5),
}


@dataclass(frozen=True)
class Opportunity:
    area: str
    current_days: float
    target_days: float
    cash_impact: float  # released (AR, inventory) or retained (AP)
    actions: Tuple[str, ...]


@dataclass(frozen=True)
class Scenario:
    name: str
    ccc: float
    working_capital: float
    cash_released: float


@dataclass
class WorkingCapitalAnalysis:
    dso: float
    dio: float
    dpo: float
    ccc: float
    working_capital: float
    working_capital_turnover: float
    current_ratio: float
    quick_ratio: float
    daily_sales: float
    daily_cogs: float
    daily_purchases: float
    cash_tied_up: float
    opportunities: List[Opportunity] = field(default_factory=list)
    scenarios: Dict[str, Scenario] = field(default_factory=dict)

    @property
    def total_potential(self) -> float:
        return float(sum(o.cash_impact for o in self.opportunities))

    def opportunities_frame(self) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "area": o.area,
                "current_days": o.current_days,
                "target_days": o.target_days,
                "cash_impact": o.cash_impact,
                "actions": "; ".join(o.actions),
            }
            for o in self.opportunities
        ])

    def scenarios_frame(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"scenario": s.name, "ccc": s.ccc, "working_capital": s.working_capital, "cash_released": s.cash_released}
            for s in self.scenarios.values()
        ])


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else float("nan")


def find_opportunities(
    dso: float,
    dio: float,
    dpo: float,
    daily_sales: float,
    daily_cogs: float,
    daily_purchases: float,
    thresholds: WorkingCapitalThresholds = WorkingCapitalThresholds(),
) -> List[Opportunity]:
    t = thresholds
    found = []
    if dso > t.dso_max:
        found.append(Opportunity(
            area="Accounts Receivable",
            current_days=dso,
            target_days=t.dso_target,
            cash_impact=(dso - t.dso_target) * daily_sales,
            actions=RECEIVABLES_ACTIONS,
        ))
    if dio > t.dio_max:
        found.append(Opportunity(
            area="Inventory",
            current_days=dio,
            target_days=t.dio_target,
            cash_impact=(dio - t.dio_target) * daily_cogs,
            actions=INVENTORY_ACTIONS,
        ))
    if dpo < t.dpo_min:
        found.append(Opportunity(
            area="Accounts Payable",
            current_days=dpo,
            target_days=t.dpo_target,
            cash_impact=(t.dpo_target - dpo) * daily_purchases,
            actions=PAYABLES_ACTIONS,
        ))
    return found


def analyze_working_capital(
    accounts_receivable: float,
    inventory: float,
    accounts_payable: float,
    revenue: float,
    cogs: float,
    daily_sales: Optional[float] = None,
    daily_cogs: Optional[float] = None,
    daily_purchases: Optional[float] = None,
    thresholds: WorkingCapitalThresholds = WorkingCapitalThresholds(),
) -> WorkingCapitalAnalysis:
    """
    Cycle metrics, liquidity ratios, opportunities and scenarios.

    Ratios over zero payables (or zero working capital for turnover) are NaN.
    """
    if revenue <= 0 or cogs <= 0:
        raise InvalidAssumption(
            f"Revenue and COGS must be positive (got revenue={revenue}, cogs={cogs})."
        )
    if min(accounts_receivable, inventory, accounts_payable) < 0:
        raise InvalidAssumption("Receivables, inventory and payables must be non-negative.")

    days = thresholds.days_in_year
    sales_per_day = daily_sales or revenue / days
    cogs_per_day = daily_cogs or cogs / days
    purchases_per_day = daily_purchases or cogs / days

    dso = accounts_receivable / sales_per_day
    dio = inventory / cogs_per_day
    dpo = accounts_payable / purchases_per_day
    ccc = dio + dso - dpo

    working_capital = accounts_receivable + inventory - accounts_payable
    cash_tied_up = cogs_per_day * ccc if ccc > 0 else 0.0

    opportunities = find_opportunities(
        dso, dio, dpo, sales_per_day, cogs_per_day, purchases_per_day, thresholds
    )
    potential = float(sum(o.cash_impact for o in opportunities))

    scenarios = {"current": Scenario("current", ccc, working_capital, 0.0)}
    for name, (days_off, multiplier) in SCENARIO_SHIFTS.items():
        released = potential * multiplier
        scenarios[name] = Scenario(
            name=name,
            ccc=max(0.0, ccc - days_off),
            working_capital=working_capital - released,
            cash_released=released,
        )

    logger.info(
        f"Working capital: DSO={dso:.1f}, DIO={dio:.1f}, DPO={dpo:.1f}, CCC={ccc:.1f} days; "
        f"{len(opportunities)} opportunities worth {potential:,.0f}"
    )

    return WorkingCapitalAnalysis(
        dso=dso,
        dio=dio,
        dpo=dpo,
        ccc=ccc,
        working_capital=working_capital,
        working_capital_turnover=_ratio(revenue, working_capital),
        current_ratio=_ratio(accounts_receivable + inventory, accounts_payable),
        quick_ratio=_ratio(accounts_receivable, accounts_payable),
        daily_sales=sales_per_day,
        daily_cogs=cogs_per_day,
        daily_purchases=purchases_per_day,
        cash_tied_up=cash_tied_up,
        opportunities=opportunities,
        scenarios=scenarios,
    )
