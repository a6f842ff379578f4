"""
Capital project evaluation.

Pipeline:
  raw nominal flows
    → depreciation schedule (depreciation/)
    → after-tax flows, salvage added to the final year
    → NPV, IRR, MIRR, payback, discounted payback, PI, EAA (tvm/)
    → accept/reject decision with a strength grade

Rates on this boundary are percents (10.0 = 10%).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from core.errors import InvalidAssumption
from core.logger import setup_logger
from core.utils import as_float_array, frac, pct
from depreciation.schedules import (
    DepreciationMethod,
    after_tax_cash_flows,
    depreciation_schedule,
)
from tvm.payback import (
    discount_factors,
    discounted_payback_period,
    equivalent_annual_annuity,
    is_recovered,
    payback_period,
    profitability_index,
)
from tvm.rates import IRRResult, irr, mirr, npv

logger = setup_logger(__name__)

ACCEPT = "ACCEPT"
REJECT = "REJECT"


@dataclass(frozen=True)
class Decision:
    recommendation: str  # ACCEPT / REJECT
    strength: str        # STRONG / MODERATE / WEAK
    npv_positive: bool
    irr_above_hurdle: bool
    pi_above_one: bool
    irr_converged: bool

    @property
    def accept(self) -> bool:
        return self.recommendation == ACCEPT


def classify_decision(
    npv_value: float,
    irr_result: IRRResult,
    investment: float,
    hurdle_rate_pct: float,
    pi: float,
) -> Decision:
    """
    ACCEPT iff NPV > 0 and IRR > hurdle.

    Strength: STRONG when NPV > 20% of the investment and IRR > 1.5x hurdle,
    MODERATE when merely acceptable, WEAK otherwise.
    """
    irr_pct = irr_result.pct
    npv_positive = npv_value > 0
    above_hurdle = irr_pct > hurdle_rate_pct

    if npv_value > 0.2 * investment and irr_pct > 1.5 * hurdle_rate_pct:
        strength = "STRONG"
    elif npv_positive and above_hurdle:
        strength = "MODERATE"
    else:
        strength = "WEAK"

    return Decision(
        recommendation=ACCEPT if (npv_positive and above_hurdle) else REJECT,
        strength=strength,
        npv_positive=npv_positive,
        irr_above_hurdle=above_hurdle,
        pi_above_one=pi > 1.0,
        irr_converged=irr_result.converged,
    )


@dataclass(frozen=True)
class ProjectCandidate:
    """Minimal project record used for ranking and capital rationing."""
    name: str
    initial_investment: float
    npv: float
    irr_pct: float
    profitability_index: float
    payback_years: float


@dataclass(frozen=True)
class ProjectEvaluation:
    name: str
    initial_investment: float
    discount_rate_pct: float
    life_years: int
    salvage_value: float
    tax_rate_pct: float
    depreciation_method: DepreciationMethod

    depreciation: np.ndarray
    after_tax_cash_flows: np.ndarray

    npv: float
    irr: IRRResult
    mirr: float  # decimal
    payback_years: float
    discounted_payback_years: float
    payback_recovered: bool
    discounted_payback_recovered: bool
    profitability_index: float
    equivalent_annual_annuity: float
    decision: Decision

    @property
    def irr_pct(self) -> float:
        return self.irr.pct

    @property
    def mirr_pct(self) -> float:
        return pct(self.mirr)

    def cash_flow_table(self) -> pd.DataFrame:
        """Year-by-year discounting of the after-tax flows, year 0 = outlay."""
        rate = frac(self.discount_rate_pct)
        factors = discount_factors(rate, self.after_tax_cash_flows.size)
        pv = self.after_tax_cash_flows * factors
        return pd.DataFrame({
            "year": np.arange(0, pv.size + 1),
            "cash_flow": np.concatenate([[-self.initial_investment], self.after_tax_cash_flows]),
            "discount_factor": np.concatenate([[1.0], factors]),
            "present_value": np.concatenate([[-self.initial_investment], pv]),
            "cumulative_pv": np.concatenate([[-self.initial_investment], pv]).cumsum(),
        })

    def as_candidate(self) -> ProjectCandidate:
        return ProjectCandidate(
            name=self.name,
            initial_investment=self.initial_investment,
            npv=self.npv,
            irr_pct=self.irr_pct,
            profitability_index=self.profitability_index,
            payback_years=self.payback_years,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Metric / value table."""
        rows = [
            {"Metric": "NPV", "Value": self.npv},
            {"Metric": "IRR (%)", "Value": self.irr_pct},
            {"Metric": "MIRR (%)", "Value": self.mirr_pct},
            {"Metric": "Payback (years)", "Value": self.payback_years},
            {"Metric": "Discounted Payback (years)", "Value": self.discounted_payback_years},
            {"Metric": "Profitability Index", "Value": self.profitability_index},
            {"Metric": "EAA", "Value": self.equivalent_annual_annuity},
        ]
        return pd.DataFrame(rows)


def evaluate_project(
    initial_investment: float,
    cash_flows: Sequence[float],
    discount_rate_pct: float = 10.0,
    *,
    life_years: Optional[int] = None,
    salvage_value: float = 0.0,
    tax_rate_pct: float = 25.0,
    depreciation_method: Union[str, DepreciationMethod] = DepreciationMethod.STRAIGHT_LINE,
    name: str = "Capital Project",
) -> ProjectEvaluation:
    """
    Evaluate a capital project from its nominal pre-tax cash flows.

    Parameters
    ----------
    initial_investment : float
        Outlay at t = 0, positive number; also the depreciable cost.
    cash_flows : sequence of float
        Nominal pre-tax flows for years 1..n.
    discount_rate_pct : float
        Hurdle / discount rate in percent.
    life_years : int, optional
        Depreciation life; defaults to the number of flows.
    salvage_value : float
        Added to the final year's after-tax flow.
    tax_rate_pct : float
        Applied to positive taxable income only.
    depreciation_method : str or DepreciationMethod
        "straight_line", "declining_balance" or "macrs".
    """
    flows = as_float_array(cash_flows)
    investment = float(initial_investment)
    if investment <= 0:
        raise InvalidAssumption("Initial investment must be positive.")

    method = DepreciationMethod.parse(depreciation_method)
    years = int(life_years) if life_years else flows.size
    rate = frac(discount_rate_pct)

    depreciation = depreciation_schedule(investment, salvage_value, years, method)
    after_tax = after_tax_cash_flows(flows, depreciation, frac(tax_rate_pct))
    after_tax[-1] += float(salvage_value)

    series = np.concatenate([[-investment], after_tax])
    npv_value = npv(rate, series)
    irr_result = irr(series)
    mirr_value = mirr(investment, after_tax, rate, rate)

    payback = payback_period(investment, after_tax)
    disc_payback = discounted_payback_period(investment, after_tax, rate)
    pi = profitability_index(investment, after_tax, rate)
    eaa = equivalent_annual_annuity(npv_value, rate, years)

    decision = classify_decision(npv_value, irr_result, investment, discount_rate_pct, pi)

    logger.info(
        f"Evaluated '{name}': NPV={npv_value:,.0f}, IRR={irr_result.pct:.2f}% "
        f"→ {decision.recommendation} ({decision.strength})"
    )

    return ProjectEvaluation(
        name=name,
        initial_investment=investment,
        discount_rate_pct=float(discount_rate_pct),
        life_years=years,
        salvage_value=float(salvage_value),
        tax_rate_pct=float(tax_rate_pct),
        depreciation_method=method,
        depreciation=depreciation,
        after_tax_cash_flows=after_tax,
        npv=npv_value,
        irr=irr_result,
        mirr=mirr_value,
        payback_years=payback,
        discounted_payback_years=disc_payback,
        payback_recovered=is_recovered(payback, after_tax),
        discounted_payback_recovered=is_recovered(disc_payback, after_tax),
        profitability_index=pi,
        equivalent_annual_annuity=eaa,
        decision=decision,
    )


def candidate_from_flows(
    name: str,
    initial_investment: float,
    cash_flows: Sequence[float],
    discount_rate_pct: float = 10.0,
) -> ProjectCandidate:
    """Metrics straight from the supplied flows, no tax or depreciation overlay."""
    flows = as_float_array(cash_flows)
    investment = float(initial_investment)
    rate = frac(discount_rate_pct)
    series = np.concatenate([[-investment], flows])
    return ProjectCandidate(
        name=name,
        initial_investment=investment,
        npv=npv(rate, series),
        irr_pct=irr(series).pct,
        profitability_index=profitability_index(investment, flows, rate),
        payback_years=payback_period(investment, flows),
    )


def _as_candidate(project: Union[ProjectCandidate, ProjectEvaluation, Mapping]) -> ProjectCandidate:
    if isinstance(project, ProjectCandidate):
        return project
    if isinstance(project, ProjectEvaluation):
        return project.as_candidate()
    return candidate_from_flows(
        name=project.get("name", "Project"),
        initial_investment=project["initial_investment"],
        cash_flows=project["cash_flows"],
        discount_rate_pct=project.get("discount_rate_pct", 10.0),
    )
