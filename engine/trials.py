"""
Multi-year operating projection for every Monte Carlo trial.

Per trial and year (drivers in percent):
  revenue  = revenue_prev × (1 + growth)
  costs    = revenue × cost_ratio
  opex     = opex_prev × (1 + opex_growth)
  net      = (revenue - costs - opex) × (1 - tax)
  PV       = net / (1 + discount_rate)^year

All trials advance together as numpy vectors; the loop runs over years only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from core.errors import InsufficientData, InvalidAssumption
from distributions.sampler import VARIABLES, DistributionParams, SampledPaths

YEARLY_COLUMNS = ("revenue", "costs", "operating_expenses", "net_income", "present_value")


@dataclass(frozen=True)
class BaseValues:
    """
    Year-0 operating figures.

    ``costs`` is informational: each simulated year rebuilds costs from the
    sampled cost ratio.
    """
    revenue: float = 1_000_000.0
    costs: float = 650_000.0
    operating_expenses: float = 200_000.0

    def __post_init__(self):
        if self.revenue <= 0:
            raise InvalidAssumption(f"Base revenue must be positive (got {self.revenue}).")
        if self.operating_expenses < 0 or self.costs < 0:
            raise InvalidAssumption("Base costs and operating expenses must be non-negative.")


@dataclass
class TrialResults:
    final_revenue: np.ndarray       # shape (n,)
    final_net_income: np.ndarray    # shape (n,)
    final_profit_margin: np.ndarray # shape (n,), percent
    npv: np.ndarray                 # shape (n,)
    yearly_mean: pd.DataFrame       # year + YEARLY_COLUMNS, mean across trials

    @property
    def n_trials(self) -> int:
        return int(self.npv.size)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            "trial_id": np.arange(self.n_trials),
            "final_revenue": self.final_revenue,
            "final_net_income": self.final_net_income,
            "final_profit_margin": self.final_profit_margin,
            "npv": self.npv,
        })

    @classmethod
    def concat(cls, parts: Sequence["TrialResults"]) -> "TrialResults":
        """Merge shards; yearly means are re-weighted by shard size."""
        parts = [p for p in parts if p.n_trials > 0]
        if not parts:
            raise InsufficientData("No trial results to merge.")
        if len(parts) == 1:
            return parts[0]

        weights = np.array([p.n_trials for p in parts], dtype=float)
        cols = list(YEARLY_COLUMNS)
        stacked = np.stack([p.yearly_mean[cols].to_numpy() for p in parts])
        merged_mean = np.tensordot(weights / weights.sum(), stacked, axes=1)

        yearly = pd.DataFrame(merged_mean, columns=cols)
        yearly.insert(0, "year", parts[0].yearly_mean["year"].to_numpy())

        return cls(
            final_revenue=np.concatenate([p.final_revenue for p in parts]),
            final_net_income=np.concatenate([p.final_net_income for p in parts]),
            final_profit_margin=np.concatenate([p.final_profit_margin for p in parts]),
            npv=np.concatenate([p.npv for p in parts]),
            yearly_mean=yearly,
        )


def run_trials(
    base_values: BaseValues,
    paths: SampledPaths,
    tax_rate: float = 0.25,
) -> TrialResults:
    """Push every sampled path through the projection; tax_rate is a decimal."""
    if not 0.0 <= tax_rate < 1.0:
        raise InvalidAssumption(f"Tax rate must be in [0, 1) (got {tax_rate}).")

    n, years = paths.n_paths, paths.years
    if n == 0 or years == 0:
        raise InsufficientData("Sampled paths are empty.")

    revenue = np.full(n, float(base_values.revenue))
    opex = np.full(n, float(base_values.operating_expenses))
    total_pv = np.zeros(n)
    net = np.zeros(n)

    rows = []
    for y in range(years):
        revenue = revenue * (1.0 + paths.revenue_growth[:, y] / 100.0)
        costs = revenue * (paths.cost_ratio[:, y] / 100.0)
        opex = opex * (1.0 + paths.operating_expense_growth[:, y] / 100.0)
        net = (revenue - costs - opex) * (1.0 - tax_rate)
        pv = net / (1.0 + paths.discount_rate[:, y] / 100.0) ** (y + 1)
        total_pv += pv

        rows.append({
            "year": y + 1,
            "revenue": revenue.mean(),
            "costs": costs.mean(),
            "operating_expenses": opex.mean(),
            "net_income": net.mean(),
            "present_value": pv.mean(),
        })

    return TrialResults(
        final_revenue=revenue,
        final_net_income=net,
        final_profit_margin=net / revenue * 100.0,
        npv=total_pv,
        yearly_mean=pd.DataFrame(rows),
    )


def project_deterministic(
    base_values: Optional[BaseValues] = None,
    params: Optional[DistributionParams] = None,
    years: int = 5,
    tax_rate: float = 0.25,
) -> TrialResults:
    """Single trial with every driver held at its mean."""
    base_values = base_values or BaseValues()
    params = params or DistributionParams()
    paths = SampledPaths(**{
        name: np.full((1, years), getattr(params, name).mean, dtype=float)
        for name in VARIABLES
    })
    return run_trials(base_values, paths, tax_rate)
