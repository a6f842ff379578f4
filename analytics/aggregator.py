"""
Aggregate N trial results into decision-ready distribution summaries.

Instead of: "Year-5 net income = 210k" (one number, no context)
The analyst gets: "Net income: mean=210k, P5=120k, P95=300k, P(loss)=2%"

Percentiles use the nearest-rank rule sorted[floor(n·p)], so every reported
level is an actual simulated outcome and the table is monotone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import skew

from core.config import SimulationConfig
from core.utils import as_float_array

from .risk import TailRisk, lower_rank, tail_risk

if TYPE_CHECKING:
    from engine.trials import BaseValues, TrialResults

OUTCOMES = {
    "revenue": "final_revenue",
    "net_income": "final_net_income",
    "profit_margin": "final_profit_margin",
    "npv": "npv",
}


def describe(values: Sequence[float]) -> Dict[str, float]:
    """Mean, median, population std, min, max and skewness."""
    arr = np.sort(as_float_array(values, what="simulated outcomes"))
    # a constant sample has no spread; np.std can leave float residue here
    std = 0.0 if arr[0] == arr[-1] else float(np.std(arr))
    return {
        "mean": float(np.mean(arr)),
        "median": float(arr[arr.size // 2]),
        "std": std,
        "min": float(arr[0]),
        "max": float(arr[-1]),
        # constant samples have no defined skew; report 0
        "skewness": float(skew(arr, bias=True)) if std > 0 else 0.0,
    }


def percentile_table(
    values: Sequence[float],
    levels: Sequence[float] = (5, 10, 25, 50, 75, 90, 95),
) -> pd.Series:
    """Nearest-rank percentiles keyed p5, p10, ..."""
    arr = np.sort(as_float_array(values, what="simulated outcomes"))
    return pd.Series(
        {f"p{int(level) if float(level).is_integer() else level}": lower_rank(arr, level / 100.0)
         for level in levels},
        dtype=float,
    )


def histogram(values: Sequence[float], bins: int = 50) -> pd.DataFrame:
    """
    Equal-width bins between min and max; the max lands in the last bin.
    A constant sample puts every value in the first (zero-width) bin.
    """
    arr = as_float_array(values, what="simulated outcomes")
    lo, hi = float(arr.min()), float(arr.max())
    width = (hi - lo) / bins

    if width > 0:
        idx = np.minimum(np.floor((arr - lo) / width).astype(int), bins - 1)
    else:
        idx = np.zeros(arr.size, dtype=int)
    counts = np.bincount(idx, minlength=bins)

    edges = lo + width * np.arange(bins + 1)
    return pd.DataFrame({
        "bin_start": edges[:-1],
        "bin_end": edges[1:],
        "count": counts,
        "frequency": counts / arr.size * 100.0,
    })


def outcome_probabilities(
    final_net_income: Sequence[float],
    npv: Sequence[float],
    final_revenue: Sequence[float],
    base_revenue: float,
    years: int,
    target_growth_pct: float = 10.0,
) -> Dict[str, float]:
    """Probabilities in percent."""
    net = as_float_array(final_net_income, what="net income outcomes")
    npv_arr = as_float_array(npv, what="NPV outcomes")
    rev = as_float_array(final_revenue, what="revenue outcomes")
    target = float(base_revenue) * (1.0 + target_growth_pct / 100.0) ** years
    return {
        "profit_probability": float(np.mean(net > 0) * 100.0),
        "positive_npv_probability": float(np.mean(npv_arr > 0) * 100.0),
        "target_revenue_probability": float(np.mean(rev > target) * 100.0),
        "target_revenue": target,
    }


@dataclass
class SimulationResult:
    iterations: int
    years: int
    base_values: "BaseValues"
    statistics: Dict[str, Dict[str, float]]
    percentiles: pd.DataFrame  # outcome × p-levels
    histograms: Dict[str, pd.DataFrame]
    probabilities: Dict[str, float]
    risk: TailRisk
    yearly_mean: pd.DataFrame
    trials: Optional["TrialResults"] = None

    def summary_table(self) -> pd.DataFrame:
        """One row per outcome: descriptive statistics then percentiles."""
        stats = pd.DataFrame(self.statistics).T
        return stats.join(self.percentiles).rename_axis("outcome").reset_index()


def aggregate_trials(
    trials: "TrialResults",
    base_values: "BaseValues",
    config: Optional[SimulationConfig] = None,
) -> SimulationResult:
    """
    Reduce per-trial outcomes to the summary a caller reports on.

    Returns
    -------
    SimulationResult with:
      statistics:    describe() per outcome (revenue, net income, margin, NPV)
      percentiles:   nearest-rank table per outcome
      histograms:    revenue / net income / NPV
      probabilities: profit, positive NPV, target revenue
      risk:          VaR95 / VaR99 / expected shortfall of net income
    """
    config = config or SimulationConfig()
    series = {label: getattr(trials, attr) for label, attr in OUTCOMES.items()}
    years = int(len(trials.yearly_mean))

    statistics = {label: describe(values) for label, values in series.items()}
    percentiles = pd.DataFrame({
        label: percentile_table(values, config.percentiles)
        for label, values in series.items()
    }).T
    histograms = {
        label: histogram(series[label], config.histogram_bins)
        for label in ("revenue", "net_income", "npv")
    }
    probabilities = outcome_probabilities(
        trials.final_net_income,
        trials.npv,
        trials.final_revenue,
        base_values.revenue,
        years,
        config.target_revenue_growth_pct,
    )

    return SimulationResult(
        iterations=trials.n_trials,
        years=years,
        base_values=base_values,
        statistics=statistics,
        percentiles=percentiles,
        histograms=histograms,
        probabilities=probabilities,
        risk=tail_risk(trials.final_net_income),
        yearly_mean=trials.yearly_mean,
        trials=trials,
    )
