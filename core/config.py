"""
Engine configuration.
Every fallback ratio and simulation knob lives here so callers can override
them per industry without touching the algorithms.
Distribution parameters live in distributions/sampler.py (DistributionParams).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class EstimationDefaults:
    """
    Fallback ratios used when a stored record lacks a direct figure.

    Shares are fractions of the parent line item (0.70 = 70%).
    """

    fixed_cost_share_of_opex: float = 0.70
    cash_share_of_current_assets: float = 0.30
    receivables_share_of_current_assets: float = 0.40
    inventory_share_of_current_assets: float = 0.30
    payables_share_of_current_liabilities: float = 0.50

    # unit price assumed when only revenue totals are on file
    default_unit_price: float = 100.0


@dataclass(frozen=True)
class SimulationConfig:
    iterations: int = 10_000
    projection_years: int = 5
    seed: int = 7

    # flat tax applied to operating income in every simulated year
    tax_rate: float = 0.25

    # output shape
    histogram_bins: int = 50
    percentiles: Tuple[int, ...] = (5, 10, 25, 50, 75, 90, 95)
    target_revenue_growth_pct: float = 10.0

    # trials are split into independently seeded shards and merged afterwards
    shards: int = 1
    max_workers: int = 1

    # guard for bounds far out in the tails
    max_rejection_rounds: int = 10_000


@dataclass(frozen=True)
class WorkingCapitalThresholds:
    """Benchmarks that trigger a working-capital optimisation opportunity."""

    dso_max: float = 45.0
    dso_target: float = 45.0
    dio_max: float = 60.0
    dio_target: float = 60.0
    dpo_min: float = 30.0
    dpo_target: float = 45.0
    days_in_year: int = 365
