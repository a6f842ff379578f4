"""
Monte Carlo Sampler — generates N × years draws of the four simulation drivers.

Input:  Distribution parameters (mean, std, min, max for each variable)
Output: (N × years) arrays of sampled drivers, one row per trial

Each row is one plausible future for the business:
  Trial 1: growth 12%, 9%, 14% ... cost ratio 63%, 66% ...   (steady)
  Trial 2: growth -4%, 2%, 6% ...  cost ratio 72%, 75% ...   (downturn)

Method:
  1. Standard normals via the Box-Muller transform on a seeded numpy generator
  2. Scale to each variable's mean and std (all in percent)
  3. Reject draws outside [min, max] and redraw only those cells,
     so every accepted value follows the truncated normal exactly

Variables are independent of each other and from year to year.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.stats import norm

from core.errors import InvalidDistribution

VARIABLES: Tuple[str, ...] = (
    "revenue_growth",
    "cost_ratio",
    "operating_expense_growth",
    "discount_rate",
)

# below this the rejection loop would spin for a very long time
MIN_ACCEPTANCE = 1e-6


@dataclass(frozen=True)
class VariableDistribution:
    """Normal(mean, std) truncated to [min, max], in percent."""
    mean: float
    std: float
    min: float
    max: float

    def acceptance_probability(self) -> float:
        """Share of raw normal draws that land inside the bounds."""
        if self.std == 0:
            return 1.0 if self.min <= self.mean <= self.max else 0.0
        return float(
            norm.cdf(self.max, loc=self.mean, scale=self.std)
            - norm.cdf(self.min, loc=self.mean, scale=self.std)
        )

    def validate(self, name: str = "variable") -> None:
        values = (self.mean, self.std, self.min, self.max)
        if not all(np.isfinite(v) for v in values):
            raise InvalidDistribution(f"{name}: parameters must be finite, got {values}")
        if self.std < 0:
            raise InvalidDistribution(f"{name}: std must be non-negative (got {self.std})")
        if self.min >= self.max:
            raise InvalidDistribution(f"{name}: min {self.min} must be below max {self.max}")
        if self.acceptance_probability() < MIN_ACCEPTANCE:
            raise InvalidDistribution(
                f"{name}: bounds [{self.min}, {self.max}] are unreachable from "
                f"mean {self.mean} with std {self.std}"
            )


@dataclass(frozen=True)
class DistributionParams:
    """
    Complete set of driver distributions for Monte Carlo.

    Can be built from:
    - the defaults below
    - DistributionParams.from_mapping() on request payloads
    - deterministic() for a no-spread baseline
    """
    revenue_growth: VariableDistribution = VariableDistribution(10.0, 5.0, -10.0, 30.0)
    cost_ratio: VariableDistribution = VariableDistribution(65.0, 5.0, 50.0, 80.0)
    operating_expense_growth: VariableDistribution = VariableDistribution(5.0, 3.0, -5.0, 15.0)
    discount_rate: VariableDistribution = VariableDistribution(10.0, 2.0, 6.0, 15.0)

    def validate(self) -> None:
        for name in VARIABLES:
            getattr(self, name).validate(name)
        if self.discount_rate.min <= -100.0:
            raise InvalidDistribution("discount_rate: min must exceed -100%")

    def deterministic(self) -> "DistributionParams":
        """Same means and bounds with every std set to zero."""
        return DistributionParams(**{
            name: VariableDistribution(d.mean, 0.0, d.min, d.max)
            for name, d in ((n, getattr(self, n)) for n in VARIABLES)
        })

    @classmethod
    def from_mapping(cls, variables: Mapping[str, Any]) -> "DistributionParams":
        """
        Accepts VariableDistribution objects, dicts with mean/std/min/max, or
        pydantic models exposing model_dump(). Missing variables keep defaults.
        """
        unknown = set(variables) - set(VARIABLES)
        if unknown:
            raise InvalidDistribution(f"Unknown simulation variables: {sorted(unknown)}")

        kwargs = {}
        for name, entry in variables.items():
            if isinstance(entry, VariableDistribution):
                kwargs[name] = entry
                continue
            if hasattr(entry, "model_dump"):
                entry = entry.model_dump()
            try:
                kwargs[name] = VariableDistribution(
                    mean=float(entry["mean"]),
                    std=float(entry["std"]),
                    min=float(entry["min"]),
                    max=float(entry["max"]),
                )
            except KeyError as exc:
                raise InvalidDistribution(f"{name}: missing parameter {exc}") from None
        return cls(**kwargs)

    def summary(self) -> pd.DataFrame:
        """Return a summary table of all distribution parameters."""
        rows = []
        for f in fields(self):
            d = getattr(self, f.name)
            rows.append({
                "Variable": f.name,
                "Mean": d.mean,
                "StdDev": d.std,
                "Min": d.min,
                "Max": d.max,
                "Acceptance": d.acceptance_probability(),
            })
        return pd.DataFrame(rows)


@dataclass
class SampledPaths:
    """
    Output of Monte Carlo sampling: N trials × years of each driver, in percent.

    This is the table that feeds into the engine runner.
    """
    revenue_growth: np.ndarray            # shape (n_paths, years)
    cost_ratio: np.ndarray                # shape (n_paths, years)
    operating_expense_growth: np.ndarray  # shape (n_paths, years)
    discount_rate: np.ndarray             # shape (n_paths, years)

    @property
    def n_paths(self) -> int:
        return self.revenue_growth.shape[0]

    @property
    def years(self) -> int:
        return self.revenue_growth.shape[1]

    def to_dataframe(self) -> pd.DataFrame:
        """Long format: one row per (path, year)."""
        path_id, year = np.meshgrid(np.arange(self.n_paths), np.arange(1, self.years + 1), indexing="ij")
        return pd.DataFrame({
            "path_id": path_id.ravel(),
            "year": year.ravel(),
            **{name: getattr(self, name).ravel() for name in VARIABLES},
        })

    def get_path(self, path_idx: int) -> dict:
        """Return drivers for a single trial as a dict of per-year lists."""
        return {name: getattr(self, name)[path_idx].tolist() for name in VARIABLES}

    def summary(self) -> pd.DataFrame:
        """Percentile summary of sampled drivers across all trials and years."""
        pcts = [0.01, 0.05, 0.25, 0.50, 0.75, 0.95, 0.99]
        rows = []
        for name in VARIABLES:
            arr = getattr(self, name)
            row = {"Variable": name, "Mean": np.mean(arr), "Std": np.std(arr)}
            for p in pcts:
                row[f"P{int(p*100):02d}"] = np.percentile(arr, p * 100)
            rows.append(row)
        return pd.DataFrame(rows)


def box_muller(rng: np.random.Generator, size: int) -> np.ndarray:
    """Standard normal draws from pairs of uniforms."""
    u1 = 1.0 - rng.random(size)  # (0, 1], keeps log finite
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


class MonteCarloSampler:
    """
    Generates N independent driver paths from distribution parameters.

    Usage:
        params = DistributionParams()
        sampler = MonteCarloSampler(params, iterations=10_000, projection_years=5, seed=7)
        paths = sampler.sample()
        # paths.revenue_growth → (10000, 5) array of growth rates in percent
    """

    def __init__(
        self,
        params: Optional[DistributionParams] = None,
        iterations: int = 10_000,
        projection_years: int = 5,
        seed: Union[int, np.random.SeedSequence, None] = 7,
        max_rejection_rounds: int = 10_000,
    ):
        if iterations <= 0 or projection_years <= 0:
            raise InvalidDistribution("iterations and projection_years must be positive")
        self.params = params or DistributionParams()
        self.params.validate()
        self.iterations = iterations
        self.projection_years = projection_years
        self.max_rejection_rounds = max_rejection_rounds
        self.rng = np.random.default_rng(seed)

    def _bounded(self, dist: VariableDistribution, name: str) -> np.ndarray:
        shape = (self.iterations, self.projection_years)
        if dist.std == 0:
            return np.full(shape, dist.mean, dtype=float)

        out = np.empty(self.iterations * self.projection_years, dtype=float)
        pending = np.arange(out.size)
        for _ in range(self.max_rejection_rounds):
            draws = dist.mean + dist.std * box_muller(self.rng, pending.size)
            inside = (draws >= dist.min) & (draws <= dist.max)
            out[pending[inside]] = draws[inside]
            pending = pending[~inside]
            if pending.size == 0:
                return out.reshape(shape)

        raise InvalidDistribution(
            f"{name}: {pending.size} draws still outside [{dist.min}, {dist.max}] "
            f"after {self.max_rejection_rounds} rejection rounds"
        )

    def sample(self) -> SampledPaths:
        """Draw every variable for every trial and year."""
        return SampledPaths(**{
            name: self._bounded(getattr(self.params, name), name)
            for name in VARIABLES
        })
