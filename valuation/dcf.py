"""
Discounted cash flow valuation.

  initial FCF
    → grown year by year along the growth path
    → discounted at WACC
    → Gordon terminal value on the final year, discounted from year n
    → enterprise value = Σ PV + PV(terminal)
    → equity value = enterprise value - net debt

Growth, WACC and terminal growth are percents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from core.errors import InsufficientData, InvalidAssumption
from core.logger import setup_logger
from core.schema import ValuationInput

from .wacc import compute_wacc

logger = setup_logger(__name__)

WACC_DELTAS = (-2.0, -1.0, 0.0, 1.0, 2.0)
GROWTH_DELTAS = (-1.0, -0.5, 0.0, 0.5, 1.0)
DEFAULT_PROJECTION_YEARS = 5


@dataclass(frozen=True)
class ValuationAssumptions:
    initial_fcf: float
    growth_rates: Union[float, Tuple[float, ...]]
    wacc: float
    terminal_growth_rate: float = 2.5
    net_debt: float = 0.0
    projection_years: Optional[int] = None

    def __post_init__(self):
        if not np.isscalar(self.growth_rates):
            rates = tuple(float(g) for g in self.growth_rates)
            if not rates:
                raise InsufficientData("growth_rates must hold at least one rate.")
            object.__setattr__(self, "growth_rates", rates)
        if self.projection_years is not None and self.projection_years <= 0:
            raise InvalidAssumption("projection_years must be positive.")
        if self.wacc <= -100.0:
            raise InvalidAssumption(f"WACC must exceed -100% (got {self.wacc}).")
        if self.terminal_growth_rate >= self.wacc:
            raise InvalidAssumption(
                f"Terminal growth ({self.terminal_growth_rate:.2f}%) must be below "
                f"WACC ({self.wacc:.2f}%) for a finite terminal value."
            )

    @property
    def years(self) -> int:
        if self.projection_years is not None:
            return int(self.projection_years)
        if np.isscalar(self.growth_rates):
            return DEFAULT_PROJECTION_YEARS
        return len(self.growth_rates)

    def growth_path(self) -> np.ndarray:
        """Per-year growth in percent; a short list repeats its last rate."""
        n = self.years
        if np.isscalar(self.growth_rates):
            return np.full(n, float(self.growth_rates))
        rates = np.asarray(self.growth_rates, dtype=float)
        if rates.size >= n:
            return rates[:n]
        return np.concatenate([rates, np.full(n - rates.size, rates[-1])])


def terminal_value(final_fcf: float, wacc: float, terminal_growth: float) -> float:
    """Gordon growth: FCF_n * (1 + g) / (WACC - g), rates in percent."""
    if wacc <= terminal_growth:
        raise InvalidAssumption(
            f"WACC ({wacc:.2f}%) must exceed terminal growth ({terminal_growth:.2f}%)."
        )
    g = terminal_growth / 100.0
    return float(final_fcf) * (1.0 + g) / ((wacc - terminal_growth) / 100.0)


def net_debt(total_liabilities: float, cash: float) -> float:
    return float(total_liabilities) - float(cash)


def _project(initial_fcf: float, growth_pct: np.ndarray, wacc: float):
    fcf = float(initial_fcf) * np.cumprod(1.0 + growth_pct / 100.0)
    years = np.arange(1, growth_pct.size + 1, dtype=float)
    factors = (1.0 + wacc / 100.0) ** years
    return fcf, factors, fcf / factors


def _equity_value(
    initial_fcf: float,
    growth_pct: np.ndarray,
    wacc: float,
    terminal_growth: float,
    debt: float,
) -> float:
    fcf, factors, pv = _project(initial_fcf, growth_pct, wacc)
    tv = terminal_value(fcf[-1], wacc, terminal_growth)
    return float(pv.sum() + tv / factors[-1] - debt)


def sensitivity_grid(
    initial_fcf: float,
    growth_pct: Sequence[float],
    wacc: float,
    terminal_growth: float,
    debt: float = 0.0,
    wacc_deltas: Sequence[float] = WACC_DELTAS,
    growth_deltas: Sequence[float] = GROWTH_DELTAS,
) -> pd.DataFrame:
    """
    Equity value across WACC (rows) × terminal growth (columns).

    Cells where the shifted WACC does not exceed the shifted terminal growth
    have no finite Gordon value and hold NaN.
    """
    path = np.asarray(growth_pct, dtype=float)
    wacc_values = [wacc + d for d in wacc_deltas]
    growth_values = [terminal_growth + d for d in growth_deltas]

    grid = np.full((len(wacc_values), len(growth_values)), np.nan)
    skipped = 0
    for i, w in enumerate(wacc_values):
        for j, g in enumerate(growth_values):
            if w <= g or w <= -100.0:
                skipped += 1
                continue
            grid[i, j] = _equity_value(initial_fcf, path, w, g, debt)

    if skipped:
        logger.warning(f"Sensitivity grid: {skipped} cells with WACC <= growth left as NaN")

    df = pd.DataFrame(
        grid,
        index=pd.Index(np.round(wacc_values, 4), name="wacc"),
        columns=pd.Index(np.round(growth_values, 4), name="terminal_growth"),
    )
    return df


@dataclass(frozen=True)
class DCFValuation:
    assumptions: ValuationAssumptions
    projection: pd.DataFrame  # year, fcf, growth_rate, discount_factor, present_value
    terminal_value: float
    terminal_pv: float
    sum_of_pvs: float
    enterprise_value: float
    net_debt: float
    equity_value: float
    sensitivity: Optional[pd.DataFrame] = None

    @property
    def terminal_value_share(self) -> float:
        """Fraction of enterprise value that comes from the terminal value."""
        if self.enterprise_value == 0:
            return float("nan")
        return self.terminal_pv / self.enterprise_value


def value_company(
    assumptions: ValuationAssumptions,
    sensitivity: bool = True,
    sensitivity_growth_pct: Optional[float] = None,
) -> DCFValuation:
    """
    Run the DCF and, optionally, the WACC × terminal-growth grid.

    The grid reuses the projection's own growth path. Passing
    ``sensitivity_growth_pct`` swaps in a flat growth rate for the grid only.
    """
    a = assumptions
    growth = a.growth_path()
    fcf, factors, pv = _project(a.initial_fcf, growth, a.wacc)

    tv = terminal_value(fcf[-1], a.wacc, a.terminal_growth_rate)
    tv_pv = tv / factors[-1]
    sum_pv = float(pv.sum())
    ev = sum_pv + tv_pv
    equity = ev - a.net_debt

    projection = pd.DataFrame({
        "year": np.arange(1, growth.size + 1),
        "fcf": fcf,
        "growth_rate": growth,
        "discount_factor": factors,
        "present_value": pv,
    })

    grid = None
    if sensitivity:
        grid_path = growth if sensitivity_growth_pct is None else np.full(growth.size, float(sensitivity_growth_pct))
        grid = sensitivity_grid(a.initial_fcf, grid_path, a.wacc, a.terminal_growth_rate, a.net_debt)

    logger.info(
        f"DCF: {growth.size} years at WACC {a.wacc:.2f}% → EV {ev:,.0f}, equity {equity:,.0f}"
    )

    return DCFValuation(
        assumptions=a,
        projection=projection,
        terminal_value=tv,
        terminal_pv=float(tv_pv),
        sum_of_pvs=sum_pv,
        enterprise_value=float(ev),
        net_debt=float(a.net_debt),
        equity_value=float(equity),
        sensitivity=grid,
    )


def assumptions_from_input(payload: ValuationInput) -> ValuationAssumptions:
    """Build assumptions from a validated request, deriving WACC via CAPM."""
    breakdown = compute_wacc(
        risk_free_rate=payload.risk_free_rate,
        beta=payload.beta,
        market_risk_premium=payload.market_risk_premium,
        cost_of_debt=payload.cost_of_debt,
        tax_rate=payload.tax_rate,
        equity_weight=payload.equity_weight,
        debt_weight=payload.debt_weight,
    )
    growth = payload.growth_rates
    return ValuationAssumptions(
        initial_fcf=payload.initial_fcf,
        growth_rates=growth if isinstance(growth, (int, float)) else tuple(growth),
        wacc=breakdown.wacc,
        terminal_growth_rate=payload.terminal_growth_rate,
        net_debt=payload.net_debt,
        projection_years=payload.projection_years,
    )
