"""
Discount-rate construction: CAPM cost of equity and the weighted average
cost of capital. All inputs and outputs are percents.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from core.errors import InvalidAssumption


def cost_of_equity(risk_free_rate: float, beta: float, market_risk_premium: float) -> float:
    """CAPM: rf + beta * MRP."""
    return float(risk_free_rate) + float(beta) * float(market_risk_premium)


@dataclass(frozen=True)
class WACCBreakdown:
    cost_of_equity: float
    pre_tax_cost_of_debt: float
    after_tax_cost_of_debt: float
    equity_weight: float
    debt_weight: float
    tax_rate: float
    wacc: float

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"Component": "Cost of Equity", "Rate (%)": self.cost_of_equity, "Weight (%)": self.equity_weight},
            {"Component": "After-tax Cost of Debt", "Rate (%)": self.after_tax_cost_of_debt, "Weight (%)": self.debt_weight},
            {"Component": "WACC", "Rate (%)": self.wacc, "Weight (%)": self.equity_weight + self.debt_weight},
        ])


def compute_wacc(
    risk_free_rate: float = 3.0,
    beta: float = 1.2,
    market_risk_premium: float = 5.0,
    cost_of_debt: float = 5.0,
    tax_rate: float = 25.0,
    equity_weight: float = 70.0,
    debt_weight: float = 30.0,
) -> WACCBreakdown:
    """
    WACC = E% * Ke + D% * Kd * (1 - t).

    Weights are percents of total capital and must add up to 100.
    With the defaults: Ke = 9.0, Kd(1-t) = 3.75, WACC = 7.425.
    """
    if abs(equity_weight + debt_weight - 100.0) > 0.01:
        raise InvalidAssumption(
            f"Capital weights must sum to 100% (equity {equity_weight} + debt {debt_weight})."
        )
    if not 0.0 <= tax_rate <= 100.0:
        raise InvalidAssumption(f"Tax rate must be within 0-100% (got {tax_rate}).")

    ke = cost_of_equity(risk_free_rate, beta, market_risk_premium)
    kd_after_tax = float(cost_of_debt) * (1.0 - float(tax_rate) / 100.0)
    wacc = equity_weight / 100.0 * ke + debt_weight / 100.0 * kd_after_tax

    return WACCBreakdown(
        cost_of_equity=ke,
        pre_tax_cost_of_debt=float(cost_of_debt),
        after_tax_cost_of_debt=kd_after_tax,
        equity_weight=float(equity_weight),
        debt_weight=float(debt_weight),
        tax_rate=float(tax_rate),
        wacc=wacc,
    )
