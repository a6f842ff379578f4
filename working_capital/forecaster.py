"""
Monthly cash forecast driven by collection and payment lags.

Receivables and payables are sliding windows as long as their pattern:
slot k holds the amount booked k months ago and releases amount × pattern[k]
this month. The current month is booked before anything is realised, so
pattern[0] is the same-month share. Whatever a pattern leaves unallocated
(sum < 1) is never collected or paid.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np
import pandas as pd

from core.errors import InsufficientData, InvalidAssumption
from core.logger import setup_logger

logger = setup_logger(__name__)

BUFFER_MULTIPLIER = 1.2


@dataclass
class CashForecast:
    table: pd.DataFrame
    starting_cash: float
    shortfall_months: List[int] = field(default_factory=list)
    max_shortfall: float = 0.0  # magnitude of the lowest negative ending cash

    @property
    def ending_cash(self) -> float:
        return float(self.table["ending_cash"].iloc[-1])

    @property
    def total_net_cash_flow(self) -> float:
        return self.ending_cash - self.starting_cash

    @property
    def average_monthly_cash_flow(self) -> float:
        return self.total_net_cash_flow / len(self.table)

    @property
    def recommended_buffer(self) -> float:
        return self.max_shortfall * BUFFER_MULTIPLIER


def _monthly_series(values: Union[float, Sequence[float]], months: int, what: str) -> np.ndarray:
    """Scalar → flat series; a short list repeats its last value."""
    if np.isscalar(values):
        return np.full(months, float(values))
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise InsufficientData(f"No monthly {what} supplied.")
    if arr.size >= months:
        return arr[:months]
    return np.concatenate([arr, np.full(months - arr.size, arr[-1])])


def _check_pattern(pattern: Sequence[float], what: str) -> np.ndarray:
    arr = np.asarray(pattern, dtype=float)
    if arr.size == 0:
        raise InsufficientData(f"The {what} pattern is empty.")
    if (arr < 0).any():
        raise InvalidAssumption(f"The {what} pattern has negative shares: {arr.tolist()}")
    total = arr.sum()
    if total > 1.0 + 1e-9:
        logger.warning(f"The {what} pattern sums to {total:.2f}; more than 100% will be realised")
    return arr


def _release(window: deque, pattern: np.ndarray):
    """Cash realised this month and the balance still outstanding afterwards."""
    remaining_share = 1.0 - np.cumsum(pattern)
    realised = 0.0
    outstanding = 0.0
    for k, amount in enumerate(window):
        realised += amount * pattern[k]
        outstanding += amount * remaining_share[k]
    return realised, outstanding


def forecast_cash_flow(
    starting_cash: float = 500_000.0,
    monthly_revenue: Union[float, Sequence[float]] = 250_000.0,
    monthly_expenses: Union[float, Sequence[float]] = 200_000.0,
    collection_pattern: Sequence[float] = (0.2, 0.5, 0.25, 0.05),
    payment_pattern: Sequence[float] = (0.3, 0.5, 0.2),
    months: int = 12,
) -> CashForecast:
    """
    Month-by-month collections, payments and ending cash.

    Returns
    -------
    CashForecast with a table of month, revenue, collections, expenses,
    payments, net_cash_flow, ending_cash, ar_outstanding and ap_outstanding,
    plus the shortfall months and the recommended cash buffer.
    """
    if months <= 0:
        raise InvalidAssumption("Forecast horizon must be at least one month.")

    collections_share = _check_pattern(collection_pattern, "collection")
    payments_share = _check_pattern(payment_pattern, "payment")
    revenue = _monthly_series(monthly_revenue, months, "revenue")
    expenses = _monthly_series(monthly_expenses, months, "expenses")

    ar_window: deque = deque(maxlen=collections_share.size)
    ap_window: deque = deque(maxlen=payments_share.size)

    cash = float(starting_cash)
    rows = []
    for m in range(months):
        ar_window.appendleft(revenue[m])
        ap_window.appendleft(expenses[m])

        collected, ar_outstanding = _release(ar_window, collections_share)
        paid, ap_outstanding = _release(ap_window, payments_share)

        net = collected - paid
        cash += net
        rows.append({
            "month": m + 1,
            "revenue": revenue[m],
            "collections": collected,
            "expenses": expenses[m],
            "payments": paid,
            "net_cash_flow": net,
            "ending_cash": cash,
            "ar_outstanding": ar_outstanding,
            "ap_outstanding": ap_outstanding,
        })

    table = pd.DataFrame(rows)
    short = table[table["ending_cash"] < 0]
    max_shortfall = float(abs(short["ending_cash"].min())) if not short.empty else 0.0

    if not short.empty:
        logger.warning(
            f"Cash forecast: {len(short)} shortfall month(s), worst {max_shortfall:,.0f}"
        )

    return CashForecast(
        table=table,
        starting_cash=float(starting_cash),
        shortfall_months=short["month"].astype(int).tolist(),
        max_shortfall=max_shortfall,
    )
