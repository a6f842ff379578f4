"""
Tail risk on simulated net income.

VaR is read straight off the sorted sample (nearest rank, lower tail), and
expected shortfall is the mean of the outcomes at or below VaR95.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.utils import as_float_array


@dataclass(frozen=True)
class TailRisk:
    var_95: float
    var_99: float
    expected_shortfall: float

    def as_dict(self) -> dict:
        return {
            "var_95": self.var_95,
            "var_99": self.var_99,
            "expected_shortfall": self.expected_shortfall,
        }


def lower_rank(sorted_values: np.ndarray, alpha: float) -> float:
    idx = min(int(np.floor(sorted_values.size * alpha)), sorted_values.size - 1)
    return float(sorted_values[idx])


def tail_risk(values: Sequence[float]) -> TailRisk:
    arr = np.sort(as_float_array(values, what="simulated outcomes"))
    var_95 = lower_rank(arr, 0.05)
    var_99 = lower_rank(arr, 0.01)
    return TailRisk(
        var_95=var_95,
        var_99=var_99,
        expected_shortfall=float(arr[arr <= var_95].mean()),
    )
