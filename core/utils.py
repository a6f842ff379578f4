from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .errors import InsufficientData


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def as_float_array(values: Sequence[float], *, what: str = "cash flows") -> np.ndarray:
    """Coerce a sequence to a 1-D float array; empty input is rejected up front."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size == 0:
        raise InsufficientData(f"No {what} supplied.")
    return arr


def frac(pct_value: float) -> float:
    """10.0 -> 0.10"""
    return float(pct_value) / 100.0


def pct(fraction: float) -> float:
    """0.10 -> 10.0"""
    return float(fraction) * 100.0


def sign_changes(values: np.ndarray) -> int:
    """Number of sign changes in a series, ignoring zeros."""
    signs = np.sign(values[values != 0])
    if signs.size < 2:
        return 0
    return int(np.count_nonzero(signs[1:] != signs[:-1]))
