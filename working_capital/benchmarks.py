"""
Industry working-capital benchmarks (25th / 50th / 75th percentile).

Days metrics are in days; current ratio is a plain ratio. Used as a reference
row set next to a company's own analyze_working_capital() output.
"""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

INDUSTRY_BENCHMARKS: Dict[str, Dict[str, Dict[str, float]]] = {
    "technology": {
        "dso": {"p25": 35, "p50": 45, "p75": 60},
        "dio": {"p25": 15, "p50": 30, "p75": 45},
        "dpo": {"p25": 30, "p50": 45, "p75": 60},
        "ccc": {"p25": 20, "p50": 30, "p75": 45},
        "current_ratio": {"p25": 1.5, "p50": 2.5, "p75": 4.0},
    },
    "retail": {
        "dso": {"p25": 5, "p50": 10, "p75": 20},
        "dio": {"p25": 45, "p50": 60, "p75": 90},
        "dpo": {"p25": 25, "p50": 35, "p75": 50},
        "ccc": {"p25": 25, "p50": 35, "p75": 60},
        "current_ratio": {"p25": 1.0, "p50": 1.5, "p75": 2.0},
    },
    "manufacturing": {
        "dso": {"p25": 40, "p50": 50, "p75": 65},
        "dio": {"p25": 60, "p50": 80, "p75": 110},
        "dpo": {"p25": 35, "p50": 50, "p75": 65},
        "ccc": {"p25": 65, "p50": 80, "p75": 110},
        "current_ratio": {"p25": 1.2, "p50": 1.8, "p75": 2.5},
    },
    "healthcare": {
        "dso": {"p25": 45, "p50": 55, "p75": 70},
        "dio": {"p25": 20, "p50": 30, "p75": 45},
        "dpo": {"p25": 30, "p50": 40, "p75": 55},
        "ccc": {"p25": 35, "p50": 45, "p75": 60},
        "current_ratio": {"p25": 1.3, "p50": 2.0, "p75": 3.0},
    },
    "financial": {
        "dso": {"p25": 25, "p50": 35, "p75": 50},
        "dio": {"p25": 5, "p50": 10, "p75": 20},
        "dpo": {"p25": 20, "p50": 30, "p75": 45},
        "ccc": {"p25": 10, "p50": 15, "p75": 25},
        "current_ratio": {"p25": 1.0, "p50": 1.2, "p75": 1.5},
    },
}


def available_industries() -> List[str]:
    return sorted(INDUSTRY_BENCHMARKS)


def get_industry_benchmarks(industry: str) -> pd.DataFrame:
    """
    Benchmark table for one industry: rows dso/dio/dpo/ccc/current_ratio,
    columns p25/p50/p75.

    Raises KeyError for an industry not in the table.
    """
    key = industry.strip().lower()
    if key not in INDUSTRY_BENCHMARKS:
        raise KeyError(
            f"Unknown industry '{industry}'. Available: {available_industries()}"
        )
    return pd.DataFrame(INDUSTRY_BENCHMARKS[key]).T[["p25", "p50", "p75"]].astype(float)
