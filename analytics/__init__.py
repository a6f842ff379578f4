"""
Simulation analytics — distribution summaries, percentiles, histograms and tail risk.
"""

from .aggregator import (
    SimulationResult,
    aggregate_trials,
    describe,
    histogram,
    outcome_probabilities,
    percentile_table,
)
from .risk import TailRisk, tail_risk

__all__ = [
    "SimulationResult",
    "aggregate_trials",
    "describe",
    "histogram",
    "outcome_probabilities",
    "percentile_table",
    "TailRisk",
    "tail_risk",
]
