"""
Monte Carlo engine — per-trial operating projection + sharded simulation runner.
"""

from .trials import BaseValues, TrialResults, project_deterministic, run_trials
from .runner import run_simulation, run_simulation_from_input

__all__ = [
    "BaseValues",
    "TrialResults",
    "project_deterministic",
    "run_trials",
    "run_simulation",
    "run_simulation_from_input",
]
