"""
Core package — configuration, typed errors, logging, request schemas and
shared utilities. No business logic lives here.
"""

from .config import EstimationDefaults, SimulationConfig, WorkingCapitalThresholds
from .errors import (
    FinanceEngineError,
    InsufficientData,
    InvalidAssumption,
    InvalidDistribution,
    NonConvergentIRR,
)
from .logger import setup_logger, LogContext
from .utils import require_columns, as_float_array, frac, pct

__all__ = [
    "EstimationDefaults",
    "SimulationConfig",
    "WorkingCapitalThresholds",
    "FinanceEngineError",
    "InsufficientData",
    "InvalidAssumption",
    "InvalidDistribution",
    "NonConvergentIRR",
    "setup_logger",
    "LogContext",
    "require_columns",
    "as_float_array",
    "frac",
    "pct",
]
