"""
Distributions package — parameterise and sample the Monte Carlo drivers.

  sampler.py — bounded-normal (revenue growth, cost ratio, opex growth,
               discount rate) draws per trial and year
"""

from .sampler import (
    VARIABLES,
    DistributionParams,
    MonteCarloSampler,
    SampledPaths,
    VariableDistribution,
    box_muller,
)

__all__ = [
    "VARIABLES",
    "DistributionParams",
    "MonteCarloSampler",
    "SampledPaths",
    "VariableDistribution",
    "box_muller",
]
