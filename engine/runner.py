"""
Simulation runner — samples drivers, projects every trial, aggregates.

Trials can be split into shards. Each shard draws from its own generator,
seeded from SeedSequence(config.seed).spawn(shards), so shards never share a
random stream and the merged result does not depend on which worker finishes
first. With max_workers > 1 the shards run on a thread pool; the heavy lifting
is numpy, which releases the GIL.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from analytics.aggregator import SimulationResult, aggregate_trials
from core.config import SimulationConfig
from core.errors import FinanceEngineError, InvalidAssumption
from core.logger import LogContext, setup_logger
from core.schema import SimulationInput
from distributions.sampler import VARIABLES, DistributionParams, MonteCarloSampler

from .trials import BaseValues, TrialResults, run_trials

logger = setup_logger(__name__)


def _shard_plan(config: SimulationConfig) -> List[Tuple[int, object]]:
    """(trial count, seed) per shard."""
    if config.iterations <= 0:
        raise InvalidAssumption("iterations must be positive.")
    if not 1 <= config.shards <= config.iterations:
        raise InvalidAssumption(
            f"shards must be between 1 and iterations ({config.shards} for {config.iterations})."
        )
    if config.shards == 1:
        return [(config.iterations, config.seed)]

    base, extra = divmod(config.iterations, config.shards)
    sizes = [base + (1 if i < extra else 0) for i in range(config.shards)]
    seeds = np.random.SeedSequence(config.seed).spawn(config.shards)
    return list(zip(sizes, seeds))


def run_simulation(
    params: Optional[DistributionParams] = None,
    base_values: Optional[BaseValues] = None,
    config: Optional[SimulationConfig] = None,
) -> SimulationResult:
    """
    Full Monte Carlo run.

    Parameters
    ----------
    params : DistributionParams, optional
        Driver distributions; defaults to DistributionParams().
    base_values : BaseValues, optional
        Year-0 revenue / costs / opex.
    config : SimulationConfig, optional
        Iterations, horizon, seed, tax rate, sharding and output shape.

    Returns
    -------
    SimulationResult with statistics, percentiles, histograms, probabilities
    and tail risk for final revenue, net income, margin and NPV.
    """
    params = params or DistributionParams()
    base_values = base_values or BaseValues()
    config = config or SimulationConfig()
    params.validate()

    plan = _shard_plan(config)

    def _run_shard(shard: Tuple[int, object]) -> TrialResults:
        n, seed = shard
        sampler = MonteCarloSampler(
            params,
            iterations=n,
            projection_years=config.projection_years,
            seed=seed,
            max_rejection_rounds=config.max_rejection_rounds,
        )
        return run_trials(base_values, sampler.sample(), config.tax_rate)

    label = f"Monte Carlo: {config.iterations:,} trials × {config.projection_years} years in {len(plan)} shard(s)"
    with LogContext(logger, label):
        if config.max_workers > 1 and len(plan) > 1:
            with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
                parts = list(pool.map(_run_shard, plan))
        else:
            parts = [_run_shard(shard) for shard in plan]

        trials = TrialResults.concat(parts)
        if trials.n_trials != config.iterations:
            raise FinanceEngineError(
                f"Shard merge produced {trials.n_trials} trials, expected {config.iterations}"
            )

        return aggregate_trials(trials, base_values, config)


def run_simulation_from_input(payload: SimulationInput) -> SimulationResult:
    """Unpack a validated request into params, base values and config."""
    params = DistributionParams.from_mapping({name: getattr(payload, name) for name in VARIABLES})
    base_values = BaseValues(
        revenue=payload.revenue,
        costs=payload.costs,
        operating_expenses=payload.operating_expenses,
    )
    config = SimulationConfig(
        iterations=payload.iterations,
        projection_years=payload.projection_years,
        seed=payload.seed,
    )
    return run_simulation(params, base_values, config)
