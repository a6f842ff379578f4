"""
Tests for distributions/sampler.py and engine/ (trials + runner).
"""

import numpy as np
import pytest

from core.config import SimulationConfig
from core.errors import FinanceEngineError, InvalidAssumption, InvalidDistribution
from core.schema import SimulationInput
from distributions import (
    VARIABLES,
    DistributionParams,
    MonteCarloSampler,
    SampledPaths,
    VariableDistribution,
    box_muller,
)
from engine import (
    BaseValues,
    TrialResults,
    project_deterministic,
    run_simulation,
    run_simulation_from_input,
    run_trials,
)


def _constant_paths(n, years, growth=10.0, cost_ratio=65.0, opex_growth=5.0, rate=10.0):
    values = dict(zip(VARIABLES, (growth, cost_ratio, opex_growth, rate)))
    return SampledPaths(**{name: np.full((n, years), v) for name, v in values.items()})


class TestVariableDistribution:
    def test_acceptance_four_sigma(self):
        dist = VariableDistribution(10.0, 5.0, -10.0, 30.0)
        assert dist.acceptance_probability() == pytest.approx(0.99994, abs=1e-4)

    def test_zero_std_inside_bounds(self):
        assert VariableDistribution(5.0, 0.0, 0.0, 10.0).acceptance_probability() == 1.0

    def test_negative_std(self):
        with pytest.raises(InvalidDistribution, match="std"):
            VariableDistribution(0.0, -1.0, -5.0, 5.0).validate()

    def test_inverted_bounds(self):
        with pytest.raises(InvalidDistribution, match="below"):
            VariableDistribution(0.0, 1.0, 5.0, -5.0).validate()

    def test_equal_bounds(self):
        with pytest.raises(InvalidDistribution, match="below"):
            VariableDistribution(5.0, 0.0, 5.0, 5.0).validate()

    def test_unreachable_bounds(self):
        with pytest.raises(InvalidDistribution, match="unreachable"):
            VariableDistribution(0.0, 1.0, 50.0, 60.0).validate()

    def test_zero_std_outside_bounds(self):
        with pytest.raises(InvalidDistribution):
            VariableDistribution(20.0, 0.0, 0.0, 10.0).validate()


class TestDistributionParams:
    def test_defaults_validate(self):
        DistributionParams().validate()

    def test_deterministic_keeps_means(self):
        params = DistributionParams().deterministic()
        for name in VARIABLES:
            assert getattr(params, name).std == 0.0
        assert params.revenue_growth.mean == 10.0

    def test_from_mapping_dicts(self):
        params = DistributionParams.from_mapping({
            "revenue_growth": {"mean": 3, "std": 1, "min": 0, "max": 6},
        })
        assert params.revenue_growth == VariableDistribution(3.0, 1.0, 0.0, 6.0)
        assert params.cost_ratio == DistributionParams().cost_ratio

    def test_from_mapping_unknown_variable(self):
        with pytest.raises(InvalidDistribution, match="Unknown"):
            DistributionParams.from_mapping({"inflation": {"mean": 2, "std": 1, "min": 0, "max": 4}})

    def test_from_mapping_missing_field(self):
        with pytest.raises(InvalidDistribution, match="missing"):
            DistributionParams.from_mapping({"revenue_growth": {"mean": 3, "std": 1}})

    def test_discount_rate_floor(self):
        params = DistributionParams(discount_rate=VariableDistribution(0.0, 1.0, -100.0, 5.0))
        with pytest.raises(InvalidDistribution):
            params.validate()

    def test_summary(self):
        summary = DistributionParams().summary().set_index("Variable")
        assert list(summary.index) == list(VARIABLES)
        # 10 +/- 2 bounded to [6, 15]: Phi(2.5) - Phi(-2)
        assert summary.loc["discount_rate", "Acceptance"] == pytest.approx(0.97104, abs=1e-4)
        others = summary.drop(index="discount_rate")["Acceptance"]
        assert (others > 0.99).all()


class TestSampler:
    def test_box_muller_is_standard_normal(self):
        draws = box_muller(np.random.default_rng(123), 200_000)
        assert abs(draws.mean()) < 0.01
        assert abs(draws.std() - 1.0) < 0.01

    def test_shape_and_bounds(self):
        paths = MonteCarloSampler(iterations=2000, projection_years=4, seed=1).sample()
        params = DistributionParams()
        assert paths.n_paths == 2000
        assert paths.years == 4
        for name in VARIABLES:
            dist = getattr(params, name)
            values = getattr(paths, name)
            assert values.min() >= dist.min
            assert values.max() <= dist.max

    def test_tight_bounds_still_respected(self):
        params = DistributionParams(revenue_growth=VariableDistribution(0.0, 10.0, -1.0, 1.0))
        paths = MonteCarloSampler(params, iterations=500, projection_years=2, seed=3).sample()
        assert np.abs(paths.revenue_growth).max() <= 1.0

    def test_seed_reproducible(self):
        a = MonteCarloSampler(iterations=100, seed=42).sample()
        b = MonteCarloSampler(iterations=100, seed=42).sample()
        c = MonteCarloSampler(iterations=100, seed=43).sample()
        np.testing.assert_array_equal(a.cost_ratio, b.cost_ratio)
        assert not np.array_equal(a.cost_ratio, c.cost_ratio)

    def test_zero_std_is_constant(self):
        paths = MonteCarloSampler(DistributionParams().deterministic(), iterations=10).sample()
        assert np.all(paths.discount_rate == 10.0)

    def test_invalid_params_rejected_up_front(self):
        params = DistributionParams(cost_ratio=VariableDistribution(65.0, 5.0, 90.0, 80.0))
        with pytest.raises(InvalidDistribution):
            MonteCarloSampler(params)

    def test_long_format(self):
        paths = MonteCarloSampler(iterations=3, projection_years=2).sample()
        df = paths.to_dataframe()
        assert len(df) == 6
        assert list(df["year"]) == [1, 2, 1, 2, 1, 2]
        assert len(paths.get_path(0)["revenue_growth"]) == 2


class TestTrials:
    def test_one_year_projection(self):
        result = run_trials(BaseValues(), _constant_paths(1, 1))
        assert result.final_revenue[0] == pytest.approx(1_100_000)
        assert result.final_net_income[0] == pytest.approx(131_250)
        assert result.npv[0] == pytest.approx(131_250 / 1.1)
        assert result.final_profit_margin[0] == pytest.approx(131_250 / 1_100_000 * 100)

    def test_yearly_mean_table(self):
        result = run_trials(BaseValues(), _constant_paths(4, 3))
        assert list(result.yearly_mean["year"]) == [1, 2, 3]
        assert result.yearly_mean["revenue"].iloc[2] == pytest.approx(1_331_000)

    def test_deterministic_matches_constant_paths(self):
        expected = run_trials(BaseValues(), _constant_paths(1, 5))
        result = project_deterministic(years=5)
        assert result.npv[0] == pytest.approx(expected.npv[0])

    def test_base_revenue_must_be_positive(self):
        with pytest.raises(InvalidAssumption):
            BaseValues(revenue=0)

    def test_tax_rate_range(self):
        with pytest.raises(InvalidAssumption):
            run_trials(BaseValues(), _constant_paths(1, 1), tax_rate=1.0)

    def test_concat_weights_yearly_means(self):
        flat = run_trials(BaseValues(), _constant_paths(1, 1, growth=0.0))
        grown = run_trials(BaseValues(), _constant_paths(3, 1, growth=10.0))
        merged = TrialResults.concat([flat, grown])
        assert merged.n_trials == 4
        assert merged.yearly_mean["revenue"].iloc[0] == pytest.approx(1_075_000)


class TestRunSimulation:
    def test_zero_spread_matches_deterministic(self, small_sim_config):
        params = DistributionParams().deterministic()
        result = run_simulation(params, config=small_sim_config)
        expected = project_deterministic(params=params, years=small_sim_config.projection_years)
        assert result.statistics["npv"]["std"] == pytest.approx(0.0, abs=1e-6)
        assert result.statistics["npv"]["mean"] == pytest.approx(expected.npv[0])
        assert result.statistics["npv"]["skewness"] == 0.0

    def test_result_shape(self, small_sim_config):
        result = run_simulation(config=small_sim_config)
        assert result.iterations == 500
        assert result.years == 5
        assert set(result.statistics) == {"revenue", "net_income", "profit_margin", "npv"}
        assert len(result.histograms["npv"]) == small_sim_config.histogram_bins
        assert result.histograms["npv"]["count"].sum() == 500
        for value in result.probabilities.values():
            assert value >= 0
        assert result.risk.var_99 <= result.risk.var_95

    def test_percentiles_monotone(self, small_sim_config):
        result = run_simulation(config=small_sim_config)
        for outcome in result.percentiles.index:
            assert result.percentiles.loc[outcome].is_monotonic_increasing

    def test_same_seed_same_result(self, small_sim_config):
        a = run_simulation(config=small_sim_config)
        b = run_simulation(config=small_sim_config)
        np.testing.assert_array_equal(a.trials.npv, b.trials.npv)

    def test_shards_cover_every_trial(self):
        config = SimulationConfig(iterations=1001, shards=4, seed=5)
        result = run_simulation(config=config)
        assert result.iterations == 1001

    def test_thread_pool_matches_serial(self):
        serial = run_simulation(config=SimulationConfig(iterations=800, shards=4, max_workers=1))
        pooled = run_simulation(config=SimulationConfig(iterations=800, shards=4, max_workers=3))
        np.testing.assert_array_equal(serial.trials.npv, pooled.trials.npv)
        np.testing.assert_allclose(
            serial.yearly_mean["net_income"].to_numpy(),
            pooled.yearly_mean["net_income"].to_numpy(),
        )

    def test_too_many_shards(self):
        with pytest.raises(InvalidAssumption):
            run_simulation(config=SimulationConfig(iterations=2, shards=3))

    def test_merge_that_drops_trials_raises(self, monkeypatch):
        monkeypatch.setattr(TrialResults, "concat", staticmethod(lambda parts: parts[0]))
        with pytest.raises(FinanceEngineError, match="expected 100"):
            run_simulation(config=SimulationConfig(iterations=100, shards=2))

    def test_from_input(self):
        payload = SimulationInput(iterations=300, projection_years=3, seed=9, revenue=500_000)
        result = run_simulation_from_input(payload)
        assert result.iterations == 300
        assert result.years == 3
        assert result.base_values.revenue == 500_000
        assert 0.0 <= result.probabilities["profit_probability"] <= 100.0
