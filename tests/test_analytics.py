"""
Tests for analytics/: descriptive statistics, percentiles, histograms, tail risk.
"""

import numpy as np
import pytest

from analytics import (
    describe,
    histogram,
    outcome_probabilities,
    percentile_table,
    tail_risk,
)
from core.config import SimulationConfig
from core.errors import InsufficientData
from engine import run_simulation


class TestDescribe:
    def test_basic(self):
        stats = describe([4, 1, 3, 2])
        assert stats["mean"] == pytest.approx(2.5)
        assert stats["median"] == 3.0
        assert stats["std"] == pytest.approx(np.sqrt(1.25))
        assert stats["min"] == 1.0
        assert stats["max"] == 4.0
        assert stats["skewness"] == pytest.approx(0.0, abs=1e-12)

    def test_right_skew(self):
        assert describe([1, 1, 1, 1, 10])["skewness"] > 0

    def test_constant_sample(self):
        stats = describe([7.0] * 5)
        assert stats["std"] == 0.0
        assert stats["skewness"] == 0.0

    def test_empty(self):
        with pytest.raises(InsufficientData):
            describe([])


class TestPercentiles:
    def test_nearest_rank(self):
        table = percentile_table(np.arange(100))
        assert list(table.index) == ["p5", "p10", "p25", "p50", "p75", "p90", "p95"]
        assert table["p5"] == 5.0
        assert table["p50"] == 50.0
        assert table["p95"] == 95.0

    def test_values_are_sample_members(self):
        values = np.random.default_rng(0).normal(size=257)
        table = percentile_table(values, (1, 50, 99))
        assert set(table.to_numpy()) <= set(values)
        assert table.is_monotonic_increasing

    def test_single_value(self):
        assert percentile_table([3.0], (99,))["p99"] == 3.0


class TestHistogram:
    def test_equal_width_bins(self):
        hist = histogram(np.arange(10), bins=5)
        assert list(hist["count"]) == [2, 2, 2, 2, 2]
        assert hist["bin_start"].iloc[0] == 0.0
        assert hist["bin_end"].iloc[-1] == pytest.approx(9.0)
        assert hist["frequency"].sum() == pytest.approx(100.0)

    def test_max_in_last_bin(self):
        hist = histogram([0.0, 1.0], bins=4)
        assert list(hist["count"]) == [1, 0, 0, 1]

    def test_constant_sample(self):
        hist = histogram([5.0] * 8, bins=3)
        assert list(hist["count"]) == [8, 0, 0]


class TestTailRisk:
    def test_var_and_shortfall(self):
        risk = tail_risk(np.arange(100))
        assert risk.var_95 == 5.0
        assert risk.var_99 == 1.0
        assert risk.expected_shortfall == pytest.approx(2.5)

    def test_shortfall_below_var(self):
        values = np.random.default_rng(1).normal(100, 20, size=5000)
        risk = tail_risk(values)
        assert risk.expected_shortfall <= risk.var_95
        assert set(risk.as_dict()) == {"var_95", "var_99", "expected_shortfall"}


class TestProbabilities:
    def test_counts(self):
        probs = outcome_probabilities(
            final_net_income=[-1, 1, 2, 3],
            npv=[1, -1, 1, -1],
            final_revenue=[100, 200, 300, 400],
            base_revenue=100,
            years=1,
        )
        assert probs["target_revenue"] == pytest.approx(110.0)
        assert probs["profit_probability"] == pytest.approx(75.0)
        assert probs["positive_npv_probability"] == pytest.approx(50.0)
        assert probs["target_revenue_probability"] == pytest.approx(75.0)


class TestSummaryTable:
    def test_one_row_per_outcome(self):
        result = run_simulation(config=SimulationConfig(iterations=200, seed=3))
        table = result.summary_table()
        assert list(table["outcome"]) == ["revenue", "net_income", "profit_margin", "npv"]
        assert {"mean", "std", "p5", "p50", "p95"} <= set(table.columns)
