"""
Tests for budgeting/: project evaluation, ranking, rationing, sensitivity.
"""

import numpy as np
import pytest

from budgeting import (
    ProjectCandidate,
    compare_projects,
    evaluate_project,
    project_sensitivity,
    select_portfolio_exact,
    select_portfolio_greedy,
)
from core.errors import InsufficientData, InvalidAssumption
from core.schema import ProjectInput


def _candidate(name, investment, npv_value):
    return ProjectCandidate(
        name=name,
        initial_investment=investment,
        npv=npv_value,
        irr_pct=15.0,
        profitability_index=(investment + npv_value) / investment,
        payback_years=3.0,
    )


@pytest.fixture
def three_projects():
    return [
        {"name": "A", "initial_investment": 1000, "cash_flows": [600, 600]},
        {"name": "B", "initial_investment": 500, "cash_flows": [400, 300]},
        {"name": "C", "initial_investment": 2000, "cash_flows": [1000, 1000, 1000]},
    ]


class TestEvaluateProject:
    """The 1M / 300k x 5 project at a 10% hurdle and 25% tax."""

    def test_after_tax_flows(self, capital_project):
        result = evaluate_project(**capital_project)
        np.testing.assert_allclose(result.depreciation, [200_000] * 5)
        np.testing.assert_allclose(result.after_tax_cash_flows, [275_000] * 5)

    def test_metrics(self, capital_project):
        result = evaluate_project(**capital_project)
        assert result.npv == pytest.approx(42_466.36, abs=1.0)
        assert result.irr_pct == pytest.approx(11.65, abs=0.01)
        assert result.irr.converged
        assert result.profitability_index == pytest.approx(1.0425, abs=1e-4)
        assert result.payback_years == pytest.approx(3.6364, abs=1e-4)
        assert result.payback_recovered
        assert result.discounted_payback_years > result.payback_years

    def test_decision(self, capital_project):
        decision = evaluate_project(**capital_project).decision
        assert decision.recommendation == "ACCEPT"
        assert decision.strength == "MODERATE"
        assert decision.accept
        assert decision.npv_positive
        assert decision.pi_above_one

    def test_strong_project(self):
        result = evaluate_project(100, [100, 100, 100], 10.0, tax_rate_pct=0)
        assert result.decision.recommendation == "ACCEPT"
        assert result.decision.strength == "STRONG"

    def test_losing_project_rejected(self):
        result = evaluate_project(1000, [100, 100, 100], 10.0)
        assert result.npv < 0
        assert result.decision.recommendation == "REJECT"
        assert result.decision.strength == "WEAK"
        assert not result.payback_recovered
        assert result.irr.converged
        assert result.irr_pct < 0

    def test_salvage_added_to_final_year(self):
        result = evaluate_project(1000, [500, 500], 10.0, salvage_value=200, tax_rate_pct=0)
        np.testing.assert_allclose(result.after_tax_cash_flows, [500, 700])

    def test_cash_flow_table_ends_at_npv(self, capital_project):
        result = evaluate_project(**capital_project)
        table = result.cash_flow_table()
        assert len(table) == 6
        assert table["cash_flow"].iloc[0] == -1_000_000
        assert table["cumulative_pv"].iloc[-1] == pytest.approx(result.npv)

    def test_eaa_spreads_npv(self, capital_project):
        result = evaluate_project(**capital_project)
        assert result.equivalent_annual_annuity == pytest.approx(42_466.36 / 3.790787, rel=1e-4)

    def test_from_validated_input(self, capital_project):
        payload = ProjectInput(**capital_project, depreciation_method="macrs")
        result = evaluate_project(**payload.model_dump())
        assert result.depreciation_method.value == "macrs"
        assert result.life_years == 5

    def test_rejects_empty_flows(self):
        with pytest.raises(InsufficientData):
            evaluate_project(1000, [])

    def test_rejects_zero_investment(self):
        with pytest.raises(InvalidAssumption):
            evaluate_project(0, [100])


class TestCompareProjects:
    def test_rankings(self, three_projects):
        comparison = compare_projects(three_projects)
        assert comparison.rankings["by_npv"] == ["C", "B", "A"]
        assert comparison.rankings["by_irr"] == ["B", "C", "A"]
        assert comparison.rankings["by_pi"] == ["C", "B", "A"]
        assert comparison.rankings["by_payback"] == ["B", "A", "C"]
        assert comparison.best_by_npv.name == "C"
        assert comparison.portfolio is None

    def test_budget_attaches_greedy_portfolio(self, three_projects):
        comparison = compare_projects(three_projects, budget=2500)
        assert comparison.portfolio.names == ["C", "B"]
        assert comparison.portfolio.remaining_budget == pytest.approx(0)

    def test_accepts_evaluations(self, capital_project):
        evaluation = evaluate_project(**capital_project, name="Plant")
        comparison = compare_projects([evaluation])
        assert comparison.best_by_npv.name == "Plant"
        assert len(comparison.to_dataframe()) == 1

    def test_empty(self):
        with pytest.raises(InsufficientData):
            compare_projects([])


class TestPortfolio:
    """Greedy PI ordering versus the exact knapsack."""

    @pytest.fixture
    def knapsack_case(self):
        return [
            _candidate("big", 600, 120),
            _candidate("half-1", 500, 90),
            _candidate("half-2", 500, 90),
        ]

    def test_greedy_takes_highest_pi(self, knapsack_case):
        selection = select_portfolio_greedy(knapsack_case, 1000)
        assert selection.names == ["big"]
        assert selection.total_npv == pytest.approx(120)

    def test_exact_beats_greedy(self, knapsack_case):
        selection = select_portfolio_exact(knapsack_case, 1000)
        assert sorted(selection.names) == ["half-1", "half-2"]
        assert selection.total_npv == pytest.approx(180)
        assert selection.total_investment <= 1000

    def test_exact_skips_negative_npv(self):
        pool = [_candidate("good", 100, 10), _candidate("bad", 100, -5)]
        assert select_portfolio_exact(pool, 1000).names == ["good"]

    def test_oversized_projects_dropped(self):
        selection = select_portfolio_greedy([_candidate("huge", 5000, 900)], 1000)
        assert selection.selected == []

    def test_exact_project_limit(self):
        pool = [_candidate(f"p{i}", 10, 1) for i in range(5)]
        with pytest.raises(InvalidAssumption):
            select_portfolio_exact(pool, 100, max_projects=4)

    def test_negative_budget(self):
        with pytest.raises(InvalidAssumption):
            select_portfolio_greedy([], -1)


class TestSensitivity:
    def test_points_shape(self):
        analysis = project_sensitivity(1000, [300] * 5, 10.0)
        assert len(analysis.points) == 15
        assert set(analysis.points["variable"]) == {"initial_investment", "cash_flows", "discount_rate"}

    def test_base_case_shared(self):
        points = project_sensitivity(1000, [300] * 5, 10.0).points
        base = points.loc[points["change_pct"] == 0, "npv"]
        assert base.nunique() == 1
        assert base.iloc[0] == pytest.approx(137.24, abs=0.01)

    def test_discount_rate_change_is_relative(self):
        points = project_sensitivity(1000, [300] * 5, 10.0, changes_pct=(10,)).points
        row = points[points["variable"] == "discount_rate"].iloc[0]
        assert row["value"] == pytest.approx(11.0)

    def test_irr_flat_on_discount_rate(self):
        points = project_sensitivity(1000, [300] * 5, 10.0).points
        rate_rows = points[points["variable"] == "discount_rate"]
        assert rate_rows["irr_pct"].nunique() == 1

    def test_tornado_order(self):
        analysis = project_sensitivity(1000, [300] * 5, 10.0)
        assert analysis.most_sensitive == "cash_flows"
        assert list(analysis.tornado["variable"]) == ["cash_flows", "initial_investment", "discount_rate"]
        assert analysis.tornado["range"].is_monotonic_decreasing
