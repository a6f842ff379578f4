"""
Tests for valuation/: CAPM, WACC, DCF and its sensitivity grid.
"""

import numpy as np
import pytest

from core.errors import InsufficientData, InvalidAssumption
from core.schema import ValuationInput
from valuation import (
    ValuationAssumptions,
    assumptions_from_input,
    compute_wacc,
    cost_of_equity,
    net_debt,
    sensitivity_grid,
    terminal_value,
    value_company,
)


class TestWACC:
    def test_cost_of_equity(self):
        assert cost_of_equity(3.0, 1.2, 5.0) == pytest.approx(9.0)

    def test_defaults(self):
        breakdown = compute_wacc()
        assert breakdown.cost_of_equity == pytest.approx(9.0)
        assert breakdown.after_tax_cost_of_debt == pytest.approx(3.75)
        assert breakdown.wacc == pytest.approx(7.425)

    def test_all_equity(self):
        assert compute_wacc(equity_weight=100, debt_weight=0).wacc == pytest.approx(9.0)

    def test_weights_must_sum_to_100(self):
        with pytest.raises(InvalidAssumption, match="sum to 100"):
            compute_wacc(equity_weight=60, debt_weight=30)

    def test_tax_rate_range(self):
        with pytest.raises(InvalidAssumption):
            compute_wacc(tax_rate=120)

    def test_breakdown_table(self):
        table = compute_wacc().to_dataframe()
        assert list(table["Component"]) == ["Cost of Equity", "After-tax Cost of Debt", "WACC"]


class TestTerminalValue:
    def test_gordon(self):
        assert terminal_value(100, 10.0, 2.0) == pytest.approx(1275.0)

    def test_growth_at_wacc_rejected(self):
        with pytest.raises(InvalidAssumption):
            terminal_value(100, 5.0, 5.0)

    def test_net_debt(self):
        assert net_debt(800, 300) == pytest.approx(500)


class TestAssumptions:
    def test_growth_list_extended(self):
        a = ValuationAssumptions(100, [10, 5], wacc=10, projection_years=4)
        np.testing.assert_allclose(a.growth_path(), [10, 5, 5, 5])
        assert a.growth_rates == (10.0, 5.0)

    def test_scalar_growth_default_years(self):
        a = ValuationAssumptions(100, 5.0, wacc=10)
        assert a.years == 5
        np.testing.assert_allclose(a.growth_path(), [5.0] * 5)

    def test_list_length_sets_years(self):
        assert ValuationAssumptions(100, (8, 6, 4), wacc=10).years == 3

    def test_terminal_growth_at_or_above_wacc(self):
        with pytest.raises(InvalidAssumption):
            ValuationAssumptions(100, 5.0, wacc=3.0, terminal_growth_rate=3.0)

    def test_empty_growth_list(self):
        with pytest.raises(InsufficientData):
            ValuationAssumptions(100, [], wacc=10)

    def test_from_input_uses_capm_wacc(self):
        a = assumptions_from_input(ValuationInput(initial_fcf=1000))
        assert a.wacc == pytest.approx(7.425)
        assert a.growth_rates == (10.0, 10.0, 8.0, 8.0, 6.0)
        assert a.years == 5


class TestValueCompany:
    """DCF mechanics on a flat perpetuity, where EV = FCF / WACC."""

    @pytest.fixture
    def perpetuity(self):
        return ValuationAssumptions(
            initial_fcf=100,
            growth_rates=0.0,
            wacc=10.0,
            terminal_growth_rate=0.0,
            net_debt=100.0,
            projection_years=3,
        )

    def test_flat_perpetuity(self, perpetuity):
        result = value_company(perpetuity)
        assert result.sum_of_pvs == pytest.approx(248.685, abs=1e-3)
        assert result.terminal_value == pytest.approx(1000.0)
        assert result.terminal_pv == pytest.approx(751.315, abs=1e-3)
        assert result.enterprise_value == pytest.approx(1000.0)
        assert result.equity_value == pytest.approx(900.0)

    def test_projection_table(self):
        result = value_company(ValuationAssumptions(1000, [10, 10, 8, 8, 6], wacc=7.425))
        projection = result.projection
        assert list(projection.columns) == ["year", "fcf", "growth_rate", "discount_factor", "present_value"]
        assert len(projection) == 5
        assert projection["fcf"].iloc[0] == pytest.approx(1100.0)
        assert projection["fcf"].iloc[1] == pytest.approx(1210.0)

    def test_terminal_value_share(self, perpetuity):
        result = value_company(perpetuity)
        assert result.terminal_value_share == pytest.approx(0.751315, abs=1e-6)

    def test_grid_centre_matches_equity(self, perpetuity):
        result = value_company(perpetuity)
        grid = result.sensitivity
        assert grid.shape == (5, 5)
        assert grid.index.name == "wacc"
        assert grid.columns.name == "terminal_growth"
        assert grid.iloc[2, 2] == pytest.approx(result.equity_value)

    def test_grid_value_falls_with_wacc(self, perpetuity):
        grid = value_company(perpetuity).sensitivity
        column = grid.iloc[:, 2]
        assert column.is_monotonic_decreasing

    def test_equity_rises_with_terminal_growth(self):
        values = [
            value_company(
                ValuationAssumptions(100, 3.0, wacc=10.0, terminal_growth_rate=g, net_debt=50.0),
                sensitivity=False,
            ).equity_value
            for g in (0.0, 2.0, 4.0, 6.0, 8.0, 9.5)
        ]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_grid_override_leaves_valuation(self, perpetuity):
        base = value_company(perpetuity)
        shifted = value_company(perpetuity, sensitivity_growth_pct=8.0)
        assert shifted.equity_value == pytest.approx(base.equity_value)
        assert shifted.sensitivity.iloc[2, 2] > base.sensitivity.iloc[2, 2]

    def test_no_grid(self, perpetuity):
        assert value_company(perpetuity, sensitivity=False).sensitivity is None


class TestSensitivityGrid:
    def test_infeasible_cells_are_nan(self):
        grid = sensitivity_grid(100, [5.0] * 5, wacc=4.0, terminal_growth=2.5)
        assert grid.isna().any().any()
        # 2% WACC against 3.5% growth
        assert np.isnan(grid.loc[2.0, 3.5])
        assert np.isfinite(grid.loc[4.0, 2.5])

    def test_net_debt_shifts_every_cell(self):
        base = sensitivity_grid(100, [5.0] * 3, wacc=10.0, terminal_growth=2.0)
        levered = sensitivity_grid(100, [5.0] * 3, wacc=10.0, terminal_growth=2.0, debt=50.0)
        np.testing.assert_allclose((base - levered).to_numpy(), 50.0)
