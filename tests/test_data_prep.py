"""
Tests for data_prep/: loading, validation and input estimation from records.
"""

import pandas as pd
import pytest

from core.config import EstimationDefaults
from core.errors import InsufficientData
from cvp import analyze_break_even
from data_prep import (
    base_values_from_records,
    break_even_inputs_from_records,
    latest_record,
    load_records_csv,
    net_debt_from_balance_sheet,
    to_frame,
    validate_records,
    working_capital_inputs_from_records,
)
from working_capital import analyze_working_capital


class TestLoader:
    def test_csv_round_trip(self, tmp_path, profit_loss_records):
        path = tmp_path / "pl.csv"
        profit_loss_records.to_csv(path, index=False)
        df = load_records_csv(str(path))
        assert len(df) == 2
        assert df["revenue"].iloc[1] == 1_000_000

    def test_to_frame_coerces_amounts(self):
        df = to_frame([{"revenue": "1000", "net_income": "n/a", "note": "x"}])
        assert df["revenue"].iloc[0] == 1000
        assert pd.isna(df["net_income"].iloc[0])
        assert df["note"].iloc[0] == "x"


class TestValidateRecords:
    def test_clean_profit_loss(self, profit_loss_records):
        result = validate_records(profit_loss_records, "profit_loss")
        assert result.is_valid
        assert result.warnings == []
        assert "All checks passed" in result.summary()

    def test_negative_net_income_allowed(self, profit_loss_records):
        assert (profit_loss_records["net_income"] < 0).any()
        assert validate_records(profit_loss_records, "profit_loss").is_valid

    def test_missing_columns(self, profit_loss_records):
        result = validate_records(profit_loss_records.drop(columns=["revenue"]), "profit_loss")
        assert not result.is_valid
        assert "revenue" in result.errors[0]

    def test_negative_amount(self, balance_sheet_records):
        balance_sheet_records.loc[0, "current_assets"] = -5
        result = validate_records(balance_sheet_records, "balance_sheet")
        assert not result.is_valid
        assert "negative current_assets" in result.errors[0]

    def test_empty_table(self):
        empty = pd.DataFrame(columns=["current_assets", "current_liabilities", "total_liabilities"])
        assert not validate_records(empty, "balance_sheet").is_valid

    def test_warnings(self, profit_loss_records):
        profit_loss_records.loc[1, "cost_of_goods_sold"] = 2_000_000
        profit_loss_records.loc[0, "created_at"] = "not a date"
        result = validate_records(profit_loss_records, "profit_loss")
        assert result.is_valid
        assert len(result.warnings) == 2

    def test_unknown_kind(self, profit_loss_records):
        with pytest.raises(ValueError):
            validate_records(profit_loss_records, "cash_flow")


class TestLatestRecord:
    def test_latest_by_date(self, profit_loss_records):
        reversed_rows = profit_loss_records.iloc[::-1]
        assert latest_record(reversed_rows, "created_at")["revenue"] == 1_000_000

    def test_falls_back_to_last_row(self, profit_loss_records):
        row = latest_record(profit_loss_records.drop(columns=["created_at"]), "created_at")
        assert row["revenue"] == 1_000_000

    def test_no_records(self):
        with pytest.raises(InsufficientData):
            latest_record([], "created_at")


class TestEstimates:
    def test_break_even_inputs(self, profit_loss_records):
        payload = break_even_inputs_from_records(profit_loss_records)
        assert payload.selling_price == 100
        assert payload.current_units == pytest.approx(10_000)
        assert payload.variable_cost_per_unit == pytest.approx(40)
        assert payload.fixed_costs == pytest.approx(210_000)

    def test_break_even_inputs_feed_engine(self, profit_loss_records):
        payload = break_even_inputs_from_records(profit_loss_records)
        result = analyze_break_even(**payload.model_dump())
        assert result.break_even.units == 3_500
        assert result.current_units == pytest.approx(10_000)

    def test_custom_defaults_and_overrides(self, profit_loss_records):
        defaults = EstimationDefaults(fixed_cost_share_of_opex=0.5)
        payload = break_even_inputs_from_records(profit_loss_records, defaults, selling_price=50)
        assert payload.fixed_costs == pytest.approx(150_000)
        assert payload.current_units == pytest.approx(20_000)
        assert payload.variable_cost_per_unit == pytest.approx(20)

    def test_missing_revenue(self, profit_loss_records):
        profit_loss_records.loc[1, "revenue"] = 0
        with pytest.raises(InsufficientData):
            break_even_inputs_from_records(profit_loss_records)

    def test_working_capital_inputs(self, balance_sheet_records, profit_loss_records):
        payload = working_capital_inputs_from_records(balance_sheet_records, profit_loss_records)
        assert payload.accounts_receivable == pytest.approx(400_000)
        assert payload.inventory == pytest.approx(300_000)
        assert payload.accounts_payable == pytest.approx(200_000)
        assert payload.revenue == 1_000_000
        result = analyze_working_capital(**payload.model_dump())
        assert result.dso == pytest.approx(146.0)

    def test_net_debt(self, balance_sheet_records):
        assert net_debt_from_balance_sheet(balance_sheet_records) == pytest.approx(500_000)

    def test_net_debt_needs_columns(self):
        with pytest.raises(ValueError):
            net_debt_from_balance_sheet(pd.DataFrame({"current_assets": [1.0]}))

    def test_base_values(self, profit_loss_records):
        base = base_values_from_records(profit_loss_records)
        assert base.revenue == 1_000_000
        assert base.operating_expenses == 300_000

    def test_base_values_fallback(self):
        base = base_values_from_records([{"revenue": 0, "operating_expenses": 120_000}])
        assert base.revenue == 1_000_000
        assert base.costs == 650_000
        assert base.operating_expenses == 120_000
