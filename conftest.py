"""
Shared pytest fixtures.
"""

import pandas as pd
import pytest

from core.config import SimulationConfig


@pytest.fixture
def capital_project():
    """1M outlay, 300k a year for five years, 10% hurdle."""
    return {
        "initial_investment": 1_000_000,
        "cash_flows": [300_000] * 5,
        "discount_rate_pct": 10.0,
    }


@pytest.fixture
def profit_loss_records():
    return pd.DataFrame({
        "created_at": ["2024-01-31", "2024-12-31"],
        "revenue": [800_000, 1_000_000],
        "cost_of_goods_sold": [350_000, 400_000],
        "operating_expenses": [250_000, 300_000],
        "net_income": [-20_000, 150_000],
    })


@pytest.fixture
def balance_sheet_records():
    return pd.DataFrame({
        "as_of_date": ["2024-06-30", "2024-12-31"],
        "current_assets": [900_000, 1_000_000],
        "current_liabilities": [350_000, 400_000],
        "total_liabilities": [700_000, 800_000],
    })


@pytest.fixture
def small_sim_config():
    return SimulationConfig(iterations=500, projection_years=5, seed=11)
