"""
Project ranking and capital rationing.

  compare_projects        → rankings by NPV / IRR / PI / payback
  select_portfolio_greedy → PI-ordered admission under a budget (heuristic)
  select_portfolio_exact  → 0/1 knapsack on NPV, dominance-pruned DP
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from core.errors import InsufficientData, InvalidAssumption
from core.logger import setup_logger

from .evaluator import ProjectCandidate, ProjectEvaluation, _as_candidate

logger = setup_logger(__name__)

ProjectLike = Union[ProjectCandidate, ProjectEvaluation, Mapping]


@dataclass
class PortfolioSelection:
    method: str  # greedy / exact
    budget: float
    selected: List[ProjectCandidate] = field(default_factory=list)

    @property
    def total_investment(self) -> float:
        return float(sum(p.initial_investment for p in self.selected))

    @property
    def total_npv(self) -> float:
        return float(sum(p.npv for p in self.selected))

    @property
    def remaining_budget(self) -> float:
        return self.budget - self.total_investment

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.selected]


def _check_budget(budget: float) -> float:
    budget = float(budget)
    if budget < 0 or not np.isfinite(budget):
        raise InvalidAssumption(f"Budget must be a finite non-negative amount (got {budget}).")
    return budget


def select_portfolio_greedy(
    candidates: Sequence[ProjectLike],
    budget: float,
) -> PortfolioSelection:
    """
    Admit projects in descending profitability-index order while they fit.

    Projects costing more than the whole budget are dropped up front. This is
    a heuristic for the 0/1 knapsack problem and can miss the NPV-maximal set;
    see select_portfolio_exact().
    """
    budget = _check_budget(budget)
    pool = [_as_candidate(p) for p in candidates]
    pool = [p for p in pool if p.initial_investment <= budget]
    pool.sort(key=lambda p: p.profitability_index, reverse=True)

    selection = PortfolioSelection(method="greedy", budget=budget)
    remaining = budget
    for project in pool:
        if project.initial_investment <= remaining:
            selection.selected.append(project)
            remaining -= project.initial_investment

    logger.info(
        f"Greedy portfolio: {len(selection.selected)}/{len(pool)} projects, "
        f"NPV={selection.total_npv:,.0f}, spent {selection.total_investment:,.0f} of {budget:,.0f}"
    )
    return selection


def select_portfolio_exact(
    candidates: Sequence[ProjectLike],
    budget: float,
    max_projects: int = 20,
) -> PortfolioSelection:
    """
    NPV-maximal subset whose total investment fits the budget.

    States are (cost, npv, chosen) triples. After each project, states are
    sorted by cost and any state whose NPV does not beat a cheaper one is
    dropped, so the frontier stays small for realistic inputs.
    """
    budget = _check_budget(budget)
    pool = [_as_candidate(p) for p in candidates]
    if len(pool) > max_projects:
        raise InvalidAssumption(
            f"Exact selection is limited to {max_projects} projects (got {len(pool)}); "
            f"use select_portfolio_greedy() instead."
        )

    states: List[Tuple[float, float, Tuple[int, ...]]] = [(0.0, 0.0, ())]
    for i, project in enumerate(pool):
        if project.npv <= 0:
            continue
        extended = [
            (cost + project.initial_investment, value + project.npv, chosen + (i,))
            for cost, value, chosen in states
            if cost + project.initial_investment <= budget + 1e-9
        ]
        merged = sorted(states + extended, key=lambda s: (s[0], -s[1]))

        frontier = []
        best = -np.inf
        for state in merged:
            if state[1] > best:
                frontier.append(state)
                best = state[1]
        states = frontier

    _, _, chosen = max(states, key=lambda s: s[1])
    selection = PortfolioSelection(
        method="exact",
        budget=budget,
        selected=[pool[i] for i in chosen],
    )
    logger.info(
        f"Exact portfolio: {len(chosen)} projects, NPV={selection.total_npv:,.0f} "
        f"({len(states)} frontier states)"
    )
    return selection


@dataclass
class ProjectComparison:
    projects: List[ProjectCandidate]
    rankings: Dict[str, List[str]]
    best_by_npv: ProjectCandidate
    portfolio: Optional[PortfolioSelection] = None

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "name": p.name,
                "initial_investment": p.initial_investment,
                "npv": p.npv,
                "irr_pct": p.irr_pct,
                "profitability_index": p.profitability_index,
                "payback_years": p.payback_years,
            }
            for p in self.projects
        ])


def compare_projects(
    projects: Sequence[ProjectLike],
    budget: Optional[float] = None,
) -> ProjectComparison:
    """
    Rank projects by NPV, IRR and PI (descending) and by payback (ascending).

    Mappings are read as raw flows with ``name``, ``initial_investment``,
    ``cash_flows`` and an optional ``discount_rate_pct``. When ``budget`` is
    given the greedy portfolio is attached.
    """
    pool = [_as_candidate(p) for p in projects]
    if not pool:
        raise InsufficientData("compare_projects needs at least one project.")

    def ranked(key, reverse):
        return [p.name for p in sorted(pool, key=key, reverse=reverse)]

    rankings = {
        "by_npv": ranked(lambda p: p.npv, True),
        "by_irr": ranked(lambda p: p.irr_pct, True),
        "by_pi": ranked(lambda p: p.profitability_index, True),
        "by_payback": ranked(lambda p: p.payback_years, False),
    }
    best = max(pool, key=lambda p: p.npv)

    portfolio = select_portfolio_greedy(pool, budget) if budget is not None else None

    return ProjectComparison(
        projects=pool,
        rankings=rankings,
        best_by_npv=best,
        portfolio=portfolio,
    )
