"""
Capital budgeting — project evaluation, ranking, rationing and sensitivity.
"""

from .evaluator import (
    Decision,
    ProjectCandidate,
    ProjectEvaluation,
    candidate_from_flows,
    classify_decision,
    evaluate_project,
)
from .portfolio import (
    PortfolioSelection,
    ProjectComparison,
    compare_projects,
    select_portfolio_exact,
    select_portfolio_greedy,
)
from .sensitivity import SensitivityAnalysis, project_sensitivity

__all__ = [
    "Decision",
    "ProjectCandidate",
    "ProjectEvaluation",
    "candidate_from_flows",
    "classify_decision",
    "evaluate_project",
    "PortfolioSelection",
    "ProjectComparison",
    "compare_projects",
    "select_portfolio_exact",
    "select_portfolio_greedy",
    "SensitivityAnalysis",
    "project_sensitivity",
]
