"""
Decision Engine

Weighted multi-criteria decision analysis.

Options are rated against weighted criteria, ranked by weighted score, and
the recommendation is stress-tested: how close the runner-up is, which
weights could flip the result, where the winner is weak, and which options
are good enough across the board.
"""

from decision_engine.engine.model import Criterion, DecisionModel, Option
from decision_engine.engine.scoring import ScoredResult, score_options
from decision_engine.engine.ranking import RankedResult, rank_results
from decision_engine.metrics.sensitivity import SensitivityAnalyzer
from decision_engine.metrics.confidence import ConfidenceAnalyzer
from decision_engine.metrics.risk import RiskAnalyzer
from decision_engine.metrics.satisficer import CriteriaImpactAnalyzer, SatisficerAnalyzer
from decision_engine.output.diagnostics import DecisionAnalysis, DecisionAnalyzer
from decision_engine.whatif.session import WhatIfSession

__version__ = "0.1.0"

__all__ = [
    # Core types
    "Option",
    "Criterion",
    "DecisionModel",
    # Scoring
    "ScoredResult",
    "RankedResult",
    "score_options",
    "rank_results",
    # Metrics
    "SensitivityAnalyzer",
    "ConfidenceAnalyzer",
    "RiskAnalyzer",
    "SatisficerAnalyzer",
    "CriteriaImpactAnalyzer",
    # Combined analysis
    "DecisionAnalysis",
    "DecisionAnalyzer",
    # What-if
    "WhatIfSession",
]
