"""Engine module - Decision model, weighting, scoring and ranking."""

from decision_engine.engine.model import Criterion, DecisionModel, IntegrityReport, Option
from decision_engine.engine.weights import (
    IMPORTANCE_WEIGHTS,
    apportion_percentages,
    normalize_importances,
    normalize_raw_weights,
)
from decision_engine.engine.scoring import CriterionScore, ScoredResult, score_model, score_options
from decision_engine.engine.ranking import RankedResult, rank_results, winners

__all__ = [
    "Option",
    "Criterion",
    "DecisionModel",
    "IntegrityReport",
    "IMPORTANCE_WEIGHTS",
    "normalize_importances",
    "normalize_raw_weights",
    "apportion_percentages",
    "CriterionScore",
    "ScoredResult",
    "score_options",
    "score_model",
    "RankedResult",
    "rank_results",
    "winners",
]
