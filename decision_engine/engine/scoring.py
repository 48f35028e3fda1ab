"""
Weighted scoring.

score_options() is a pure function of (options, criteria, ratings, weights) so
the committed model and what-if sessions share it unchanged, each passing its
own weight vector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, TYPE_CHECKING

from decision_engine.engine.model import DEFAULT_RATING
from decision_engine.log import get_logger

if TYPE_CHECKING:
    from decision_engine.engine.model import Criterion, DecisionModel, Option, RatingKey

logger = get_logger(__name__)

# Totals are stored at this many decimal digits; ties are detected at the same precision.
SCORE_PRECISION = 6


@dataclass(frozen=True)
class CriterionScore:
    """
    One criterion's share of an option's total score.
    
    Attributes:
        criterion_id: Criterion identifier
        criterion_name: Criterion display name
        rating: Rating used (DEFAULT_RATING when unrated)
        weight: Normalized weight as a percentage
        contribution: rating * weight / 100
        is_default: Whether the rating was missing
    """
    criterion_id: int
    criterion_name: str
    rating: float
    weight: float
    contribution: float
    is_default: bool = False


@dataclass(frozen=True)
class ScoredResult:
    """An option's weighted total and per-criterion breakdown."""
    option: "Option"
    total_score: float
    breakdown: Tuple[CriterionScore, ...]
    
    @property
    def option_id(self) -> int:
        return self.option.id
    
    def score_for(self, criterion_id: int) -> Optional[CriterionScore]:
        for entry in self.breakdown:
            if entry.criterion_id == criterion_id:
                return entry
        return None
    
    def rating_for(self, criterion_id: int) -> float:
        entry = self.score_for(criterion_id)
        return entry.rating if entry else DEFAULT_RATING
    
    @property
    def ratings(self) -> List[float]:
        return [entry.rating for entry in self.breakdown]
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "option": {
                "id": self.option.id,
                "name": self.option.name,
                "description": self.option.description,
            },
            "total_score": self.total_score,
            "breakdown": [
                {
                    "criterion_id": e.criterion_id,
                    "criterion_name": e.criterion_name,
                    "rating": e.rating,
                    "weight": e.weight,
                    "contribution": e.contribution,
                    "is_default": e.is_default,
                }
                for e in self.breakdown
            ],
        }


def score_options(
    options: Iterable["Option"],
    criteria: Iterable["Criterion"],
    ratings: Mapping["RatingKey", float],
    weights: Mapping[int, float],
) -> List[ScoredResult]:
    """
    Compute weighted totals for every option, in input order.
    
    Args:
        options: Options to score
        criteria: Live criteria
        ratings: Ratings keyed by (option_id, criterion_id); entries for
            unknown ids are ignored
        weights: criterion id -> percentage; entries for unknown criteria
            are ignored, criteria without an entry weigh 0
    
    Returns:
        One ScoredResult per option (unsorted)
    """
    options = list(options)
    criteria = list(criteria)
    
    option_ids = {o.id for o in options}
    criterion_ids = {c.id for c in criteria}
    orphans = sum(
        1 for oid, cid in ratings
        if oid not in option_ids or cid not in criterion_ids
    )
    if orphans:
        logger.info("orphaned_ratings_ignored", count=orphans)
    
    results = []
    for option in options:
        breakdown = []
        total = 0.0
        for criterion in criteria:
            key = (option.id, criterion.id)
            is_default = key not in ratings
            rating = DEFAULT_RATING if is_default else ratings[key]
            weight = weights.get(criterion.id, 0.0)
            contribution = rating * (weight / 100)
            total += contribution
            breakdown.append(CriterionScore(
                criterion_id=criterion.id,
                criterion_name=criterion.name,
                rating=rating,
                weight=weight,
                contribution=contribution,
                is_default=is_default,
            ))
        
        results.append(ScoredResult(
            option=option,
            total_score=round(total, SCORE_PRECISION),
            breakdown=tuple(breakdown),
        ))
    
    logger.debug("options_scored", options=len(results), criteria=len(criteria))
    return results


def score_model(
    model: "DecisionModel",
    weights: Optional[Mapping[int, float]] = None,
) -> List[ScoredResult]:
    """Score a model with its own normalized weights or an explicit vector."""
    if weights is None:
        weights = model.normalized_weights()
    return score_options(model.options, model.criteria, model.ratings, weights)
