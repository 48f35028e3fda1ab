"""
Sensitivity analysis (flip points).

Measures how much each criterion's weight would have to move before the
runner-up overtakes the winner.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from decision_engine.log import get_logger

if TYPE_CHECKING:
    from decision_engine.engine.scoring import ScoredResult

logger = get_logger(__name__)

# Rating differences below this cannot move the ranking in a meaningful way.
MIN_RATING_DIFF = 0.1

CRITICAL_WEIGHT_CHANGE = 15
MODERATE_WEIGHT_CHANGE = 30

CRITICALITY_ORDER = {"critical": 0, "moderate": 1, "stable": 2}


@dataclass
class FlipPoint:
    """
    How far one criterion's weight is from overturning the winner.
    
    Attributes:
        criterion_id: Criterion identifier
        criterion_name: Criterion display name
        current_weight: Current normalized weight (percent)
        winner_rating: Winner's rating on this criterion
        runner_up_rating: Runner-up's rating on this criterion
        rating_diff: runner_up_rating - winner_rating
        has_impact: False when the two ratings are practically equal
        weight_change_needed: Approximate percentage-point change that closes
            the score gap (None without impact)
        direction: "increase" or "decrease" (None without impact)
        criticality: "critical", "moderate" or "stable"
        impact: |rating_diff| * current_weight / 100
        exact_flip_weight: Weight (percent) at which the two options tie when
            the other weights are rescaled proportionally; None if no weight
            in (0, 100) produces a tie
    """
    criterion_id: int
    criterion_name: str
    current_weight: float
    winner_rating: float
    runner_up_rating: float
    rating_diff: float
    has_impact: bool
    weight_change_needed: Optional[float]
    direction: Optional[str]
    criticality: str
    impact: float
    exact_flip_weight: Optional[float] = None
    
    def describe(self) -> str:
        if not self.has_impact:
            return f"{self.criterion_name}: no impact (top options rated alike)"
        return (
            f"{self.criterion_name}: {self.criticality} - {self.direction} weight by "
            f"~{self.weight_change_needed:.1f} pts to flip the winner"
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def classify_weight_change(weight_change: float) -> str:
    if weight_change < CRITICAL_WEIGHT_CHANGE:
        return "critical"
    elif weight_change < MODERATE_WEIGHT_CHANGE:
        return "moderate"
    return "stable"


class SensitivityAnalyzer:
    """
    Computes per-criterion flip points between the winner and runner-up.
    
    The weight change is an approximation: it asks how much extra weight on
    one criterion would close the current score gap while every other weight
    stays fixed. In a normalized vector raising one weight lowers the others,
    so this is a first-order estimate, not an exact re-optimization. The
    exact proportional-rescaling answer is reported separately as
    ``exact_flip_weight``.
    """
    
    def __init__(self, results: Sequence["ScoredResult"]):
        """
        Initialize analyzer.
        
        Args:
            results: Scored (or ranked) results, any order
        """
        self.results = sorted(results, key=lambda r: r.total_score, reverse=True)
    
    @property
    def winner(self) -> Optional["ScoredResult"]:
        return self.results[0] if self.results else None
    
    @property
    def runner_up(self) -> Optional["ScoredResult"]:
        return self.results[1] if len(self.results) > 1 else None
    
    def compute_score_gap(self) -> float:
        if len(self.results) < 2:
            return 0.0
        return self.results[0].total_score - self.results[1].total_score
    
    def compute_flip_points(self) -> List[FlipPoint]:
        """
        Flip point for every criterion, most fragile first.
        
        Returns:
            FlipPoints sorted by criticality, then by impact (descending);
            empty with fewer than two options
        """
        if len(self.results) < 2:
            return []
        
        winner, runner_up = self.results[0], self.results[1]
        gap = self.compute_score_gap()
        flip_points = []
        
        for entry in winner.breakdown:
            winner_rating = entry.rating
            runner_up_rating = runner_up.rating_for(entry.criterion_id)
            rating_diff = runner_up_rating - winner_rating
            impact = abs(rating_diff) * entry.weight / 100
            
            if abs(rating_diff) < MIN_RATING_DIFF:
                flip_points.append(FlipPoint(
                    criterion_id=entry.criterion_id,
                    criterion_name=entry.criterion_name,
                    current_weight=entry.weight,
                    winner_rating=winner_rating,
                    runner_up_rating=runner_up_rating,
                    rating_diff=rating_diff,
                    has_impact=False,
                    weight_change_needed=None,
                    direction=None,
                    criticality="stable",
                    impact=impact,
                ))
                continue
            
            weight_change = gap / abs(rating_diff) * 100
            flip_points.append(FlipPoint(
                criterion_id=entry.criterion_id,
                criterion_name=entry.criterion_name,
                current_weight=entry.weight,
                winner_rating=winner_rating,
                runner_up_rating=runner_up_rating,
                rating_diff=rating_diff,
                has_impact=True,
                weight_change_needed=weight_change,
                direction="increase" if rating_diff > 0 else "decrease",
                criticality=classify_weight_change(weight_change),
                impact=impact,
                exact_flip_weight=self.exact_flip_weight(entry.criterion_id),
            ))
        
        flip_points.sort(key=lambda fp: (CRITICALITY_ORDER[fp.criticality], -fp.impact))
        
        logger.debug(
            "flip_points_computed",
            criteria=len(flip_points),
            critical=sum(1 for fp in flip_points if fp.criticality == "critical"),
        )
        return flip_points
    
    def exact_flip_weight(self, criterion_id: int) -> Optional[float]:
        """
        Weight (percent) at which winner and runner-up tie on total score.
        
        The other weights keep their relative proportions and share the
        remaining ``100 - w``. Each option's total is then linear in ``w``:
        ``T(w) = w * r + (1 - w) * rest`` where ``rest`` is its weighted
        average over the other criteria, so the tie point has a closed form.
        
        Returns:
            Tie weight in (0, 100), or None if no such weight exists
        """
        if len(self.results) < 2:
            return None
        
        winner, runner_up = self.results[0], self.results[1]
        w_entry = winner.score_for(criterion_id)
        r_entry = runner_up.score_for(criterion_id)
        if w_entry is None or r_entry is None:
            return None
        
        weight = w_entry.weight / 100
        if weight >= 1.0:
            return None
        
        def rest_score(result: "ScoredResult") -> float:
            total = sum(e.contribution for e in result.breakdown)
            own = result.score_for(criterion_id).contribution
            return (total - own) / (1 - weight)
        
        rating_delta = w_entry.rating - r_entry.rating
        rest_delta = rest_score(winner) - rest_score(runner_up)
        
        denominator = rest_delta - rating_delta
        if abs(denominator) < 1e-12:
            return None
        
        tie_weight = rest_delta / denominator
        if not 0.0 < tie_weight < 1.0:
            return None
        return tie_weight * 100
