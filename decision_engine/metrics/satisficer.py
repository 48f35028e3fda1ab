"""
Satisficer and criteria-impact analysis.

Satisficers are the "good enough" options: those that clear a minimum bar on
every criterion, as opposed to the single highest scorer. Criteria impact
shows which criteria actually separate the options.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

import numpy as np

from decision_engine.log import get_logger

if TYPE_CHECKING:
    from decision_engine.engine.ranking import RankedResult
    from decision_engine.engine.scoring import ScoredResult

logger = get_logger(__name__)

SATISFICER_THRESHOLDS = (3.0, 2.5, 2.0)
STRONG_RATING = 4.0
WATCH_RATING = 3.5
WELL_ROUNDED_STRONG_COUNT = 3


@dataclass
class Satisficer:
    """
    An option that clears the threshold on every criterion.
    
    Attributes:
        option_id: Option identifier
        option_name: Option display name
        rank: Rank in the full weighted ranking
        total_score: Weighted total
        min_rating: Lowest rating across all criteria
        strong_count: Criteria rated at or above the strong level
        watch_count: Criteria rated below the watch level
        label: "Well-Rounded", "Safe Choice" or "Balanced Option"
    """
    option_id: int
    option_name: str
    rank: int
    total_score: float
    min_rating: float
    strong_count: int
    watch_count: int
    label: str


@dataclass
class SatisficerReport:
    """
    Satisficers found at the first threshold that yields any.
    
    Attributes:
        satisficers: Qualifying options in rank order
        threshold: Threshold that produced them (None if none qualified)
        thresholds_tried: Every threshold attempted, in order
    """
    satisficers: List[Satisficer] = field(default_factory=list)
    threshold: Optional[float] = None
    thresholds_tried: List[float] = field(default_factory=list)
    
    @property
    def relaxed(self) -> bool:
        return len(self.thresholds_tried) > 1 and bool(self.satisficers)
    
    def describe(self) -> str:
        if not self.satisficers:
            tried = ", ".join(f"{t:.1f}" for t in self.thresholds_tried)
            return f"Satisficers: none (thresholds tried: {tried})"
        lines = [f"Satisficers (every criterion >= {self.threshold:.1f}):"]
        for s in self.satisficers:
            lines.append(
                f"  #{s.rank} {s.option_name} - {s.label} "
                f"(min {s.min_rating:.1f}, {s.strong_count} strong, {s.watch_count} to watch)"
            )
        return "\n".join(lines)
    
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["relaxed"] = self.relaxed
        return data


@dataclass
class CriteriaImpact:
    """
    How strongly one criterion discriminates between the options.
    
    Attributes:
        criterion_id: Criterion identifier
        criterion_name: Criterion display name
        weight: Normalized weight (percent)
        variance: Population variance of the criterion's ratings
        impact_score: variance * weight / 100 * 100
        tier: "maximum" (key driver), "minimum" (non-discriminating) or "moderate"
    """
    criterion_id: int
    criterion_name: str
    weight: float
    variance: float
    impact_score: float
    tier: str = "moderate"
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def satisficer_label(strong_count: int, watch_count: int) -> str:
    if strong_count >= WELL_ROUNDED_STRONG_COUNT:
        return "Well-Rounded"
    elif watch_count == 0:
        return "Safe Choice"
    return "Balanced Option"


class SatisficerAnalyzer:
    """
    Finds options that are good enough on every criterion.
    
    The thresholds are tried in order until at least one option qualifies;
    lower thresholds can only admit more options, never fewer.
    """
    
    def __init__(
        self,
        ranked: Sequence["RankedResult"],
        thresholds: Sequence[float] = SATISFICER_THRESHOLDS,
        strong_rating: float = STRONG_RATING,
        watch_rating: float = WATCH_RATING,
    ):
        self.ranked = sorted(ranked, key=lambda r: r.rank)
        self.thresholds = list(thresholds)
        self.strong_rating = strong_rating
        self.watch_rating = watch_rating
    
    def qualifying(self, threshold: float) -> List["RankedResult"]:
        return [
            r for r in self.ranked
            if r.breakdown and all(rating >= threshold for rating in r.ratings)
        ]
    
    def describe_option(self, result: "RankedResult") -> Satisficer:
        ratings = result.ratings
        strong = sum(1 for rating in ratings if rating >= self.strong_rating)
        watch = sum(1 for rating in ratings if rating < self.watch_rating)
        return Satisficer(
            option_id=result.option.id,
            option_name=result.option.name,
            rank=result.rank,
            total_score=result.total_score,
            min_rating=min(ratings),
            strong_count=strong,
            watch_count=watch,
            label=satisficer_label(strong, watch),
        )
    
    def compute_satisficers(self) -> SatisficerReport:
        report = SatisficerReport()
        for threshold in self.thresholds:
            report.thresholds_tried.append(threshold)
            found = self.qualifying(threshold)
            if found:
                report.threshold = threshold
                report.satisficers = [self.describe_option(r) for r in found]
                break
            logger.info("satisficer_threshold_relaxed", threshold=threshold)
        return report


class CriteriaImpactAnalyzer:
    """
    Ranks criteria by discriminating power (rating variance x weight).
    
    A criterion every option rates the same cannot change the outcome,
    however heavily it is weighted.
    """
    
    def __init__(self, results: Sequence["ScoredResult"], tier_size: Optional[int] = None):
        """
        Initialize analyzer.
        
        Args:
            results: Scored (or ranked) results
            tier_size: Criteria reported as maximum/minimum impact
                (None = max(1, n // 3))
        """
        self.results = list(results)
        self.tier_size = tier_size
    
    def compute_variance(self, criterion_id: int) -> float:
        ratings = [r.rating_for(criterion_id) for r in self.results]
        if len(ratings) < 2:
            return 0.0
        return float(np.var(ratings))
    
    def compute_impacts(self) -> List[CriteriaImpact]:
        if not self.results:
            return []
        
        impacts = []
        for entry in self.results[0].breakdown:
            variance = self.compute_variance(entry.criterion_id)
            impacts.append(CriteriaImpact(
                criterion_id=entry.criterion_id,
                criterion_name=entry.criterion_name,
                weight=entry.weight,
                variance=variance,
                impact_score=variance * (entry.weight / 100) * 100,
            ))
        
        impacts.sort(key=lambda i: i.impact_score, reverse=True)
        
        n = len(impacts)
        size = self.tier_size or max(1, n // 3)
        for index, impact in enumerate(impacts):
            if index < size:
                impact.tier = "maximum"
            elif index >= max(size, n - size):
                impact.tier = "minimum"
        
        return impacts
    
    @staticmethod
    def key_drivers(impacts: List[CriteriaImpact]) -> List[CriteriaImpact]:
        return [i for i in impacts if i.tier == "maximum"]
    
    @staticmethod
    def non_discriminating(impacts: List[CriteriaImpact]) -> List[CriteriaImpact]:
        return [i for i in impacts if i.tier == "minimum"]
