"""
Confidence analysis.

Combines statistical signals about the ranking (winner's margin, effect size,
score spread, number of options, fragile criteria) into a bounded confidence
percentage, and estimates stability with a Monte Carlo perturbation of the
option scores.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

import numpy as np

from decision_engine.errors import ConfigurationError
from decision_engine.log import get_logger

if TYPE_CHECKING:
    from decision_engine.engine.scoring import ScoredResult
    from decision_engine.metrics.sensitivity import FlipPoint

logger = get_logger(__name__)

STABILITY_TRIALS = 500
STABILITY_NOISE = 0.2

# 2.0 is 40% of the theoretical maximum gap of 5.0.
FULL_CONFIDENCE_GAP = 2.0
FULL_CONFIDENCE_EFFECT_SIZE = 1.5
FULL_CONFIDENCE_RANGE = 2.0
MIN_STD_DEV = 0.01

CRITICAL_FLIP_PENALTY = 12
MODERATE_FLIP_PENALTY = 6

MIN_CONFIDENCE = 5
MAX_CONFIDENCE = 95

CONFIDENCE_LEVELS = [
    (80, "very-high"),
    (65, "high"),
    (45, "medium"),
    (25, "low"),
]


@dataclass
class ConfidenceBreakdown:
    """Sub-scores that make up the raw confidence value (each 0-100 except the penalty)."""
    gap_confidence: float
    statistical_confidence: float
    distribution_confidence: float
    sample_size_bonus: float
    sensitivity_penalty: float


@dataclass
class StabilityResult:
    """Outcome of the Monte Carlo stability simulation."""
    trials: int
    winner_changes: int
    stability_percentage: float
    interpretation: str


@dataclass
class ConfidenceAnalysis:
    """
    Confidence in the recommended option.
    
    Attributes:
        confidence_percentage: Rounded confidence in [5, 95]
        level: "very-high", "high", "medium", "low" or "very-low"
        explanation: Short text explaining the level
        gap: Winner's total minus the runner-up's
        effect_size: Gap relative to the spread of all scores
        mean_score: Mean total score
        std_dev: Population standard deviation of the totals
        breakdown: Sub-scores (None for the single-option result)
        stability: Monte Carlo result (None for the single-option result)
    """
    confidence_percentage: int
    level: str
    explanation: str
    gap: float
    effect_size: float = 0.0
    mean_score: float = 0.0
    std_dev: float = 0.0
    breakdown: Optional[ConfidenceBreakdown] = None
    stability: Optional[StabilityResult] = None
    
    @classmethod
    def neutral(cls) -> "ConfidenceAnalysis":
        """Fixed result when there is nothing to compare the winner against."""
        return cls(
            confidence_percentage=50,
            level="medium",
            explanation="Only one option to evaluate; add alternatives to measure confidence",
            gap=0.0,
        )
    
    def describe(self) -> str:
        """Human-readable description."""
        lines = [
            f"Confidence: {self.confidence_percentage}% ({self.level})",
            f"  {self.explanation}",
            f"  Gap to runner-up: {self.gap:.3f}",
            f"  Effect size: {self.effect_size:.2f}",
        ]
        if self.stability:
            lines.append(
                f"  Stability: {self.stability.stability_percentage:.1f}% "
                f"({self.stability.interpretation})"
            )
        return "\n".join(lines)
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def confidence_level(percentage: float) -> str:
    for threshold, level in CONFIDENCE_LEVELS:
        if percentage >= threshold:
            return level
    return "very-low"


def interpret_stability(percentage: float) -> str:
    if percentage > 90:
        return "very stable: small rating changes are unlikely to change the winner"
    elif percentage > 70:
        return "reasonably stable: the winner holds under most small rating changes"
    else:
        return "fragile: small rating changes could easily change the winner"


class ConfidenceAnalyzer:
    """
    Estimates how much to trust the top-ranked option.
    
    Reads an immutable list of scored results. Flip points from the
    sensitivity analysis, when available, reduce confidence for every
    criterion whose weight could cheaply overturn the winner.
    """
    
    def __init__(
        self,
        results: Sequence["ScoredResult"],
        flip_points: Optional[List["FlipPoint"]] = None,
        trials: int = STABILITY_TRIALS,
        noise: float = STABILITY_NOISE,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize analyzer.
        
        Args:
            results: Scored (or ranked) results, any order
            flip_points: Sensitivity output; no penalty when None
            trials: Monte Carlo trial count
            noise: Half-width of the uniform per-option score noise
            rng: Random source for the simulation (seeded in tests)
        
        Raises:
            ConfigurationError: If results is empty
        """
        if not results:
            raise ConfigurationError("Confidence analysis requires at least one scored option")
        
        self.results = sorted(results, key=lambda r: r.total_score, reverse=True)
        self.flip_points = flip_points
        self.trials = trials
        self.noise = noise
        self.rng = rng if rng is not None else np.random.default_rng()
    
    @property
    def scores(self) -> np.ndarray:
        return np.array([r.total_score for r in self.results], dtype=float)
    
    def compute_gap(self) -> float:
        if len(self.results) < 2:
            return 0.0
        return self.results[0].total_score - self.results[1].total_score
    
    def compute_effect_size(self) -> float:
        """
        Gap divided by the population standard deviation of all scores.
        
        Falls back to ``gap * 20`` when the scores barely vary.
        """
        gap = self.compute_gap()
        std = float(np.std(self.scores))
        if std > MIN_STD_DEV:
            return gap / std
        return gap * 20
    
    def compute_sensitivity_penalty(self) -> float:
        if not self.flip_points:
            return 0.0
        critical = sum(1 for fp in self.flip_points if fp.criticality == "critical")
        moderate = sum(1 for fp in self.flip_points if fp.criticality == "moderate")
        return CRITICAL_FLIP_PENALTY * critical + MODERATE_FLIP_PENALTY * moderate
    
    def compute_breakdown(self) -> ConfidenceBreakdown:
        scores = self.scores
        gap = self.compute_gap()
        effect_size = self.compute_effect_size()
        spread = float(scores.max() - scores.min())
        
        return ConfidenceBreakdown(
            gap_confidence=min(gap / FULL_CONFIDENCE_GAP, 1.0) * 100,
            statistical_confidence=min(abs(effect_size) / FULL_CONFIDENCE_EFFECT_SIZE, 1.0) * 100,
            distribution_confidence=min(spread / FULL_CONFIDENCE_RANGE, 1.0) * 100,
            sample_size_bonus=min((len(self.results) - 2) * 5, 15),
            sensitivity_penalty=self.compute_sensitivity_penalty(),
        )
    
    def compute_confidence(self) -> int:
        """Weighted combination of the sub-scores, clamped to [5, 95] and rounded."""
        b = self.compute_breakdown()
        raw = (
            0.35 * b.gap_confidence
            + 0.25 * b.statistical_confidence
            + 0.20 * b.distribution_confidence
            + b.sample_size_bonus
            - b.sensitivity_penalty
        )
        return int(math.floor(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, raw)) + 0.5))
    
    def compute_stability(self) -> StabilityResult:
        """
        Monte Carlo stability of the winner.
        
        Every trial adds independent uniform noise in [-noise, +noise] to each
        option's score and checks whether the original winner is still first.
        All trials always run.
        """
        scores = self.scores
        noise = self.rng.uniform(-self.noise, self.noise, size=(self.trials, len(scores)))
        perturbed = scores[np.newaxis, :] + noise
        winner_changes = int(np.count_nonzero(np.argmax(perturbed, axis=1) != 0))
        
        percentage = 100.0 * (self.trials - winner_changes) / self.trials
        logger.debug("stability_simulated", trials=self.trials, winner_changes=winner_changes)
        
        return StabilityResult(
            trials=self.trials,
            winner_changes=winner_changes,
            stability_percentage=percentage,
            interpretation=interpret_stability(percentage),
        )
    
    def explain(self, gap: float, effect_size: float) -> str:
        if gap >= 1.0:
            margin = "The winner leads by a decisive margin"
        elif gap >= 0.5:
            margin = "The winner has a clear lead"
        elif gap >= 0.2:
            margin = "The winner has a modest lead"
        else:
            margin = "The top options are very close"
        
        if abs(effect_size) >= 1.5:
            spread = "that stands well apart from the other scores."
        elif abs(effect_size) >= 0.8:
            spread = "that is meaningful relative to the spread of scores."
        else:
            spread = "that is small relative to the spread of scores."
        
        text = f"{margin} {spread}"
        if self.flip_points and any(fp.criticality == "critical" for fp in self.flip_points):
            text += " Small weight changes on some criteria could change the outcome."
        return text
    
    def compute_full_report(self) -> ConfidenceAnalysis:
        """
        Compute the complete confidence analysis.
        
        With a single option the fixed neutral result is returned.
        """
        if len(self.results) < 2:
            return ConfidenceAnalysis.neutral()
        
        scores = self.scores
        gap = self.compute_gap()
        effect_size = self.compute_effect_size()
        percentage = self.compute_confidence()
        
        return ConfidenceAnalysis(
            confidence_percentage=percentage,
            level=confidence_level(percentage),
            explanation=self.explain(gap, effect_size),
            gap=gap,
            effect_size=effect_size,
            mean_score=float(np.mean(scores)),
            std_dev=float(np.std(scores)),
            breakdown=self.compute_breakdown(),
            stability=self.compute_stability(),
        )
