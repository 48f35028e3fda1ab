"""
Decision diagnostics.

Runs every analysis over a decision model and bundles the results into a
single report object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import numpy as np

from decision_engine.config import AnalysisConfig
from decision_engine.engine.ranking import RankedResult, rank_results, winners
from decision_engine.engine.scoring import score_model
from decision_engine.errors import ConfigurationError
from decision_engine.log import get_logger
from decision_engine.metrics.confidence import ConfidenceAnalysis, ConfidenceAnalyzer
from decision_engine.metrics.risk import RiskAnalyzer, RiskProfile
from decision_engine.metrics.satisficer import (
    CriteriaImpact,
    CriteriaImpactAnalyzer,
    SatisficerAnalyzer,
    SatisficerReport,
)
from decision_engine.metrics.sensitivity import FlipPoint, SensitivityAnalyzer

if TYPE_CHECKING:
    from decision_engine.engine.model import DecisionModel, IntegrityReport

logger = get_logger(__name__)

RULE = "=" * 48


@dataclass
class DecisionAnalysis:
    """
    Complete analysis of one decision.
    
    Combines ranking, sensitivity, confidence, risk, satisficer and criteria
    impact analysis into a unified report.
    """
    title: str
    weights: Dict[int, float]
    display_weights: Dict[int, int]
    ranked: List[RankedResult]
    flip_points: List[FlipPoint]
    confidence: ConfidenceAnalysis
    risk: RiskProfile
    satisficers: SatisficerReport
    impacts: List[CriteriaImpact]
    integrity: "IntegrityReport"
    summary: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def winner(self) -> RankedResult:
        return self.ranked[0]
    
    @property
    def co_winners(self) -> List[RankedResult]:
        return winners(self.ranked)
    
    def describe(self) -> str:
        """Full diagnostic report as text."""
        sections = [
            RULE,
            f"  DECISION ANALYSIS: {self.title or 'Untitled decision'}",
            RULE,
        ]
        
        tied = self.co_winners
        if len(tied) > 1:
            names = ", ".join(r.option.name for r in tied)
            sections.append(f"  Recommendation: tie between {names} ({self.winner.total_score:.2f})")
        else:
            sections.append(f"  Recommendation: {self.winner.option.name} ({self.winner.total_score:.2f})")
        sections.append("")
        
        sections.append("RANKING")
        sections.append("-" * 40)
        for r in self.ranked:
            marker = " (tie)" if r.is_tied else ""
            sections.append(f"  #{r.rank} {r.option.name}: {r.total_score:.2f}{marker}")
        sections.append("")
        
        sections.append("WEIGHTS")
        sections.append("-" * 40)
        names = {e.criterion_id: e.criterion_name for e in self.winner.breakdown}
        for cid, percent in self.display_weights.items():
            sections.append(f"  {names.get(cid, cid)}: {percent}%")
        sections.append("")
        
        sections.append(self.confidence.describe())
        sections.append("")
        
        if self.flip_points:
            sections.append("Sensitivity (flip points):")
            for fp in self.flip_points:
                sections.append(f"  {fp.describe()}")
            sections.append("")
        
        sections.append(self.risk.describe())
        sections.append("")
        sections.append(self.satisficers.describe())
        sections.append("")
        
        if self.impacts:
            sections.append("Criteria impact:")
            for impact in self.impacts:
                sections.append(
                    f"  {impact.criterion_name}: {impact.impact_score:.2f} ({impact.tier})"
                )
            sections.append("")
        
        notes = self.integrity.warnings + self.integrity.advisories
        if notes:
            sections.append("Notes:")
            for note in notes:
                sections.append(f"  - {note}")
        
        return "\n".join(sections).rstrip() + "\n"
    
    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return {
            "title": self.title,
            "summary": self.summary,
            "weights": {str(k): v for k, v in self.weights.items()},
            "display_weights": {str(k): v for k, v in self.display_weights.items()},
            "ranking": [r.to_dict() for r in self.ranked],
            "flip_points": [fp.to_dict() for fp in self.flip_points],
            "confidence": self.confidence.to_dict(),
            "risk": self.risk.to_dict(),
            "satisficers": self.satisficers.to_dict(),
            "criteria_impact": [i.to_dict() for i in self.impacts],
            "integrity": {
                "valid": self.integrity.is_valid,
                "orphaned_ratings": [list(k) for k in self.integrity.orphaned_ratings],
                "orphaned_importances": self.integrity.orphaned_importances,
                "missing_ratings": self.integrity.missing_ratings,
                "warnings": self.integrity.warnings,
                "advisories": self.integrity.advisories,
            },
        }


class DecisionAnalyzer:
    """
    Runs the full analysis pipeline over a decision model.
    
    The model is only read. Scores are computed once and every analyzer
    works from the same immutable result list.
    """
    
    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize analyzer.
        
        Args:
            config: Analysis settings (defaults apply when None)
            rng: Random source for the stability simulation; when None one
                is created from ``config.seed``
        """
        self.config = config or AnalysisConfig()
        self.rng = rng
    
    def analyze(self, model: "DecisionModel") -> DecisionAnalysis:
        """
        Score, rank and diagnose a decision.
        
        Raises:
            ConfigurationError: If the model has no options
        """
        if not model.options:
            raise ConfigurationError("Cannot analyze a decision with no options")
        
        config = self.config
        weights = model.normalized_weights()
        ranked = rank_results(score_model(model, weights))
        
        flip_points = SensitivityAnalyzer(ranked).compute_flip_points()
        
        rng = self.rng if self.rng is not None else np.random.default_rng(config.seed)
        confidence = ConfidenceAnalyzer(
            ranked,
            flip_points=flip_points,
            trials=config.stability_trials,
            noise=config.stability_noise,
            rng=rng,
        ).compute_full_report()
        
        risk = RiskAnalyzer(ranked).compute_full_report()
        satisficers = SatisficerAnalyzer(
            ranked,
            thresholds=config.satisficer_thresholds,
            strong_rating=config.strong_rating,
            watch_rating=config.watch_rating,
        ).compute_satisficers()
        impacts = CriteriaImpactAnalyzer(ranked, tier_size=config.impact_tier_size).compute_impacts()
        integrity = model.check_integrity()
        
        summary = {
            "options": len(model.options),
            "criteria": len(model.criteria),
            "winner": ranked[0].option.name,
            "winner_score": ranked[0].total_score,
            "tied_winners": len(winners(ranked)),
            "confidence": confidence.confidence_percentage,
            "confidence_level": confidence.level,
            "highest_risk": risk.highest_severity,
        }
        
        logger.info(
            "decision_analyzed",
            options=summary["options"],
            criteria=summary["criteria"],
            winner=summary["winner"],
            confidence=summary["confidence"],
        )
        
        return DecisionAnalysis(
            title=model.title,
            weights=weights,
            display_weights=model.display_weights(),
            ranked=ranked,
            flip_points=flip_points,
            confidence=confidence,
            risk=risk,
            satisficers=satisficers,
            impacts=impacts,
            integrity=integrity,
            summary=summary,
        )
