"""
Risk analysis for the recommended option.

Three independent views of what could go wrong with the winner:

- vulnerability: criteria where the winner performs poorly relative to
  their weight
- dependency: the recommendation leaning heavily on a single criterion
- opportunity cost: value forfeited where an alternative is clearly better
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from decision_engine.errors import ConfigurationError
from decision_engine.log import get_logger

if TYPE_CHECKING:
    from decision_engine.engine.scoring import ScoredResult

logger = get_logger(__name__)

SEVERITY_ORDER = {"critical": 3, "high": 2, "moderate": 1, "low": 0}

# Ratings below this count as under-performing for vulnerability purposes.
ADEQUATE_RATING = 3.0
VULNERABILITY_RISK_THRESHOLD = 0.15

CONCENTRATION_WEIGHT = 35
HIGH_CONCENTRATION_WEIGHT = 50
CRITICAL_DEPENDENCY_WEIGHT = 25
CRITICAL_DEPENDENCY_RATING = 3.5
WEAK_DEPENDENCY_RATING = 2.5

MIN_OPPORTUNITY_GAP = 1.5
MIN_OPPORTUNITY_WEIGHT = 15
MIN_OPPORTUNITY_COST = 5
MAX_OPPORTUNITIES = 5


@dataclass
class Vulnerability:
    criterion_id: int
    criterion_name: str
    rating: float
    weight: float
    performance_gap: float
    risk_score: float
    severity: str
    
    @property
    def summary(self) -> str:
        return (
            f"Weak performance on {self.criterion_name} "
            f"({self.rating:.1f}/5 at {self.weight:.0f}% weight)"
        )


@dataclass
class Dependency:
    """
    Over-reliance on one criterion.
    
    Attributes:
        kind: "concentration" (the weight alone is large) or
            "critical_dependency" (a heavy criterion the winner rates weakly on)
    """
    criterion_id: int
    criterion_name: str
    kind: str
    rating: float
    weight: float
    severity: str
    
    @property
    def summary(self) -> str:
        if self.kind == "concentration":
            return f"{self.weight:.0f}% of the decision rests on {self.criterion_name}"
        return (
            f"Heavily weighted {self.criterion_name} ({self.weight:.0f}%) "
            f"where the winner only rates {self.rating:.1f}/5"
        )


@dataclass
class OpportunityCost:
    criterion_id: int
    criterion_name: str
    winner_rating: float
    best_alternative_id: int
    best_alternative_name: str
    alternative_rating: float
    performance_gap: float
    weight: float
    opportunity_cost: float
    severity: str
    
    @property
    def summary(self) -> str:
        return (
            f"{self.best_alternative_name} rates {self.performance_gap:.1f} higher "
            f"on {self.criterion_name}"
        )


@dataclass
class RiskProfile:
    """
    Risk profile of the winning option.
    
    Attributes:
        winner_id: Option the profile describes
        vulnerabilities: Sorted by risk score (descending)
        dependencies: Sorted by weight (descending)
        opportunities: Top opportunity costs (descending)
        highest_severity: Worst severity across all three lists (None if clean)
        primary_concern: Summary of the single most severe item
    """
    winner_id: int
    winner_name: str
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    opportunities: List[OpportunityCost] = field(default_factory=list)
    highest_severity: Optional[str] = None
    primary_concern: Optional[str] = None
    
    @property
    def total_risks(self) -> int:
        return len(self.vulnerabilities) + len(self.dependencies) + len(self.opportunities)
    
    def counts(self) -> Dict[str, int]:
        return {
            "vulnerabilities": len(self.vulnerabilities),
            "dependencies": len(self.dependencies),
            "opportunities": len(self.opportunities),
            "total": self.total_risks,
        }
    
    def describe(self) -> str:
        """Human-readable description."""
        lines = [
            f"Risk Profile for {self.winner_name}:",
            f"  Highest Severity: {(self.highest_severity or 'none').upper()}",
        ]
        if self.primary_concern:
            lines.append(f"  Primary Concern: {self.primary_concern}")
        for label, items in (
            ("Vulnerabilities", self.vulnerabilities),
            ("Dependencies", self.dependencies),
            ("Opportunity Costs", self.opportunities),
        ):
            if items:
                lines.append(f"  {label}:")
                for item in items:
                    lines.append(f"    [{item.severity}] {item.summary}")
        if not self.total_risks:
            lines.append("  No significant risks identified")
        return "\n".join(lines)
    
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["counts"] = self.counts()
        return data


def vulnerability_severity(risk_score: float, rating: float, weight: float) -> str:
    if risk_score >= 0.25 or (rating <= 1 and weight >= 30):
        return "critical"
    elif risk_score >= 0.18 or (rating <= 1.5 and weight >= 25):
        return "high"
    elif risk_score > VULNERABILITY_RISK_THRESHOLD or (rating <= 2 and weight >= 25):
        return "moderate"
    return "low"


def opportunity_severity(cost: float) -> str:
    if cost >= 15:
        return "high"
    elif cost >= 10:
        return "moderate"
    return "low"


class RiskAnalyzer:
    """
    Classifies risks of the top-ranked option.
    
    Only the winner is profiled; alternatives are consulted for opportunity
    cost.
    """
    
    def __init__(self, results: Sequence["ScoredResult"]):
        """
        Initialize analyzer.
        
        Args:
            results: Scored (or ranked) results, any order
        
        Raises:
            ConfigurationError: If results is empty
        """
        if not results:
            raise ConfigurationError("Risk analysis requires at least one scored option")
        self.results = sorted(results, key=lambda r: r.total_score, reverse=True)
        self.winner = self.results[0]
        self.alternatives = self.results[1:]
    
    def compute_vulnerabilities(self) -> List[Vulnerability]:
        found = []
        for entry in self.winner.breakdown:
            gap = max(0.0, ADEQUATE_RATING - entry.rating) / ADEQUATE_RATING
            risk_score = gap * (entry.weight / 100)
            flagged = (
                risk_score > VULNERABILITY_RISK_THRESHOLD
                or (entry.rating <= 2 and entry.weight >= 20)
            )
            if not flagged:
                continue
            found.append(Vulnerability(
                criterion_id=entry.criterion_id,
                criterion_name=entry.criterion_name,
                rating=entry.rating,
                weight=entry.weight,
                performance_gap=gap,
                risk_score=risk_score,
                severity=vulnerability_severity(risk_score, entry.rating, entry.weight),
            ))
        return sorted(found, key=lambda v: v.risk_score, reverse=True)
    
    def compute_dependencies(self) -> List[Dependency]:
        found = []
        for entry in self.winner.breakdown:
            if entry.weight >= CONCENTRATION_WEIGHT:
                found.append(Dependency(
                    criterion_id=entry.criterion_id,
                    criterion_name=entry.criterion_name,
                    kind="concentration",
                    rating=entry.rating,
                    weight=entry.weight,
                    severity="high" if entry.weight >= HIGH_CONCENTRATION_WEIGHT else "moderate",
                ))
            if entry.weight >= CRITICAL_DEPENDENCY_WEIGHT and entry.rating < CRITICAL_DEPENDENCY_RATING:
                found.append(Dependency(
                    criterion_id=entry.criterion_id,
                    criterion_name=entry.criterion_name,
                    kind="critical_dependency",
                    rating=entry.rating,
                    weight=entry.weight,
                    severity="high" if entry.rating < WEAK_DEPENDENCY_RATING else "moderate",
                ))
        return sorted(found, key=lambda d: d.weight, reverse=True)
    
    def compute_opportunities(self) -> List[OpportunityCost]:
        if not self.alternatives:
            return []
        
        found = []
        for entry in self.winner.breakdown:
            best = max(self.alternatives, key=lambda r: r.rating_for(entry.criterion_id))
            alt_rating = best.rating_for(entry.criterion_id)
            gap = alt_rating - entry.rating
            cost = gap / 5 * (entry.weight / 100) * 100
            
            if gap >= MIN_OPPORTUNITY_GAP and entry.weight >= MIN_OPPORTUNITY_WEIGHT and cost >= MIN_OPPORTUNITY_COST:
                found.append(OpportunityCost(
                    criterion_id=entry.criterion_id,
                    criterion_name=entry.criterion_name,
                    winner_rating=entry.rating,
                    best_alternative_id=best.option.id,
                    best_alternative_name=best.option.name,
                    alternative_rating=alt_rating,
                    performance_gap=gap,
                    weight=entry.weight,
                    opportunity_cost=cost,
                    severity=opportunity_severity(cost),
                ))
        
        found.sort(key=lambda o: o.opportunity_cost, reverse=True)
        return found[:MAX_OPPORTUNITIES]
    
    def compute_full_report(self) -> RiskProfile:
        """
        Compute all three risk views and the summary.
        
        The primary concern is the most severe item; ties go to
        vulnerabilities, then dependencies, then opportunity costs, each in
        its own sort order.
        """
        vulnerabilities = self.compute_vulnerabilities()
        dependencies = self.compute_dependencies()
        opportunities = self.compute_opportunities()
        
        primary = None
        for item in [*vulnerabilities, *dependencies, *opportunities]:
            if primary is None or SEVERITY_ORDER[item.severity] > SEVERITY_ORDER[primary.severity]:
                primary = item
        
        logger.debug(
            "risks_classified",
            vulnerabilities=len(vulnerabilities),
            dependencies=len(dependencies),
            opportunities=len(opportunities),
        )
        
        return RiskProfile(
            winner_id=self.winner.option.id,
            winner_name=self.winner.option.name,
            vulnerabilities=vulnerabilities,
            dependencies=dependencies,
            opportunities=opportunities,
            highest_severity=primary.severity if primary else None,
            primary_concern=primary.summary if primary else None,
        )
