"""
Decision model and lifecycle management.

The DecisionModel holds the options, criteria, importances and ratings a user
has entered. Deleting an option or criterion cascades to every rating keyed to
it so that the rating table never references a dead id.
"""

from __future__ import annotations

import copy
import itertools
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from decision_engine.engine.weights import (
    DEFAULT_IMPORTANCE,
    apportion_percentages,
    normalize_importances,
)
from decision_engine.log import get_logger

logger = get_logger(__name__)

# A missing rating means "unknown / average", not "worst".
DEFAULT_RATING = 2.5

MIN_RATING = 0.0
MAX_RATING = 5.0

# Advisory limits surfaced by check_integrity(); not enforced.
RECOMMENDED_MIN_OPTIONS = 3
RECOMMENDED_MAX_CRITERIA = 7

RatingKey = Tuple[int, int]


@dataclass
class Option:
    """A candidate the user is choosing between."""
    id: int
    name: str
    description: str = ""


@dataclass
class Criterion:
    """
    A weighted dimension options are rated on.
    
    Attributes:
        id: Unique identifier
        name: Display name
        description: Optional explanation
        importance: Ordinal importance (1 = least, 5 = most)
    """
    id: int
    name: str
    description: str = ""
    importance: int = DEFAULT_IMPORTANCE
    
    def __post_init__(self):
        validate_importance(self.importance)


@dataclass
class IntegrityReport:
    """Result of a data-integrity scan over a decision model."""
    orphaned_ratings: List[RatingKey] = field(default_factory=list)
    orphaned_importances: List[int] = field(default_factory=list)
    missing_ratings: int = 0
    warnings: List[str] = field(default_factory=list)
    advisories: List[str] = field(default_factory=list)
    
    @property
    def is_valid(self) -> bool:
        return not self.warnings


def validate_importance(importance: int) -> None:
    if importance not in (1, 2, 3, 4, 5):
        raise ValueError(f"Importance must be 1-5, got {importance}")


def normalize_rating(value: float) -> float:
    """Validate a rating and store it at 0.1 precision."""
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(f"Rating must be {MIN_RATING}-{MAX_RATING}, got {value}")
    # half-up, so 2.25 stores as 2.3
    return math.floor(float(value) * 10 + 0.5) / 10


class DecisionModel:
    """
    In-memory decision: options, criteria and the ratings table.
    
    Importances live on each Criterion; normalized weights are derived on
    demand and never stored, so they always reflect the current importances
    and criteria set.
    
    Ratings may also contain orphaned keys when loaded from an external
    document. Scoring ignores them; check_integrity() reports them and
    prune_orphans() removes them.
    """
    
    def __init__(
        self,
        title: str = "",
        description: str = "",
        options: Optional[Iterable[Option]] = None,
        criteria: Optional[Iterable[Criterion]] = None,
        ratings: Optional[Dict[RatingKey, float]] = None,
        extra_importances: Optional[Dict[int, int]] = None,
    ):
        """
        Initialize a decision model.
        
        Args:
            title: Decision title
            description: Decision description
            options: Initial options
            criteria: Initial criteria (with importances)
            ratings: Ratings keyed by (option_id, criterion_id)
            extra_importances: Importance entries with no matching criterion,
                kept only so integrity checks can report them
        """
        self.title = title
        self.description = description
        self.options: List[Option] = list(options or [])
        self.criteria: List[Criterion] = list(criteria or [])
        self.ratings: Dict[RatingKey, float] = {
            key: normalize_rating(value) for key, value in (ratings or {}).items()
        }
        self.extra_importances: Dict[int, int] = dict(extra_importances or {})
        
        used = [o.id for o in self.options] + [c.id for c in self.criteria]
        self._ids = itertools.count(max(used, default=0) + 1)
    
    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------
    
    def add_option(self, name: str, description: str = "") -> Option:
        option = Option(id=next(self._ids), name=name, description=description)
        self.options.append(option)
        return option
    
    def remove_option(self, option_id: int) -> int:
        """
        Remove an option and cascade-delete its ratings.
        
        Returns:
            Number of ratings removed
        """
        self.get_option(option_id)
        self.options = [o for o in self.options if o.id != option_id]
        removed = self._drop_ratings(lambda key: key[0] == option_id)
        logger.info("option_removed", option_id=option_id, ratings_removed=removed)
        return removed
    
    def get_option(self, option_id: int) -> Option:
        for option in self.options:
            if option.id == option_id:
                return option
        raise KeyError(f"Unknown option id: {option_id}")
    
    # ------------------------------------------------------------------
    # Criteria
    # ------------------------------------------------------------------
    
    def add_criterion(
        self,
        name: str,
        description: str = "",
        importance: int = DEFAULT_IMPORTANCE,
    ) -> Criterion:
        criterion = Criterion(
            id=next(self._ids),
            name=name,
            description=description,
            importance=importance,
        )
        self.criteria.append(criterion)
        return criterion
    
    def remove_criterion(self, criterion_id: int) -> int:
        """
        Remove a criterion, its importance and its ratings.
        
        The remaining criteria are renormalized implicitly because
        normalized weights are derived from the live criteria set.
        
        Returns:
            Number of ratings removed
        """
        self.get_criterion(criterion_id)
        self.criteria = [c for c in self.criteria if c.id != criterion_id]
        self.extra_importances.pop(criterion_id, None)
        removed = self._drop_ratings(lambda key: key[1] == criterion_id)
        logger.info("criterion_removed", criterion_id=criterion_id, ratings_removed=removed)
        return removed
    
    def get_criterion(self, criterion_id: int) -> Criterion:
        for criterion in self.criteria:
            if criterion.id == criterion_id:
                return criterion
        raise KeyError(f"Unknown criterion id: {criterion_id}")
    
    def set_importance(self, criterion_id: int, importance: int) -> None:
        validate_importance(importance)
        self.get_criterion(criterion_id).importance = importance
    
    def importances(self) -> Dict[int, int]:
        """Raw importances keyed by criterion id."""
        return {c.id: c.importance for c in self.criteria}
    
    def normalized_weights(self) -> Dict[int, float]:
        """Percentage weights (sum 100) derived from the current importances."""
        return normalize_importances(self.importances())
    
    def display_weights(self) -> Dict[int, int]:
        """Integer percentages that sum to exactly 100."""
        return apportion_percentages(self.normalized_weights())
    
    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------
    
    def set_rating(self, option_id: int, criterion_id: int, value: float) -> None:
        self.get_option(option_id)
        self.get_criterion(criterion_id)
        self.ratings[(option_id, criterion_id)] = normalize_rating(value)
    
    def clear_rating(self, option_id: int, criterion_id: int) -> None:
        self.ratings.pop((option_id, criterion_id), None)
    
    def get_rating(self, option_id: int, criterion_id: int) -> float:
        return self.ratings.get((option_id, criterion_id), DEFAULT_RATING)
    
    def _drop_ratings(self, predicate) -> int:
        doomed = [key for key in self.ratings if predicate(key)]
        for key in doomed:
            del self.ratings[key]
        return len(doomed)
    
    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------
    
    def check_integrity(self) -> IntegrityReport:
        """
        Scan for orphaned references and incomplete rating coverage.
        
        Returns:
            IntegrityReport; warnings make it invalid, advisories do not
        """
        report = IntegrityReport()
        option_ids = {o.id for o in self.options}
        criterion_ids = {c.id for c in self.criteria}
        
        for option_id, criterion_id in self.ratings:
            if option_id not in option_ids or criterion_id not in criterion_ids:
                report.orphaned_ratings.append((option_id, criterion_id))
            if option_id not in option_ids:
                report.warnings.append(f"Found rating for missing option ID: {option_id}")
            if criterion_id not in criterion_ids:
                report.warnings.append(f"Found rating for missing criterion ID: {criterion_id}")
        
        for criterion_id in self.extra_importances:
            if criterion_id not in criterion_ids:
                report.orphaned_importances.append(criterion_id)
                report.warnings.append(f"Found weight for missing criterion ID: {criterion_id}")
        
        expected = len(self.options) * len(self.criteria)
        live = len(self.ratings) - len(report.orphaned_ratings)
        report.missing_ratings = max(0, expected - live)
        
        if len(self.options) < RECOMMENDED_MIN_OPTIONS:
            report.advisories.append(
                f"Only {len(self.options)} options; comparing at least "
                f"{RECOMMENDED_MIN_OPTIONS} gives a more meaningful analysis"
            )
        if len(self.criteria) > RECOMMENDED_MAX_CRITERIA:
            report.advisories.append(
                f"{len(self.criteria)} criteria; more than {RECOMMENDED_MAX_CRITERIA} "
                f"tends to dilute the important ones"
            )
        if report.missing_ratings:
            report.advisories.append(
                f"Missing {report.missing_ratings} ratings; unrated pairs count as {DEFAULT_RATING}"
            )
        
        return report
    
    def prune_orphans(self) -> int:
        """Delete orphaned ratings and importances. Returns how many were removed."""
        report = self.check_integrity()
        for key in report.orphaned_ratings:
            del self.ratings[key]
        for criterion_id in report.orphaned_importances:
            del self.extra_importances[criterion_id]
        removed = len(report.orphaned_ratings) + len(report.orphaned_importances)
        if removed:
            logger.warning("orphans_pruned", removed=removed)
        return removed
    
    # ------------------------------------------------------------------
    # Copying and persistence
    # ------------------------------------------------------------------
    
    def clone(self) -> "DecisionModel":
        """Fully independent deep copy."""
        return copy.deepcopy(self)
    
    def to_document(self, timestamp: Optional[str] = None) -> Dict[str, Any]:
        """Export using the persisted JSON schema."""
        from decision_engine.engine.document import model_to_document
        return model_to_document(self, timestamp=timestamp)
    
    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "DecisionModel":
        """Rehydrate from the persisted JSON schema."""
        from decision_engine.engine.document import document_to_model
        return document_to_model(data)
    
    def __repr__(self) -> str:
        return (
            f"DecisionModel(title={self.title!r}, options={len(self.options)}, "
            f"criteria={len(self.criteria)}, ratings={len(self.ratings)})"
        )
