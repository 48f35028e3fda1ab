"""
Persisted decision document.

Schema of the JSON document exchanged with import/export collaborators:
``title, description, timestamp, options, criteria, weights (raw importances),
normalizedWeights, ratings, version``. Ratings are keyed
``"<optionId>-<criterionId>"``. Older documents that used ``decision`` for the
title still load.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from decision_engine.engine.model import (
    DEFAULT_IMPORTANCE,
    MAX_RATING,
    MIN_RATING,
    Criterion,
    DecisionModel,
    Option,
)
from decision_engine.engine.weights import normalize_importances
from decision_engine.errors import DocumentError
from decision_engine.log import get_logger

logger = get_logger(__name__)

DOCUMENT_VERSION = "1.1"

# Stored normalized weights further than this from the recomputed ones are reported.
WEIGHT_DRIFT_TOLERANCE = 1e-6


class OptionEntry(BaseModel):
    id: int
    name: str
    description: str = ""


class CriterionEntry(BaseModel):
    id: int
    name: str
    description: str = ""


class DecisionDocument(BaseModel):
    """Validated form of a persisted decision."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    title: str = ""
    decision: Optional[str] = Field(default=None, exclude=True)
    description: str = ""
    timestamp: Optional[str] = None
    options: List[OptionEntry] = Field(default_factory=list)
    criteria: List[CriterionEntry] = Field(default_factory=list)
    weights: Dict[int, int] = Field(default_factory=dict)
    normalized_weights: Optional[Dict[int, float]] = Field(default=None, alias="normalizedWeights")
    ratings: Dict[str, float] = Field(default_factory=dict)
    version: str = DOCUMENT_VERSION
    
    @field_validator("weights")
    @classmethod
    def validate_importances(cls, v):
        for key, importance in v.items():
            if not 1 <= importance <= 5:
                raise ValueError(f"importance for criterion {key} must be 1-5, got {importance}")
        return v
    
    @field_validator("ratings")
    @classmethod
    def validate_ratings(cls, v):
        for key, rating in v.items():
            parse_rating_key(key)
            if not MIN_RATING <= rating <= MAX_RATING:
                raise ValueError(f"rating {key} must be {MIN_RATING}-{MAX_RATING}, got {rating}")
        return v
    
    @property
    def resolved_title(self) -> str:
        return self.title or self.decision or ""


def parse_rating_key(key: str) -> Tuple[int, int]:
    """Split ``"<optionId>-<criterionId>"`` into integer ids."""
    option_part, sep, criterion_part = key.partition("-")
    if not sep:
        raise ValueError(f"rating key must look like '<optionId>-<criterionId>', got {key!r}")
    return int(option_part), int(criterion_part)


def format_rating_key(option_id: int, criterion_id: int) -> str:
    return f"{option_id}-{criterion_id}"


def document_to_model(data: Dict[str, Any]) -> DecisionModel:
    """
    Rehydrate a DecisionModel from a persisted document.
    
    Normalized weights are always recomputed from the importances; a stored
    ``normalizedWeights`` block that disagrees is logged and ignored.
    
    Raises:
        DocumentError: If the document fails validation
    """
    try:
        doc = DecisionDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Invalid decision document: {e}") from e
    
    criterion_ids = {c.id for c in doc.criteria}
    importances = dict(doc.weights)
    
    criteria = [
        Criterion(
            id=c.id,
            name=c.name,
            description=c.description,
            importance=importances.get(c.id, DEFAULT_IMPORTANCE),
        )
        for c in doc.criteria
    ]
    options = [Option(id=o.id, name=o.name, description=o.description) for o in doc.options]
    ratings = {parse_rating_key(k): v for k, v in doc.ratings.items()}
    extra = {cid: imp for cid, imp in importances.items() if cid not in criterion_ids}
    
    model = DecisionModel(
        title=doc.resolved_title,
        description=doc.description,
        options=options,
        criteria=criteria,
        ratings=ratings,
        extra_importances=extra,
    )
    
    if doc.normalized_weights:
        _check_stored_weights(model, doc.normalized_weights)
    
    logger.debug(
        "document_loaded",
        version=doc.version,
        options=len(options),
        criteria=len(criteria),
        ratings=len(ratings),
    )
    return model


def _check_stored_weights(model: DecisionModel, stored: Dict[int, float]) -> None:
    expected = model.normalized_weights()
    for cid, value in stored.items():
        if cid in expected and abs(expected[cid] - value) > WEIGHT_DRIFT_TOLERANCE:
            logger.warning(
                "stored_weights_recomputed",
                criterion_id=cid,
                stored=value,
                recomputed=expected[cid],
            )


def model_to_document(model: DecisionModel, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Export a DecisionModel as a JSON-serializable document."""
    weights = {str(cid): importance for cid, importance in model.importances().items()}
    return {
        "title": model.title,
        "description": model.description,
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        "options": [
            {"id": o.id, "name": o.name, "description": o.description}
            for o in model.options
        ],
        "criteria": [
            {"id": c.id, "name": c.name, "description": c.description}
            for c in model.criteria
        ],
        "weights": weights,
        "normalizedWeights": {
            str(cid): value
            for cid, value in normalize_importances(model.importances()).items()
        },
        "ratings": {
            format_rating_key(oid, cid): value
            for (oid, cid), value in model.ratings.items()
        },
        "version": DOCUMENT_VERSION,
    }
