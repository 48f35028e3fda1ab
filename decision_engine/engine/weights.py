"""
Weight normalization.

Ordinal importances (1-5) are mapped onto an approximately exponential curve
(each step is worth ~1.778x the previous one) and normalized to percentages
that sum to 100. Percentages keep their fractional part; integer rounding is
only done by apportion_percentages() for renderers that need it.
"""

from __future__ import annotations

import math
from typing import Dict, Mapping

from decision_engine.log import get_logger

logger = get_logger(__name__)

IMPORTANCE_WEIGHTS: Dict[int, float] = {
    1: 1.0,
    2: 1.78,
    3: 3.16,
    4: 5.62,
    5: 10.0,
}

DEFAULT_IMPORTANCE = 3


def normalize_importances(importances: Mapping[int, int]) -> Dict[int, float]:
    """
    Convert importances to percentage weights.
    
    Args:
        importances: criterion id -> importance (1-5)
    
    Returns:
        criterion id -> percentage, summing to 100 (empty for no criteria)
    """
    mapped = {cid: IMPORTANCE_WEIGHTS[importance] for cid, importance in importances.items()}
    return _to_percentages(mapped)


def normalize_raw_weights(raw: Mapping[int, float]) -> Dict[int, float]:
    """
    Rescale an arbitrary non-negative weight vector to sum to 100.
    
    An all-zero vector falls back to an equal split.
    """
    return _to_percentages(dict(raw))


def _to_percentages(values: Dict[int, float]) -> Dict[int, float]:
    if not values:
        return {}
    
    total = sum(values.values())
    if total <= 0:
        share = 100.0 / len(values)
        logger.info("weights_equal_split", criteria=len(values))
        return {cid: share for cid in values}
    
    return {cid: value / total * 100 for cid, value in values.items()}


def apportion_percentages(weights: Mapping[int, float]) -> Dict[int, int]:
    """
    Round percentages to integers that sum to exactly 100.
    
    Largest-remainder method: floor every value, then hand the missing
    points to the entries with the largest fractional parts (earlier
    entries win ties).
    """
    if not weights:
        return {}
    
    floors = {cid: math.floor(value) for cid, value in weights.items()}
    remainder = 100 - sum(floors.values())
    
    by_fraction = sorted(
        weights,
        key=lambda cid: weights[cid] - floors[cid],
        reverse=True,
    )
    for cid in by_fraction[:max(0, remainder)]:
        floors[cid] += 1
    
    return floors
