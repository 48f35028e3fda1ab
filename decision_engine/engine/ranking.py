"""
Ranking with tie handling.

Standard competition ranking: every member of a tie group shares a rank and
the next group's rank skips by the group size (5, 5, 3 -> 1, 1, 3).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from decision_engine.engine.scoring import SCORE_PRECISION, ScoredResult


@dataclass(frozen=True)
class RankedResult(ScoredResult):
    """
    A scored option with its position in the ranking.
    
    Attributes:
        rank: 1-based competition rank
        is_tied: Whether another option shares this rank
        tie_group_size: Number of options sharing this rank
    """
    rank: int = 1
    is_tied: bool = False
    tie_group_size: int = 1
    
    @property
    def is_co_winner(self) -> bool:
        return self.rank == 1 and self.is_tied
    
    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "rank": self.rank,
            "is_tied": self.is_tied,
            "tie_group_size": self.tie_group_size,
        })
        return data


def scores_tied(a: float, b: float) -> bool:
    """Whether two totals are equal at SCORE_PRECISION decimal digits."""
    return round(a, SCORE_PRECISION) == round(b, SCORE_PRECISION)


def rank_results(results: Iterable[ScoredResult]) -> List[RankedResult]:
    """
    Sort by total score (descending) and assign competition ranks.
    
    Options with equal scores keep their input order.
    """
    ordered = sorted(results, key=lambda r: r.total_score, reverse=True)
    
    groups: List[List[ScoredResult]] = []
    for result in ordered:
        if groups and scores_tied(groups[-1][0].total_score, result.total_score):
            groups[-1].append(result)
        else:
            groups.append([result])
    
    ranked = []
    rank = 1
    for group in groups:
        size = len(group)
        for result in group:
            ranked.append(RankedResult(
                option=result.option,
                total_score=result.total_score,
                breakdown=result.breakdown,
                rank=rank,
                is_tied=size > 1,
                tie_group_size=size,
            ))
        rank += size
    
    return ranked


def winners(ranked: List[RankedResult]) -> List[RankedResult]:
    """All options sharing rank 1."""
    return [r for r in ranked if r.rank == 1]
