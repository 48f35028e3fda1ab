"""
Interactive what-if exploration.

A WhatIfSession works on its own deep copy of a decision model so that
adjusting weights never touches the committed decision. Weight changes are
stored immediately, evaluated after a short quiet period, and cached by the
full weight vector so revisiting a slider position does not rescore.
"""

from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from decision_engine.config import WhatIfConfig
from decision_engine.engine.ranking import RankedResult, rank_results
from decision_engine.engine.scoring import score_options
from decision_engine.engine.weights import normalize_raw_weights
from decision_engine.log import get_logger
from decision_engine.whatif.cache import FIFOCache
from decision_engine.whatif.debounce import DebounceState, Debouncer

if TYPE_CHECKING:
    from decision_engine.engine.model import DecisionModel

logger = get_logger(__name__)

PREVIEW_SIZE = 3


@dataclass(frozen=True)
class WhatIfEvaluation:
    """Cached outcome for one weight vector."""
    weights: Tuple[Tuple[int, float], ...]
    ranked: Tuple[RankedResult, ...]


@dataclass
class WhatIfResult:
    """
    Result of evaluating the current working weights.
    
    Attributes:
        weights: Normalized weights used (criterion id -> percent)
        ranked: Ranked results under those weights
        winner_changed: Whether the top option differs from the previous evaluation
        previous_winner_id: Winner before this evaluation
        baseline_winner_id: Winner under the committed weights
        from_cache: Whether the ranking came from the cache
    """
    weights: Dict[int, float]
    ranked: Tuple[RankedResult, ...]
    winner_changed: bool
    previous_winner_id: Optional[int]
    baseline_winner_id: Optional[int]
    from_cache: bool = False
    
    @property
    def winner(self) -> Optional[RankedResult]:
        return self.ranked[0] if self.ranked else None
    
    @property
    def differs_from_baseline(self) -> bool:
        return self.winner is not None and self.winner.option.id != self.baseline_winner_id
    
    def preview(self) -> List[RankedResult]:
        """Top options for an impact preview."""
        return list(self.ranked[:PREVIEW_SIZE])
    
    def describe(self) -> str:
        if self.winner is None:
            return "No options to rank"
        head = "Winner changed! Now" if self.winner_changed else "Same winner"
        top = ", ".join(f"{r.option.name} ({r.total_score:.2f})" for r in self.preview())
        return f"{head}: {self.winner.option.name} ({self.winner.total_score:.2f})\nTop {PREVIEW_SIZE}: {top}"


def weights_key(weights: Mapping[int, float]) -> str:
    """Serialize a full weight vector into a cache key."""
    return json.dumps(sorted((int(cid), float(value)) for cid, value in weights.items()))


class WhatIfSession:
    """
    Isolated, debounced weight exploration over a decision model.
    
    Example:
        session = WhatIfSession(model)
        session.set_weight(price_id, 60)
        session.set_weight(quality_id, 15)
        result = session.flush()        # or poll() from an event loop
        if result.winner_changed:
            print(result.describe())
    """
    
    def __init__(
        self,
        model: "DecisionModel",
        config: Optional[WhatIfConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize a session.
        
        Args:
            model: Committed decision model (deep-copied, never modified)
            config: Debounce and cache settings
            clock: Monotonic time source for the debounce timer
        """
        self.config = config or WhatIfConfig()
        self.cache: FIFOCache[str, WhatIfEvaluation] = FIFOCache(self.config.cache_capacity)
        self.debouncer = Debouncer(self.config.debounce_seconds, clock=clock)
        self._source = model
        self._load(model)
    
    def _load(self, model: "DecisionModel") -> None:
        self.working = model.clone()
        self.committed_weights = self.working.normalized_weights()
        self.raw_weights: Dict[int, float] = dict(self.committed_weights)
        
        baseline = self._evaluate_vector(self.committed_weights)
        self.baseline_winner_id = baseline.ranked[0].option.id if baseline.ranked else None
        self.current_winner_id = self.baseline_winner_id
        self.last_result: Optional[WhatIfResult] = None
    
    @property
    def state(self) -> DebounceState:
        return self.debouncer.state
    
    @property
    def is_modified(self) -> bool:
        return self.raw_weights != self.committed_weights
    
    def set_weight(self, criterion_id: int, value: float) -> None:
        """
        Store a raw weight and (re-)arm the debounce timer.
        
        The raw value is visible immediately through ``raw_weights``;
        rescoring waits for the quiet period.
        """
        if criterion_id not in self.raw_weights:
            raise KeyError(f"Unknown criterion id: {criterion_id}")
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Weight must be a finite number >= 0, got {value}")
        self.raw_weights[criterion_id] = float(value)
        self.debouncer.trigger()
    
    def normalized_weights(self) -> Dict[int, float]:
        return normalize_raw_weights(self.raw_weights)
    
    def poll(self) -> Optional[WhatIfResult]:
        """Evaluate if the debounce timer has fired; otherwise return None."""
        if not self.debouncer.begin():
            return None
        return self._run()
    
    def flush(self) -> Optional[WhatIfResult]:
        """Evaluate a pending change immediately, skipping the remaining wait."""
        if not self.debouncer.begin(force=True):
            return None
        return self._run()
    
    def evaluate(self) -> WhatIfResult:
        """Evaluate the current weights regardless of debounce state."""
        self.debouncer.cancel()
        self.debouncer.state = DebounceState.EVALUATING
        return self._run()
    
    def _run(self) -> WhatIfResult:
        try:
            weights = self.normalized_weights()
            key = weights_key(self.raw_weights)
            cached = self.cache.get(key)
            if cached is None:
                evaluation = self._evaluate_vector(weights)
                self.cache.put(key, evaluation)
            else:
                evaluation = cached
                logger.debug("whatif_cache_hit", key=key)
            
            winner_id = evaluation.ranked[0].option.id if evaluation.ranked else None
            previous = self.current_winner_id
            result = WhatIfResult(
                weights=dict(evaluation.weights),
                ranked=evaluation.ranked,
                winner_changed=winner_id != previous,
                previous_winner_id=previous,
                baseline_winner_id=self.baseline_winner_id,
                from_cache=cached is not None,
            )
            if result.winner_changed:
                logger.info("whatif_winner_changed", previous=previous, winner=winner_id)
            
            self.current_winner_id = winner_id
            self.last_result = result
            return result
        finally:
            self.debouncer.finish()
    
    def _evaluate_vector(self, weights: Mapping[int, float]) -> WhatIfEvaluation:
        scored = score_options(
            self.working.options,
            self.working.criteria,
            self.working.ratings,
            weights,
        )
        return WhatIfEvaluation(
            weights=tuple(weights.items()),
            ranked=tuple(rank_results(scored)),
        )
    
    def reset(self) -> None:
        """
        Discard the working copy and start over from the committed model.
        
        Pending changes are dropped and the cache entry for the abandoned
        weight vector is removed.
        """
        self.debouncer.cancel()
        self.cache.discard(weights_key(self.raw_weights))
        self._load(self._source)
        logger.debug("whatif_reset")
