"""
Analysis configuration.

Tunable constants for the analyzers and the what-if session. Defaults match
the documented behavior; tests and the CLI override individual fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class AnalysisConfig:
    """
    Configuration for a full decision analysis.
    
    Attributes:
        stability_trials: Monte Carlo trials for the stability simulation
        stability_noise: Half-width of the uniform score perturbation
        satisficer_thresholds: Minimum-bar thresholds tried in order
        strong_rating: Rating at or above which a criterion counts as strong
        watch_rating: Rating below which a criterion needs watching
        impact_tier_size: Criteria per impact tier (None = max(1, n // 3))
        seed: Seed for the stability simulation (None = nondeterministic)
    """
    stability_trials: int = 500
    stability_noise: float = 0.2
    satisficer_thresholds: Tuple[float, ...] = (3.0, 2.5, 2.0)
    strong_rating: float = 4.0
    watch_rating: float = 3.5
    impact_tier_size: Optional[int] = None
    seed: Optional[int] = None
    
    def __post_init__(self):
        if self.stability_trials < 1:
            raise ValueError("stability_trials must be at least 1")
        if self.stability_noise < 0:
            raise ValueError(f"stability_noise must be >= 0, got {self.stability_noise}")
        if not self.satisficer_thresholds:
            raise ValueError("satisficer_thresholds must not be empty")
        if list(self.satisficer_thresholds) != sorted(self.satisficer_thresholds, reverse=True):
            raise ValueError("satisficer_thresholds must be in descending order")
        if self.impact_tier_size is not None and self.impact_tier_size < 1:
            raise ValueError("impact_tier_size must be at least 1")


@dataclass
class WhatIfConfig:
    """
    Configuration for an interactive what-if session.
    
    Attributes:
        debounce_seconds: Quiet period before a weight change is evaluated
        cache_capacity: Maximum cached weight vectors (FIFO eviction)
    """
    debounce_seconds: float = 0.15
    cache_capacity: int = 10
    
    def __post_init__(self):
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")
        if self.cache_capacity < 1:
            raise ValueError("cache_capacity must be at least 1")
