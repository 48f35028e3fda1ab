"""Metrics module - Sensitivity, confidence, risk and satisficer analysis."""

from decision_engine.metrics.sensitivity import FlipPoint, SensitivityAnalyzer
from decision_engine.metrics.confidence import ConfidenceAnalysis, ConfidenceAnalyzer
from decision_engine.metrics.risk import RiskAnalyzer, RiskProfile
from decision_engine.metrics.satisficer import (
    CriteriaImpact,
    CriteriaImpactAnalyzer,
    SatisficerAnalyzer,
    SatisficerReport,
)

__all__ = [
    "FlipPoint",
    "SensitivityAnalyzer",
    "ConfidenceAnalysis",
    "ConfidenceAnalyzer",
    "RiskAnalyzer",
    "RiskProfile",
    "CriteriaImpact",
    "CriteriaImpactAnalyzer",
    "SatisficerAnalyzer",
    "SatisficerReport",
]
