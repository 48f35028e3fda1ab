"""Output module - Diagnostics and reporting."""

from decision_engine.output.diagnostics import DecisionAnalysis, DecisionAnalyzer
from decision_engine.output.reporter import Reporter, ReportFormat

__all__ = [
    "DecisionAnalysis",
    "DecisionAnalyzer",
    "Reporter",
    "ReportFormat",
]
