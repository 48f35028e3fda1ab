"""
Report generation for decision analyses.

Produces formatted reports as plain text or JSON.
"""

from __future__ import annotations

import json
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decision_engine.output.diagnostics import DecisionAnalysis


class ReportFormat(Enum):
    """Available report formats."""
    TEXT = auto()
    JSON = auto()
    
    @classmethod
    def from_name(cls, name: str) -> "ReportFormat":
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown format: {name}") from None


class Reporter:
    """
    Generates formatted reports from a decision analysis.
    """
    
    def __init__(self, analysis: "DecisionAnalysis"):
        """
        Initialize reporter.
        
        Args:
            analysis: Decision analysis to report on
        """
        self.analysis = analysis
    
    def generate(self, format: ReportFormat = ReportFormat.TEXT) -> str:
        """
        Generate report in specified format.
        
        Args:
            format: Output format
        
        Returns:
            Formatted report string
        """
        if format == ReportFormat.TEXT:
            return self._generate_text()
        elif format == ReportFormat.JSON:
            return self._generate_json()
        else:
            raise ValueError(f"Unknown format: {format}")
    
    def _generate_text(self) -> str:
        return self.analysis.describe()
    
    def _generate_json(self) -> str:
        data = self.analysis.to_dict()
        return json.dumps(data, indent=2, default=str)
