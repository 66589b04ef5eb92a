"""Dependency graph analysis for source repositories."""

from depscope.analyzer import Analyzer, analyze, fingerprint
from depscope.models import Report, SourceFile
from depscope.risk import RiskThresholds

__all__ = [
    "Analyzer",
    "Report",
    "RiskThresholds",
    "SourceFile",
    "analyze",
    "fingerprint",
]
