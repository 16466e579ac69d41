"""
Core Module
===========

Settings and rule-set loading, and the analysis pipeline.
"""

from .analyzer import AnalysisResult, Analyzer, analyze, read_report
from .loader import DEFAULT_RULESET_PATH, load_rule_set, load_settings

__all__ = [
    "AnalysisResult",
    "Analyzer",
    "analyze",
    "read_report",
    "DEFAULT_RULESET_PATH",
    "load_rule_set",
    "load_settings",
]
