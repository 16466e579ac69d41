"""
depdoctor Schema Package

Pydantic models for rule-set files and analyzer settings.

Usage:
    from depdoctor_schema import RuleSetSpec, AnalyzerSettings
"""

from .ruleset_v1 import AnalyzerSettings, BomSpec, RuleSetSpec, RuleSpec

__all__ = [
    "AnalyzerSettings",
    "BomSpec",
    "RuleSetSpec",
    "RuleSpec",
]
