"""depdoctor SDK - Diagnose dependency version conflicts in JVM builds.

This package provides tools for:
- Loading Maven / Gradle dependency trees and structured edge lists
- Detecting artifacts requested at several versions
- Checking resolved versions against compatibility rules
- Recommending BOM alignment, version bumps or shading
- Rendering shading-plugin stubs and text reports

Example:
    >>> from depdoctor_sdk import analyze, render_shade_config
    >>> result = analyze(open("tree.txt").read())
    >>> for advice in result.failing:
    ...     print(advice.report.artifact, advice.recommendation.describe())
    >>> print(render_shade_config(result.advice, style="maven"))

Package Structure:
    depdoctor_sdk/
    ├── dependencies/   - Versions, loader, detector, rule engine, advisor
    ├── core/           - Settings / rule-set loading and the pipeline
    ├── rules/          - Built-in default rule set
    └── templates/      - Jinja2 templates for shade stubs and reports
"""

from depdoctor_common import DEPDOCTOR_VERSION

# Core pipeline
from .core import (
    DEFAULT_RULESET_PATH,
    AnalysisResult,
    Analyzer,
    analyze,
    load_rule_set,
    load_settings,
    read_report,
)

# Dependency analysis building blocks
from .dependencies import (
    Advice,
    ArtifactKey,
    ConflictDetector,
    ConflictReport,
    DependencyGraph,
    GraphLoader,
    MitigationAdvisor,
    Recommendation,
    RecommendationKind,
    RuleEngine,
    RuleSet,
    detect_conflicts,
    load_edges,
    load_tree,
    parse_version,
)

# Templates
from .templates import render_shade_config, render_text

__version__ = DEPDOCTOR_VERSION

__all__ = [
    # Core
    "AnalysisResult",
    "Analyzer",
    "analyze",
    "load_rule_set",
    "load_settings",
    "read_report",
    "DEFAULT_RULESET_PATH",
    # Dependencies
    "Advice",
    "ArtifactKey",
    "ConflictDetector",
    "ConflictReport",
    "DependencyGraph",
    "GraphLoader",
    "MitigationAdvisor",
    "Recommendation",
    "RecommendationKind",
    "RuleEngine",
    "RuleSet",
    "detect_conflicts",
    "load_edges",
    "load_tree",
    "parse_version",
    # Templates
    "render_shade_config",
    "render_text",
    # Version
    "__version__",
]
