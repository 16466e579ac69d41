"""
depdoctor Dependency Analysis
=============================

Provides utilities for:
- Parsing and ordering loosely-typed JVM version strings
- Loading Maven / Gradle dependency trees into an arena graph
- Detecting artifacts resolved at several versions
- Checking versions against compatibility rules
- Recommending BOM alignment, version bumps or shading
"""

from .advisor import Advice, MitigationAdvisor, Recommendation, RecommendationKind
from .detector import ConflictDetector, ConflictReport, VersionRequest, detect_conflicts
from .graph import (
    Artifact,
    DependencyEdge,
    DependencyGraph,
    Diagnostic,
    GraphLoader,
    load_edges,
    load_tree,
)
from .parser import ArtifactKey, Coordinate, TreeLine, parse_coordinate, parse_tree_line
from .rules import Bom, CompatibilityRule, Evaluation, RuleEngine, RuleSet, RuleVerdict
from .version import (
    OpaqueVersion,
    SemanticVersion,
    VersionConstraint,
    parse_constraints,
    parse_version,
    parse_version_constraint,
)

__all__ = [
    # Versions
    "SemanticVersion",
    "OpaqueVersion",
    "VersionConstraint",
    "parse_version",
    "parse_version_constraint",
    "parse_constraints",
    # Parsing
    "ArtifactKey",
    "Coordinate",
    "TreeLine",
    "parse_coordinate",
    "parse_tree_line",
    # Graph
    "Artifact",
    "DependencyEdge",
    "DependencyGraph",
    "Diagnostic",
    "GraphLoader",
    "load_tree",
    "load_edges",
    # Detection
    "ConflictDetector",
    "ConflictReport",
    "VersionRequest",
    "detect_conflicts",
    # Rules
    "Bom",
    "CompatibilityRule",
    "Evaluation",
    "RuleEngine",
    "RuleSet",
    "RuleVerdict",
    # Advice
    "Advice",
    "MitigationAdvisor",
    "Recommendation",
    "RecommendationKind",
]
