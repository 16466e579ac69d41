"""
Analysis Pipeline
=================

Runs Loader -> Detector -> Rule Engine -> Advisor over one dependency
report. Each stage runs to completion before the next; the only I/O is
reading the report.

Strategy:
- strict: a failing conflict with no applicable recommendation raises
  UnresolvableConflictError
- lenient: the same situation becomes a warning diagnostic
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from depdoctor_common import DEPDOCTOR_VERSION, MalformedInputError, UnresolvableConflictError
from depdoctor_common.logger import clear_run_id, get_logger, set_run_id
from depdoctor_schema import AnalyzerSettings

from ..dependencies.advisor import Advice, MitigationAdvisor, Recommendation
from ..dependencies.detector import ConflictDetector, ConflictReport
from ..dependencies.graph import (
    SEVERITY_INFO,
    SEVERITY_WARNING,
    DependencyGraph,
    Diagnostic,
    GraphLoader,
)
from ..dependencies.rules import RuleEngine, RuleSet, RuleVerdict
from .loader import load_rule_set

logger = get_logger(__name__)

ReportSource = Union[DependencyGraph, str, Iterable[Any]]


@dataclass
class AnalysisResult:
    """Outcome of one analysis run."""

    run_id: str
    settings: AnalyzerSettings
    graph: Dict[str, int]
    advice: List[Advice] = field(default_factory=list)
    violations: List[RuleVerdict] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    rule_source: Optional[str] = None

    @property
    def reports(self) -> List[ConflictReport]:
        return [a.report for a in self.advice]

    @property
    def failing(self) -> List[Advice]:
        """Conflicts whose winning version violates its rule."""
        return [a for a in self.advice if a.needs_action]

    @property
    def unresolvable(self) -> List[Advice]:
        return [a for a in self.advice if a.unresolvable]

    @property
    def recommendations(self) -> List[Recommendation]:
        return [a.recommendation for a in self.advice if a.recommendation is not None]

    @property
    def ok(self) -> bool:
        return not self.failing

    def exit_code(self) -> int:
        """Non-zero only for strict runs with failing conflicts."""
        return 1 if self.settings.is_strict and not self.ok else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": {"name": "depdoctor", "version": DEPDOCTOR_VERSION},
            "run_id": self.run_id,
            "settings": self.settings.model_dump(by_alias=True),
            "rule_source": self.rule_source,
            "graph": self.graph,
            "summary": {
                "conflicts": len(self.advice),
                "failing": len(self.failing),
                "unresolvable": len(self.unresolvable),
                "violations": len(self.violations),
                "ok": self.ok,
            },
            "conflicts": [a.to_dict() for a in self.advice],
            "violations": [v.to_dict() for v in self.violations],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class Analyzer:
    """
    Facade over the analysis pipeline.

    The RuleSet is loaded once per Analyzer and never mutated, so one
    Analyzer can analyze several independent reports.
    """

    def __init__(
        self,
        settings: Optional[AnalyzerSettings] = None,
        rule_set: Optional[RuleSet] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            settings: Analyzer settings (defaults when None)
            rule_set: Pre-loaded rules; loaded from ``settings.rule_set``
                (or the built-in defaults) when None
        """
        self.settings = settings or AnalyzerSettings()
        self.rule_set = rule_set if rule_set is not None else load_rule_set(self.settings.rule_set)
        self.detector = ConflictDetector(resolution=self.settings.resolution)
        self.engine = RuleEngine(self.rule_set)
        self.advisor = MitigationAdvisor(self.rule_set, shade_prefix=self.settings.shade_prefix)

    def load(self, source: ReportSource) -> DependencyGraph:
        """
        Turn a report into a graph.

        Args:
            source: A DependencyGraph, tree report text, or structured edges

        Raises:
            MalformedInputError: If the report cannot be tokenized
        """
        if isinstance(source, DependencyGraph):
            return source
        loader = GraphLoader()
        if isinstance(source, str):
            return loader.load_tree(source)
        return loader.load_edges(source)

    def analyze(self, source: ReportSource) -> AnalysisResult:
        """
        Run the full pipeline.

        Raises:
            MalformedInputError: If the report cannot be tokenized
            UnresolvableConflictError: In strict mode, when a failing
                conflict has no applicable recommendation
        """
        run_id = set_run_id()
        try:
            graph = self.load(source)
            diagnostics = list(graph.diagnostics)
            diagnostics.extend(
                Diagnostic(severity=SEVERITY_WARNING, code="INVALID_RULE", message=problem)
                for problem in self.rule_set.problems
            )

            reports = list(self.detector.detect(graph))
            evaluations = [self.engine.check(report) for report in reports]
            advice = self.advisor.advise_all(evaluations)
            violations = self.engine.audit(graph, skip=[r.artifact for r in reports])

            for item in advice:
                if item.evaluation.low_confidence:
                    diagnostics.append(
                        Diagnostic(
                            severity=SEVERITY_INFO,
                            code="LOW_CONFIDENCE",
                            message=(
                                f"{item.report.artifact}: non-standard version strings, "
                                "compared lexically"
                            ),
                        )
                    )

            unresolvable = [a for a in advice if a.unresolvable]
            if unresolvable:
                artifacts = [str(a.report.artifact) for a in unresolvable]
                if self.settings.is_strict:
                    raise UnresolvableConflictError(
                        artifacts,
                        resolution_hints=[
                            "Declare the artifact with its group id so it can be relocated",
                            "Add a BOM covering the artifact to the rule set",
                            "Request a version that satisfies the rule from one of its parents",
                        ],
                    )
                for artifact in artifacts:
                    diagnostics.append(
                        Diagnostic(
                            severity=SEVERITY_WARNING,
                            code="UNRESOLVABLE_CONFLICT",
                            message=f"{artifact}: no applicable mitigation",
                        )
                    )

            result = AnalysisResult(
                run_id=run_id,
                settings=self.settings,
                graph=graph.summary(),
                advice=advice,
                violations=violations,
                diagnostics=diagnostics,
                rule_source=self.rule_set.source,
            )
            logger.info(
                "Analysis complete",
                conflicts=len(advice),
                failing=len(result.failing),
                violations=len(violations),
            )
            return result
        finally:
            clear_run_id()

    def analyze_file(self, path: Union[str, Path]) -> AnalysisResult:
        """
        Analyze a report file.

        ``.json`` files hold structured edges (a list, or a mapping with an
        ``edges`` key); anything else is read as tree output.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MalformedInputError: If the report cannot be tokenized
        """
        return self.analyze(read_report(path))


def read_report(path: Union[str, Path]) -> ReportSource:
    """Read a report file into text or a list of structured edges."""
    report_path = Path(path)
    if not report_path.exists():
        raise FileNotFoundError(f"Dependency report not found: {report_path}")

    content = report_path.read_text(encoding="utf-8")
    if report_path.suffix.lower() != ".json":
        return content

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON in {report_path}: {e.msg}", line_number=e.lineno) from e
    if isinstance(data, dict):
        data = data.get("edges")
    if not isinstance(data, list):
        raise MalformedInputError(f"Expected a list of edges in {report_path}")
    return data


def analyze(
    source: ReportSource,
    settings: Optional[AnalyzerSettings] = None,
    rule_set: Optional[RuleSet] = None,
) -> AnalysisResult:
    """
    Convenience function running one analysis.

    Args:
        source: A DependencyGraph, tree report text, or structured edges
        settings: Analyzer settings (defaults when None)
        rule_set: Pre-loaded rules (built-in defaults when None)

    Returns:
        AnalysisResult
    """
    return Analyzer(settings=settings, rule_set=rule_set).analyze(source)
