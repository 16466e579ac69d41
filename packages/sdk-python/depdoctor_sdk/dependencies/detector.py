"""
Version Conflict Detection
==========================

Finds artifacts that are requested at more than one version.

Winner selection:
1. A selection marked by the build tool wins (Gradle ``->``, Maven
   ``omitted for conflict with X`` or ``version managed from``). If marks
   disagree, the highest marked version wins.
2. Otherwise the resolution policy decides:
   - highest: the highest requested version (default)
   - nearest: the version requested closest to the root, first
     declaration breaking ties (Maven's nearest-wins)

Detection reads the graph and never mutates it, so running it twice on the
same graph yields identical reports.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from depdoctor_common import DEFAULT_RESOLUTION, SUPPORTED_RESOLUTIONS, ValidationError
from depdoctor_common.logger import get_logger

from .graph import DependencyEdge, DependencyGraph
from .parser import ArtifactKey
from .version import AnyVersion, is_opaque, parse_version

logger = get_logger(__name__)


@dataclass(frozen=True)
class VersionRequest:
    """One requested version of an artifact and who asked for it."""

    version: str
    parents: Tuple[str, ...]
    depth: int

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "parents": list(self.parents), "depth": self.depth}


@dataclass(frozen=True)
class ConflictReport:
    """
    An artifact requested at two or more distinct versions.

    Attributes:
        artifact: The conflicting artifact
        requests: One entry per distinct version, lowest version first
        winner: The version that ends up on the classpath
        marked: True if the winner came from a build-tool marker
        low_confidence: True if any version fell back to lexical ordering
    """

    artifact: ArtifactKey
    requests: Tuple[VersionRequest, ...]
    winner: str
    marked: bool = False
    low_confidence: bool = False

    @property
    def versions(self) -> List[str]:
        return [r.version for r in self.requests]

    @property
    def losing(self) -> List[VersionRequest]:
        """Requests whose version did not win."""
        winner = parse_version(self.winner)
        return [r for r in self.requests if parse_version(r.version) != winner]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": str(self.artifact),
            "versions": self.versions,
            "winner": self.winner,
            "marked": self.marked,
            "low_confidence": self.low_confidence,
            "requests": [r.to_dict() for r in self.requests],
            "losing": [r.to_dict() for r in self.losing],
        }


class ConflictDetector:
    """
    Groups edges by target artifact and reports multi-version groups.
    """

    def __init__(self, resolution: str = DEFAULT_RESOLUTION):
        """
        Initialize detector.

        Args:
            resolution: Winner policy when no build-tool marker exists
                (highest or nearest)
        """
        if resolution not in SUPPORTED_RESOLUTIONS:
            raise ValidationError(
                f"Unsupported resolution policy: '{resolution}'. "
                f"Supported values: {', '.join(SUPPORTED_RESOLUTIONS)}"
            )
        self.resolution = resolution

    def detect(self, graph: DependencyGraph) -> Iterator[ConflictReport]:
        """
        Lazily yield conflict reports, ordered by artifact key.

        Each call returns a fresh iterator over the same results.
        """
        for artifact in sorted(graph.artifacts, key=lambda a: str(a.key)):
            report = self.report_for(graph, artifact.index)
            if report is not None:
                yield report

    def report_for(self, graph: DependencyGraph, index: int) -> Optional[ConflictReport]:
        """Build the report for one artifact, or None if it has a single version."""
        edges = graph.incoming(index)
        if not edges:
            return None

        grouped = self._group_by_version(graph, edges)
        if len(grouped) < 2:
            return None

        parsed = [version for version, _ in grouped]
        requests = tuple(request for _, request in grouped)
        winner, marked = self._pick_winner(edges, parsed, requests)
        low_confidence = any(is_opaque(v) for v in parsed) or is_opaque(parse_version(winner))

        report = ConflictReport(
            artifact=graph.artifacts[index].key,
            requests=requests,
            winner=winner,
            marked=marked,
            low_confidence=low_confidence,
        )
        logger.debug(
            "Version conflict",
            artifact=str(report.artifact),
            versions=",".join(report.versions),
            winner=winner,
        )
        return report

    def _group_by_version(
        self, graph: DependencyGraph, edges: List[DependencyEdge]
    ) -> List[Tuple[AnyVersion, VersionRequest]]:
        # "1.0" and "1.0.0" are the same version; the first spelling is kept
        buckets: Dict[AnyVersion, Dict[str, Any]] = {}
        for edge in edges:
            version = parse_version(edge.requested)
            bucket = buckets.setdefault(
                version, {"label": edge.requested, "parents": set(), "depth": edge.depth}
            )
            bucket["parents"].add(str(graph.artifacts[edge.parent].key))
            bucket["depth"] = min(bucket["depth"], edge.depth)

        return [
            (
                version,
                VersionRequest(
                    version=bucket["label"],
                    parents=tuple(sorted(bucket["parents"])),
                    depth=bucket["depth"],
                ),
            )
            for version, bucket in sorted(buckets.items(), key=lambda item: item[0])
        ]

    def _pick_winner(
        self,
        edges: List[DependencyEdge],
        parsed: List[AnyVersion],
        requests: Tuple[VersionRequest, ...],
    ) -> Tuple[str, bool]:
        marks = [e.selected for e in edges if e.selected]
        if marks:
            return max(marks, key=parse_version), True

        if self.resolution == "nearest":
            nearest = min(edges, key=lambda e: (e.depth, e.order))
            target = parse_version(nearest.requested)
        else:
            target = max(parsed)

        for version, request in zip(parsed, requests):
            if version == target:
                return request.version, False
        return str(target), False


def detect_conflicts(graph: DependencyGraph, resolution: str = DEFAULT_RESOLUTION) -> List[ConflictReport]:
    """
    Convenience function returning all conflict reports of a graph.

    Args:
        graph: Loaded dependency graph
        resolution: Winner policy (highest or nearest)

    Returns:
        List of ConflictReport, ordered by artifact key
    """
    return list(ConflictDetector(resolution=resolution).detect(graph))
