"""
Mitigation Advice
=================

Turns rule evaluations into recommendations.

Precedence for a failing conflict:
1. A BOM covers the artifact       -> upgrade the BOM
2. A requested version passes      -> bump to the highest passing version
3. Otherwise                       -> shade under <prefix>.<group>

Every conflict report yields exactly one Advice. Passing or unconstrained
reports carry no recommendation; a failing report whose artifact has no
group cannot be relocated and is marked unresolvable.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from depdoctor_common import DEFAULT_SHADE_PREFIX
from depdoctor_common.logger import get_logger

from .detector import ConflictReport
from .parser import ArtifactKey
from .rules import Bom, Evaluation, RuleSet
from .version import parse_version

logger = get_logger(__name__)


class RecommendationKind(str, Enum):
    """Mitigation strategies."""

    UPGRADE_BOM = "upgrade-bom"
    BUMP_VERSION = "bump-version"
    SHADE = "shade"


@dataclass(frozen=True)
class Recommendation:
    """
    A mitigation for one conflicting artifact.

    Only the fields relevant to ``kind`` are set: ``bom`` for UPGRADE_BOM,
    ``target_version`` for BUMP_VERSION, ``namespace_prefix`` for SHADE.
    """

    kind: RecommendationKind
    artifact: ArtifactKey
    bom: Optional[Bom] = None
    target_version: Optional[str] = None
    namespace_prefix: Optional[str] = None

    @classmethod
    def upgrade_bom(cls, artifact: ArtifactKey, bom: Bom) -> "Recommendation":
        return cls(kind=RecommendationKind.UPGRADE_BOM, artifact=artifact, bom=bom)

    @classmethod
    def bump_version(cls, artifact: ArtifactKey, target_version: str) -> "Recommendation":
        return cls(kind=RecommendationKind.BUMP_VERSION, artifact=artifact, target_version=target_version)

    @classmethod
    def shade(cls, artifact: ArtifactKey, namespace_prefix: str) -> "Recommendation":
        return cls(kind=RecommendationKind.SHADE, artifact=artifact, namespace_prefix=namespace_prefix)

    @property
    def relocation_pattern(self) -> Optional[str]:
        """Package relocated by a SHADE recommendation (the group id)."""
        if self.kind != RecommendationKind.SHADE:
            return None
        return self.artifact.group

    def describe(self) -> str:
        if self.kind == RecommendationKind.UPGRADE_BOM:
            return (
                f"Import {self.bom.coordinates}:{self.bom.version} and drop explicit "
                f"versions of {self.artifact}"
            )
        if self.kind == RecommendationKind.BUMP_VERSION:
            return f"Pin {self.artifact} to {self.target_version}"
        return f"Shade {self.artifact.group} into {self.namespace_prefix}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "artifact": str(self.artifact),
            "description": self.describe(),
        }
        if self.bom is not None:
            data["bom"] = self.bom.to_dict()
        if self.target_version is not None:
            data["target_version"] = self.target_version
        if self.namespace_prefix is not None:
            data["namespace_prefix"] = self.namespace_prefix
            data["relocation_pattern"] = self.relocation_pattern
        return data


@dataclass(frozen=True)
class Advice:
    """One conflict report, its evaluation and the chosen mitigation."""

    evaluation: Evaluation
    recommendation: Optional[Recommendation] = None
    unresolvable: bool = False

    @property
    def report(self) -> ConflictReport:
        return self.evaluation.report

    @property
    def needs_action(self) -> bool:
        return self.evaluation.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.report.to_dict(),
            "evaluation": self.evaluation.to_dict(),
            "recommendation": self.recommendation.to_dict() if self.recommendation else None,
            "unresolvable": self.unresolvable,
        }


class MitigationAdvisor:
    """
    Maps evaluated conflicts to recommendations.
    """

    def __init__(self, rule_set: RuleSet, shade_prefix: str = DEFAULT_SHADE_PREFIX):
        """
        Initialize advisor.

        Args:
            rule_set: Rule set providing BOM definitions
            shade_prefix: Base package for relocated namespaces
        """
        self.rule_set = rule_set
        self.shade_prefix = shade_prefix

    def recommend(self, evaluation: Evaluation) -> Optional[Recommendation]:
        """
        Pick the recommendation for a failing evaluation.

        Returns:
            Recommendation, or None when nothing applies
        """
        artifact = evaluation.report.artifact

        bom = self.rule_set.bom_for(artifact)
        if bom is not None:
            return Recommendation.upgrade_bom(artifact, bom)

        failing = {r.version for r in evaluation.non_conforming}
        passing = [r.version for r in evaluation.report.requests if r.version not in failing]
        if passing:
            return Recommendation.bump_version(artifact, max(passing, key=parse_version))

        if artifact.group:
            return Recommendation.shade(artifact, self.namespace_prefix(artifact))

        return None

    def namespace_prefix(self, artifact: ArtifactKey) -> str:
        return f"{self.shade_prefix}.{artifact.group}"

    def advise(self, evaluation: Evaluation) -> Advice:
        """Produce the Advice for one evaluation."""
        if evaluation.passed:
            return Advice(evaluation=evaluation)

        recommendation = self.recommend(evaluation)
        if recommendation is None:
            logger.warning("No applicable mitigation", artifact=str(evaluation.report.artifact))
            return Advice(evaluation=evaluation, unresolvable=True)

        logger.info(
            "Recommended mitigation",
            artifact=str(evaluation.report.artifact),
            kind=recommendation.kind.value,
        )
        return Advice(evaluation=evaluation, recommendation=recommendation)

    def advise_all(self, evaluations: Iterable[Evaluation]) -> List[Advice]:
        return [self.advise(evaluation) for evaluation in evaluations]
