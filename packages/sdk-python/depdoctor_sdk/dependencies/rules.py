"""
Compatibility Rules
===================

Evaluates resolved versions against known-good version rules.

Rule Policies:
1. minimum            - version >= X (e.g. jackson-core >= 2.10)
2. exact-major-minor  - major.minor == X.Y, for frameworks released in
                        lockstep (e.g. reactor-core 3.4.x)
3. range              - ">=2.10,<3" or a Maven range "[2.10,3.0)"

Rules are matched by specificity: exact ``group:name`` first, then exact
bare name, then glob patterns (more literal characters first). The first
matching rule decides; unmatched artifacts have no known constraint.

Malformed versions never abort evaluation: comparison falls back to
lexical ordering and the verdict is flagged low-confidence.
"""

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from depdoctor_common import ValidationError
from depdoctor_common.logger import get_logger
from depdoctor_schema import BomSpec, RuleSetSpec, RuleSpec

from .detector import ConflictReport, VersionRequest
from .graph import DependencyGraph
from .parser import ArtifactKey
from .version import (
    SemanticVersion,
    VersionConstraint,
    VersionOperator,
    check_all,
    parse_constraints,
    parse_version,
)

logger = get_logger(__name__)

_WILDCARDS = set("*?[]")

TIER_EXACT = 0
TIER_NAME = 1
TIER_PATTERN = 2


@dataclass(frozen=True)
class CompatibilityRule:
    """
    An artifact pattern plus an accepted-version policy.

    Attributes:
        pattern: ``group:name``, ``name`` or a glob over either
        policy: minimum, exact-major-minor or range
        version: Policy argument
        description: Optional note shown in reports
        order: Declaration order in the rule-set file
    """

    pattern: str
    policy: str
    version: str
    description: Optional[str] = None
    order: int = 0

    @property
    def tier(self) -> int:
        if _WILDCARDS & set(self.pattern):
            return TIER_PATTERN
        return TIER_EXACT if ":" in self.pattern else TIER_NAME

    def specificity(self) -> Tuple[int, int, int]:
        literal = sum(1 for ch in self.pattern if ch not in _WILDCARDS)
        return (self.tier, -literal if self.tier == TIER_PATTERN else 0, self.order)

    def matches(self, key: ArtifactKey) -> bool:
        pattern = self.pattern.lower()
        target = str(key).lower() if ":" in pattern else key.name.lower()
        if self.tier == TIER_PATTERN:
            return fnmatchcase(target, pattern)
        return target == pattern

    def check(self, version: str) -> Tuple[bool, bool]:
        """
        Check a version against this rule.

        Returns:
            (satisfied, low_confidence)
        """
        if self.policy == "minimum":
            minimum = VersionConstraint(VersionOperator.GE, parse_version(self.version))
            return minimum.check(parse_version(version))

        if self.policy == "exact-major-minor":
            return self._check_major_minor(version)

        if self.policy == "range":
            return self._check_range(version)

        logger.warning("Unknown rule policy, treating as satisfied", rule=self.pattern, policy=self.policy)
        return True, True

    def _check_major_minor(self, version: str) -> Tuple[bool, bool]:
        actual, expected = parse_version(version), parse_version(self.version)
        if isinstance(actual, SemanticVersion) and isinstance(expected, SemanticVersion):
            return (actual.major, actual.minor) == (expected.major, expected.minor), False
        # lexical fallback: "3.4" accepts "3.4", "3.4.x" and "3.4-..."
        text, prefix = version.strip(), self.version.strip()
        matched = text == prefix or text.startswith(prefix + ".") or text.startswith(prefix + "-")
        return matched, True

    def _check_range(self, version: str) -> Tuple[bool, bool]:
        try:
            constraints = parse_constraints(self.version)
        except ValueError:
            logger.warning("Unparseable rule range, treating as satisfied", rule=self.pattern, range=self.version)
            return True, True
        return check_all(parse_version(version), constraints)

    def describe(self) -> str:
        labels = {
            "minimum": f">= {self.version}",
            "exact-major-minor": f"{self.version}.x (exact major.minor)",
            "range": self.version,
        }
        return f"{self.pattern} {labels.get(self.policy, self.version)}"

    def to_dict(self) -> Dict[str, Any]:
        data = {"artifact": self.pattern, "policy": self.policy, "version": self.version}
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class Bom:
    """A bill of materials and the artifact patterns it pins."""

    coordinates: str
    version: str
    covers: Tuple[str, ...]

    def covers_artifact(self, key: ArtifactKey) -> bool:
        target = str(key).lower()
        for pattern in self.covers:
            pattern = pattern.lower()
            candidate = target if ":" in pattern else key.name.lower()
            if fnmatchcase(candidate, pattern):
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"coordinates": self.coordinates, "version": self.version, "covers": list(self.covers)}


def describe_validation_error(error: Exception) -> str:
    """One-line message for a depdoctor or pydantic validation error."""
    if isinstance(error, PydanticValidationError):
        parts = []
        for item in error.errors():
            location = ".".join(str(p) for p in item.get("loc", ()))
            parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
        return "; ".join(parts)
    return getattr(error, "message", str(error))


@dataclass(frozen=True)
class RuleSet:
    """
    Immutable, specificity-ordered rules and BOMs.

    Safe to share across concurrent analyses. ``problems`` lists the rule
    and BOM entries that were skipped because they failed validation.
    """

    rules: Tuple[CompatibilityRule, ...] = ()
    boms: Tuple[Bom, ...] = ()
    source: Optional[str] = None
    problems: Tuple[str, ...] = ()

    @classmethod
    def from_spec(
        cls, spec: RuleSetSpec, source: Optional[str] = None, problems: Tuple[str, ...] = ()
    ) -> "RuleSet":
        rules = [
            CompatibilityRule(
                pattern=r.artifact,
                policy=r.policy,
                version=r.version,
                description=r.description,
                order=position,
            )
            for position, r in enumerate(spec.rules)
        ]
        rules.sort(key=lambda rule: rule.specificity())
        boms = tuple(Bom(coordinates=b.coordinates, version=b.version, covers=tuple(b.covers)) for b in spec.boms)
        return cls(rules=tuple(rules), boms=boms, source=source, problems=tuple(problems))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "RuleSet":
        """
        Build a rule set from a parsed rule-set document.

        Rule and BOM entries are validated one at a time; an invalid entry
        is skipped and recorded in ``problems`` while the others still apply.

        Raises:
            ValidationError: If the document itself is malformed (unsupported
                format version, ``rules`` or ``boms`` not a list)
            pydantic.ValidationError: For other document-level schema errors
        """
        document = dict(data)
        problems: List[str] = []
        for section, model in (("rules", RuleSpec), ("boms", BomSpec)):
            entries = document.get(section)
            if entries is None:
                continue
            if not isinstance(entries, list):
                raise ValidationError(f"'{section}' must be a list, got {type(entries).__name__}")
            valid = []
            for position, entry in enumerate(entries):
                try:
                    valid.append(model.model_validate(entry))
                except (ValidationError, PydanticValidationError) as e:
                    problem = f"Skipped {section} entry #{position}: {describe_validation_error(e)}"
                    logger.warning(problem, source=source)
                    problems.append(problem)
            document[section] = valid
        return cls.from_spec(RuleSetSpec.model_validate(document), source=source, problems=tuple(problems))

    def bom_for(self, key: ArtifactKey) -> Optional[Bom]:
        for bom in self.boms:
            if bom.covers_artifact(key):
                return bom
        return None

    def __len__(self) -> int:
        return len(self.rules)


@dataclass(frozen=True)
class RuleVerdict:
    """Outcome of checking one version against its matching rule."""

    artifact: ArtifactKey
    version: str
    rule: CompatibilityRule
    satisfied: bool
    low_confidence: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": str(self.artifact),
            "version": self.version,
            "rule": self.rule.describe(),
            "satisfied": self.satisfied,
            "low_confidence": self.low_confidence,
        }


@dataclass(frozen=True)
class Evaluation:
    """
    Rule evaluation of one conflict report.

    Attributes:
        report: The evaluated conflict
        verdict: Verdict for the winning version, None if no rule applies
        non_conforming: Requested versions that violate the rule
        low_confidence: Any comparison fell back to lexical ordering
    """

    report: ConflictReport
    verdict: Optional[RuleVerdict] = None
    non_conforming: Tuple[VersionRequest, ...] = ()
    low_confidence: bool = False

    @property
    def constrained(self) -> bool:
        return self.verdict is not None

    @property
    def passed(self) -> bool:
        return self.verdict is None or self.verdict.satisfied

    @property
    def failed(self) -> bool:
        return not self.passed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.verdict.rule.describe() if self.verdict else None,
            "passed": self.passed,
            "non_conforming": [r.to_dict() for r in self.non_conforming],
            "low_confidence": self.low_confidence,
        }


class RuleEngine:
    """Applies a RuleSet to artifacts and conflict reports."""

    def __init__(self, rule_set: RuleSet):
        self.rule_set = rule_set

    def match(self, key: ArtifactKey) -> Optional[CompatibilityRule]:
        """First rule matching ``key`` in specificity order."""
        for rule in self.rule_set.rules:
            if rule.matches(key):
                return rule
        return None

    def evaluate(self, key: ArtifactKey, version: str) -> Optional[RuleVerdict]:
        """
        Evaluate one artifact version.

        Returns:
            RuleVerdict, or None when no rule constrains the artifact
        """
        rule = self.match(key)
        if rule is None:
            return None
        satisfied, low_confidence = rule.check(version)
        return RuleVerdict(
            artifact=key,
            version=version,
            rule=rule,
            satisfied=satisfied,
            low_confidence=low_confidence,
        )

    def check(self, report: ConflictReport) -> Evaluation:
        """Evaluate a conflict's winner and flag non-conforming requests."""
        verdict = self.evaluate(report.artifact, report.winner)
        if verdict is None:
            return Evaluation(report=report, low_confidence=report.low_confidence)

        non_conforming: List[VersionRequest] = []
        low_confidence = report.low_confidence or verdict.low_confidence
        for request in report.requests:
            satisfied, low = verdict.rule.check(request.version)
            low_confidence = low_confidence or low
            if not satisfied:
                non_conforming.append(request)

        return Evaluation(
            report=report,
            verdict=verdict,
            non_conforming=tuple(non_conforming),
            low_confidence=low_confidence,
        )

    def audit(self, graph: DependencyGraph, skip: Optional[List[ArtifactKey]] = None) -> List[RuleVerdict]:
        """
        Check every single-version artifact of a graph.

        Artifacts in ``skip`` (usually the conflicting ones, which are
        evaluated through ``check``) are ignored.

        Returns:
            Failing verdicts, ordered by artifact key
        """
        skipped = set(skip or [])
        failures: List[RuleVerdict] = []
        for artifact in sorted(graph.artifacts, key=lambda a: str(a.key)):
            if artifact.key in skipped or not artifact.requests:
                continue
            edges = graph.incoming(artifact.index)
            marks = [e.selected for e in edges if e.selected]
            resolved = max(marks, key=parse_version) if marks else next(iter(artifact.requests))
            verdict = self.evaluate(artifact.key, resolved)
            if verdict is not None and not verdict.satisfied:
                failures.append(verdict)
        return failures
