"""
Version Parsing and Comparison
==============================

Versions reported by JVM build tools are loosely typed: ``2.11.0``,
``31.1-jre``, ``5.4.2.Final``, ``1.0-SNAPSHOT``, ``3.0.0-RC1`` and the
occasional ``${project.version}`` all show up in dependency trees.

A version is parsed into one of two variants:

- SemanticVersion: numeric release components plus an optional qualifier
- OpaqueVersion: anything else, compared lexically

Ordering is total: semantic versions compare by release tuple (trailing
zeros ignored) then qualifier rank; opaque versions compare lexically and
always sort below semantic ones.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union


# Qualifier ranks, lowest first. Unlisted qualifiers rank above releases and
# compare lexically among themselves.
_QUALIFIER_RANKS = {
    "alpha": -5,
    "a": -5,
    "beta": -4,
    "b": -4,
    "milestone": -3,
    "m": -3,
    "rc": -2,
    "cr": -2,
    "c": -2,
    "snapshot": -1,
    "": 0,
    "final": 0,
    "ga": 0,
    "release": 0,
    "sp": 1,
}
_UNKNOWN_QUALIFIER_RANK = 2

_SEMVER_RE = re.compile(
    r"^v?(?P<release>\d+(?:\.\d+)*)"
    r"(?:[-.]?(?P<qualifier>[A-Za-z][A-Za-z]*)[-.]?(?P<qualifier_num>\d+)?"
    r"(?P<rest>(?:[-.][A-Za-z0-9]+)*))?$"
)


class VersionKind(str, Enum):
    SEMANTIC = "semantic"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class SemanticVersion:
    """
    A version with numeric release components.

    Supports formats like:
    - 1, 1.0, 2.11.0, 2.9.10.1
    - 3.0.0-RC1, 1.0.0-beta-2, 5.4.2.Final
    - 1.0-SNAPSHOT, 31.1-jre
    """

    release: Tuple[int, ...]
    qualifier: str = ""
    qualifier_num: int = 0
    original: str = field(default="", compare=False)

    kind = VersionKind.SEMANTIC

    @property
    def major(self) -> int:
        return self.release[0]

    @property
    def minor(self) -> int:
        return self.release[1] if len(self.release) > 1 else 0

    @property
    def patch(self) -> int:
        return self.release[2] if len(self.release) > 2 else 0

    @property
    def is_prerelease(self) -> bool:
        return _QUALIFIER_RANKS.get(self.qualifier, _UNKNOWN_QUALIFIER_RANK) < 0

    def __str__(self) -> str:
        if self.original:
            return self.original
        base = ".".join(str(p) for p in self.release)
        if self.qualifier:
            base += f"-{self.qualifier}"
            if self.qualifier_num:
                base += str(self.qualifier_num)
        return base

    def sort_key(self) -> Tuple:
        """
        Key used for ordering.

        The leading 1 places semantic versions above opaque ones.
        """
        release = list(self.release)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        rank = _QUALIFIER_RANKS.get(self.qualifier, _UNKNOWN_QUALIFIER_RANK)
        unknown = self.qualifier if rank == _UNKNOWN_QUALIFIER_RANK else ""
        return (1, tuple(release), rank, unknown, self.qualifier_num)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (SemanticVersion, OpaqueVersion)):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __lt__(self, other: "AnyVersion") -> bool:
        return self.sort_key() < other.sort_key()

    def __le__(self, other: "AnyVersion") -> bool:
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: "AnyVersion") -> bool:
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: "AnyVersion") -> bool:
        return self.sort_key() >= other.sort_key()


@dataclass(frozen=True)
class OpaqueVersion:
    """A version string with no recognizable numeric structure."""

    value: str

    kind = VersionKind.OPAQUE

    def __str__(self) -> str:
        return self.value

    def sort_key(self) -> Tuple:
        return (0, self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (SemanticVersion, OpaqueVersion)):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __lt__(self, other: "AnyVersion") -> bool:
        return self.sort_key() < other.sort_key()

    def __le__(self, other: "AnyVersion") -> bool:
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: "AnyVersion") -> bool:
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: "AnyVersion") -> bool:
        return self.sort_key() >= other.sort_key()


AnyVersion = Union[SemanticVersion, OpaqueVersion]


def parse_semantic_version(version_str: str) -> SemanticVersion:
    """
    Parse a version string into a SemanticVersion.

    Args:
        version_str: Version string like "2.11.0", "3.0.0-RC1", "31.1-jre"

    Returns:
        SemanticVersion object

    Raises:
        ValueError: If the string has no numeric release part
    """
    text = version_str.strip()
    match = _SEMVER_RE.match(text)
    if not match:
        raise ValueError(f"Invalid version string: '{version_str}'")

    release = tuple(int(p) for p in match.group("release").split("."))
    qualifier = (match.group("qualifier") or "").lower()
    qualifier_num = int(match.group("qualifier_num") or 0)
    rest = match.group("rest") or ""
    if rest:
        # 1.0.0-beta-2 style: fold a trailing number into the qualifier number,
        # anything else stays part of the qualifier text
        tail = rest.lstrip("-.")
        if tail.isdigit() and not qualifier_num:
            qualifier_num = int(tail)
        else:
            qualifier = f"{qualifier}{rest.lower()}"

    return SemanticVersion(
        release=release,
        qualifier=qualifier,
        qualifier_num=qualifier_num,
        original=text,
    )


def parse_version(version_str: str) -> AnyVersion:
    """
    Parse a version string, falling back to an opaque version.

    Never raises: strings without numeric structure compare lexically.
    """
    try:
        return parse_semantic_version(version_str)
    except ValueError:
        return OpaqueVersion(version_str.strip())


def is_opaque(version: AnyVersion) -> bool:
    return version.kind == VersionKind.OPAQUE


def compare_versions(left: AnyVersion, right: AnyVersion) -> Tuple[int, bool]:
    """
    Compare two versions for constraint checks.

    Returns:
        (sign, low_confidence) where sign is -1, 0 or 1. An opaque version on
        either side compares both strings lexically and sets low_confidence.
    """
    if is_opaque(left) or is_opaque(right):
        a, b = str(left), str(right)
        return (a > b) - (a < b), True
    return (left > right) - (left < right), False


# =============================================================================
# Constraints
# =============================================================================


class VersionOperator(str, Enum):
    """Version comparison operators."""

    EQ = "=="  # Exact match
    NE = "!="  # Not equal
    GE = ">="  # Greater or equal
    GT = ">"  # Greater than
    LE = "<="  # Less or equal
    LT = "<"  # Less than


@dataclass(frozen=True)
class VersionConstraint:
    """
    Represents a version constraint like >=2.10 or <3.0.

    Multiple constraints combine with AND (e.g., >=2.10,<3.0).
    """

    operator: VersionOperator
    version: AnyVersion

    def __str__(self) -> str:
        return f"{self.operator.value}{self.version}"

    def check(self, version: AnyVersion) -> Tuple[bool, bool]:
        """
        Check a version against this constraint.

        Returns:
            (satisfied, low_confidence)
        """
        sign, low_confidence = compare_versions(version, self.version)
        if self.operator == VersionOperator.EQ:
            return sign == 0, low_confidence
        elif self.operator == VersionOperator.NE:
            return sign != 0, low_confidence
        elif self.operator == VersionOperator.GE:
            return sign >= 0, low_confidence
        elif self.operator == VersionOperator.GT:
            return sign > 0, low_confidence
        elif self.operator == VersionOperator.LE:
            return sign <= 0, low_confidence
        elif self.operator == VersionOperator.LT:
            return sign < 0, low_confidence
        return False, low_confidence

    def is_satisfied_by(self, version: AnyVersion) -> bool:
        """Check if a version satisfies this constraint."""
        return self.check(version)[0]


def parse_version_constraint(constraint_str: str) -> VersionConstraint:
    """
    Parse a single constraint such as ">=2.10" or "==3.4.1".

    A bare version means an exact match.

    Raises:
        ValueError: If the constraint is empty
    """
    constraint_str = constraint_str.strip()

    # Longer operators first to avoid partial matches
    operators = sorted(VersionOperator, key=lambda x: -len(x.value))

    for op in operators:
        if constraint_str.startswith(op.value):
            version_part = constraint_str[len(op.value) :].strip()
            if not version_part:
                raise ValueError(f"Missing version in constraint: '{constraint_str}'")
            return VersionConstraint(operator=op, version=parse_version(version_part))

    if not constraint_str:
        raise ValueError("Empty version constraint")
    return VersionConstraint(operator=VersionOperator.EQ, version=parse_version(constraint_str))


def parse_maven_range(range_str: str) -> List[VersionConstraint]:
    """
    Parse a Maven version range like "[2.10,3.0)" or "[3.4.1]".

    Only single intervals are supported; union ranges are rejected.

    Raises:
        ValueError: If the range is malformed
    """
    text = range_str.strip()
    if len(text) < 3 or text[0] not in "[(" or text[-1] not in "])":
        raise ValueError(f"Invalid Maven range: '{range_str}'")
    if "],[" in text.replace(" ", "") or ")," in text or "],(" in text.replace(" ", ""):
        raise ValueError(f"Union ranges are not supported: '{range_str}'")

    lower_inclusive = text[0] == "["
    upper_inclusive = text[-1] == "]"
    body = text[1:-1]

    if "," not in body:
        if not (lower_inclusive and upper_inclusive) or not body.strip():
            raise ValueError(f"Invalid Maven range: '{range_str}'")
        return [VersionConstraint(VersionOperator.EQ, parse_version(body))]

    low, high = (part.strip() for part in body.split(",", 1))
    constraints: List[VersionConstraint] = []
    if low:
        op = VersionOperator.GE if lower_inclusive else VersionOperator.GT
        constraints.append(VersionConstraint(op, parse_version(low)))
    if high:
        op = VersionOperator.LE if upper_inclusive else VersionOperator.LT
        constraints.append(VersionConstraint(op, parse_version(high)))
    if not constraints:
        raise ValueError(f"Invalid Maven range: '{range_str}'")
    return constraints


def parse_constraints(constraints_str: str) -> List[VersionConstraint]:
    """
    Parse a range expression.

    Accepts comma-separated operator constraints (">=2.10,<3.0") or a single
    Maven range ("[2.10,3.0)").

    Raises:
        ValueError: If no constraint can be parsed
    """
    text = constraints_str.strip()
    if text[:1] in ("[", "("):
        return parse_maven_range(text)

    constraints = []
    for part in text.split(","):
        part = part.strip()
        if part:
            constraints.append(parse_version_constraint(part))
    if not constraints:
        raise ValueError(f"Empty version range: '{constraints_str}'")
    return constraints


def check_all(version: AnyVersion, constraints: List[VersionConstraint]) -> Tuple[bool, bool]:
    """
    Check a version against every constraint (AND).

    Returns:
        (satisfied, low_confidence); stops at the first failing constraint
    """
    low_confidence = False
    for constraint in constraints:
        satisfied, low = constraint.check(version)
        low_confidence = low_confidence or low
        if not satisfied:
            return False, low_confidence
    return True, low_confidence
