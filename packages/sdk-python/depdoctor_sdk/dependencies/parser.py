"""
Dependency Report Parsing
=========================

Tokenizes dependency-tree output from JVM build tools into coordinates.

Handles:
- Maven ``dependency:tree`` (plain and ``-Dverbose``), with or without the
  ``[INFO]`` log prefix
- Gradle ``dependencies`` output, including ``->`` selections and the
  ``(*)``, ``(c)`` and ``(n)`` markers
- Bare coordinates for structured input (``group:name:version``,
  ``name@version``, ``name``)
"""

import re
from dataclasses import dataclass
from typing import Optional

# Omission reasons reported by Maven verbose output
OMITTED_CONFLICT = "conflict"
OMITTED_DUPLICATE = "duplicate"
OMITTED_CYCLE = "cycle"

_LOG_PREFIX_RE = re.compile(r"^\[(?:INFO|DEBUG|WARNING|WARN|ERROR)\]\s?")
# pipes/spaces, then an optional branch marker: "+- ", "\- ", "+--- ", "\--- "
_TREE_PREFIX_RE = re.compile(r"^(?P<prefix>[| ]*(?:[+\\]-+ )?)")
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_$][\w.$-]*$")
_ARROW_RE = re.compile(r"->\s*(?P<selected>[^\s()]+)")
_PAREN_RE = re.compile(r"\(([^()]*)\)")
_GRADLE_RICH_RE = re.compile(r"^\{(?:strictly|require|prefer)\s+([^}!]+)(?:!![^}]*)?\}$")
_CONFLICT_NOTE_RE = re.compile(r"omitted for conflict with\s+(?P<version>\S+)")
_MANAGED_NOTE_RE = re.compile(r"version managed from\s+(?P<version>[^;\s)]+)")
_TOKEN_RE = re.compile(r"^(?P<token>[^\s{]*(?:\{[^}]*\})?)(?P<rest>.*)$")
_GRADLE_PROJECT_RE = re.compile(r"^project\s+(?P<path>:[\w:.-]*)")
_PROJECT_HEADER_RE = re.compile(r"^(?:Root project|Project)\s+'(?P<name>[^']+)'")

_MAVEN_SCOPES = {"compile", "provided", "runtime", "test", "system", "import"}


@dataclass(frozen=True)
class ArtifactKey:
    """
    Identity of an artifact, independent of its version.

    ``group`` is empty for name-only inputs.
    """

    group: str
    name: str

    def __str__(self) -> str:
        return f"{self.group}:{self.name}" if self.group else self.name

    @classmethod
    def from_string(cls, text: str) -> "ArtifactKey":
        """Build a key from "group:name" or "name"."""
        text = text.strip()
        if ":" in text:
            group, name = text.split(":", 1)
            return cls(group=group, name=name)
        return cls(group="", name=text)


@dataclass(frozen=True)
class Coordinate:
    """
    A parsed artifact coordinate.

    Attributes:
        group: Group id (empty for bare names)
        name: Artifact id
        version: Requested version, or None when the report only shows a
            managed selection (Gradle ``group:name -> 1.0``)
        packaging: Maven packaging type (jar, pom, ...)
        classifier: Maven classifier
        scope: Maven scope
    """

    group: str
    name: str
    version: Optional[str] = None
    packaging: Optional[str] = None
    classifier: Optional[str] = None
    scope: Optional[str] = None

    @property
    def key(self) -> ArtifactKey:
        return ArtifactKey(group=self.group, name=self.name)

    def __str__(self) -> str:
        base = str(self.key)
        return f"{base}:{self.version}" if self.version else base


@dataclass(frozen=True)
class TreeLine:
    """
    One dependency line of a tree report.

    Attributes:
        column: Column at which the coordinate starts (nesting level)
        coordinate: The parsed coordinate
        selected: Version the build tool selected for this request, when
            the report says so
        omitted: Omission reason (conflict, duplicate, cycle) for verbose
            Maven output
        managed_from: Version requested before dependency management
            overrode it
        constraint: Gradle ``(c)`` constraint line (not a dependency)
        repeated: Gradle ``(*)`` marker, subtree listed elsewhere
        unresolved: Gradle ``(n)`` marker
    """

    column: int
    coordinate: Coordinate
    selected: Optional[str] = None
    omitted: Optional[str] = None
    managed_from: Optional[str] = None
    constraint: bool = False
    repeated: bool = False
    unresolved: bool = False

    @property
    def requested(self) -> Optional[str]:
        """The version the parent asked for."""
        if self.managed_from:
            return self.managed_from
        return self.coordinate.version or self.selected


def _valid_segment(segment: str) -> bool:
    return bool(_SEGMENT_RE.match(segment))


def _clean_version(version: str) -> str:
    rich = _GRADLE_RICH_RE.match(version)
    if rich:
        return rich.group(1).strip()
    return version


def parse_coordinate(token: str) -> Optional[Coordinate]:
    """
    Parse a single coordinate token.

    Accepts:
        group:name                                (Gradle managed, no version)
        group:name:version                        (Gradle, structured input)
        group:name:type:version                   (Maven root)
        group:name:type:version:scope             (Maven)
        group:name:type:classifier:version:scope  (Maven)
        name@version, name                        (structured input)

    Returns:
        Coordinate, or None if the token is not a coordinate

    Examples:
        >>> parse_coordinate("com.fasterxml.jackson.core:jackson-core:jar:2.9.0:compile")
        Coordinate(group='com.fasterxml.jackson.core', name='jackson-core', version='2.9.0', ...)
    """
    token = token.strip()
    if not token:
        return None

    if ":" not in token:
        name, _, version = token.partition("@")
        if not _valid_segment(name) or (version == "" and "@" in token):
            return None
        return Coordinate(group="", name=name, version=version or None)

    parts = token.split(":")
    if not all(parts[:2]) or not all(_valid_segment(p) for p in parts[:2]):
        return None

    group, name = parts[0], parts[1]
    if len(parts) == 2:
        return Coordinate(group=group, name=name)
    if len(parts) == 3:
        return Coordinate(group=group, name=name, version=_clean_version(parts[2]))
    if len(parts) == 4:
        return Coordinate(group=group, name=name, packaging=parts[2], version=parts[3])
    if len(parts) == 5:
        if parts[4] not in _MAVEN_SCOPES:
            # group:name:type:classifier:version without scope
            return Coordinate(
                group=group, name=name, packaging=parts[2], classifier=parts[3], version=parts[4]
            )
        return Coordinate(
            group=group, name=name, packaging=parts[2], version=parts[3], scope=parts[4]
        )
    if len(parts) == 6:
        return Coordinate(
            group=group,
            name=name,
            packaging=parts[2],
            classifier=parts[3],
            version=parts[4],
            scope=parts[5],
        )
    return None


def strip_log_prefix(line: str) -> str:
    """Remove a Maven ``[INFO]`` style prefix."""
    return _LOG_PREFIX_RE.sub("", line.rstrip("\r\n"), count=1)


def parse_project_header(line: str) -> Optional[str]:
    """Return the project name of a Gradle ``Project ':app'`` header."""
    match = _PROJECT_HEADER_RE.match(strip_log_prefix(line).strip())
    return match.group("name") if match else None


def parse_tree_line(line: str) -> Optional[TreeLine]:
    """
    Parse one line of tree output.

    Args:
        line: Raw report line

    Returns:
        TreeLine, or None when the line holds no coordinate (banners,
        separators, blank lines)
    """
    text = strip_log_prefix(line)
    if not text.strip():
        return None

    prefix = _TREE_PREFIX_RE.match(text).group("prefix")
    column = len(prefix)
    body = text[column:].strip()
    if not body:
        return None

    omitted: Optional[str] = None
    selected: Optional[str] = None
    managed_from: Optional[str] = None

    if body.startswith("(") and body.endswith(")") and " - " in body:
        # Maven verbose: (g:a:jar:1.0:compile - omitted for conflict with 2.0)
        inner = body[1:-1]
        token, note = inner.split(" - ", 1)
        conflict = _CONFLICT_NOTE_RE.search(note)
        if conflict:
            omitted = OMITTED_CONFLICT
            selected = conflict.group("version")
        elif "omitted for duplicate" in note:
            omitted = OMITTED_DUPLICATE
        elif "omitted for cycle" in note:
            omitted = OMITTED_CYCLE
        managed = _MANAGED_NOTE_RE.search(note)
        if managed:
            managed_from = managed.group("version")
        rest = ""
    else:
        split = _TOKEN_RE.match(body)
        token, rest = split.group("token"), split.group("rest")

    project = _GRADLE_PROJECT_RE.match(body)
    if project:
        # Gradle subproject: versionless, reported as "unspecified"
        coordinate: Optional[Coordinate] = Coordinate(
            group="", name=project.group("path"), version="unspecified"
        )
        rest = body[project.end() :]
    else:
        coordinate = parse_coordinate(token)
    if coordinate is None:
        return None

    arrow = _ARROW_RE.search(rest)
    if arrow:
        selected = _clean_version(arrow.group("selected"))

    annotations = [a.strip() for a in _PAREN_RE.findall(rest)]
    for annotation in annotations:
        managed = _MANAGED_NOTE_RE.search(annotation)
        if managed:
            managed_from = managed.group("version")

    if managed_from and not selected:
        # the displayed version is what dependency management selected
        selected = coordinate.version

    if coordinate.version is None and selected is None:
        return None

    return TreeLine(
        column=column,
        coordinate=coordinate,
        selected=selected,
        omitted=omitted,
        managed_from=managed_from,
        constraint="c" in annotations,
        repeated="*" in annotations,
        unresolved="n" in annotations,
    )
