"""
Dependency Graph Loading
========================

Builds an in-memory dependency graph from a tree report or from a
structured list of edges.

The graph is an arena: artifacts live in a list and are addressed by their
stable index, edges refer to indices. Traversal never follows references
recursively; cycles are detected with an explicit stack and a visited set,
flagged on the closing edge and reported as non-fatal diagnostics.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from depdoctor_common import CyclicDependencyWarning, MalformedInputError
from depdoctor_common.logger import get_logger

from .parser import (
    OMITTED_CYCLE,
    ArtifactKey,
    Coordinate,
    parse_coordinate,
    parse_project_header,
    parse_tree_line,
    strip_log_prefix,
)
from .version import AnyVersion, parse_version

logger = get_logger(__name__)

DEFAULT_PROJECT_NAME = "project"

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding attached to an analysis run."""

    severity: str
    code: str
    message: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
        }
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class Artifact:
    """
    A node of the dependency graph.

    Attributes:
        index: Stable arena index
        key: Artifact identity (group, name)
        requests: Requested version -> keys of the parents requesting it
    """

    index: int
    key: ArtifactKey
    requests: Dict[str, Set[ArtifactKey]] = field(default_factory=dict)

    @property
    def versions(self) -> List[AnyVersion]:
        """Distinct requested versions, lowest first."""
        return sorted(parse_version(v) for v in self.requests)


@dataclass(frozen=True)
class DependencyEdge:
    """
    A parent -> child request at a given version.

    An edge without a requested version is a structural link: it places
    the child in the tree but is not a version request.

    Attributes:
        parent: Arena index of the requesting artifact
        child: Arena index of the requested artifact
        requested: Version the parent asked for, None for a structural link
        selected: Version the build tool reported as selected, if marked
        omitted: Omission reason from verbose Maven output
        scope: Maven scope
        depth: Distance from the root (direct dependencies are 1)
        order: Declaration order within the report
        cyclic: Edge closes a cycle and is skipped by traversal
    """

    parent: int
    child: int
    requested: Optional[str] = None
    selected: Optional[str] = None
    omitted: Optional[str] = None
    scope: Optional[str] = None
    depth: int = 1
    order: int = 0
    cyclic: bool = False

    @property
    def identity(self) -> Tuple[int, int, Optional[str], Optional[str]]:
        return (self.parent, self.child, self.requested, self.selected)

    @property
    def is_link(self) -> bool:
        return self.requested is None


class DependencyGraph:
    """Arena of artifacts and the edges between them."""

    def __init__(self) -> None:
        self.artifacts: List[Artifact] = []
        self.edges: List[DependencyEdge] = []
        self.roots: List[int] = []
        self.diagnostics: List[Diagnostic] = []
        self._index: Dict[ArtifactKey, int] = {}
        self._edge_ids: Set[Tuple[int, int, Optional[str], Optional[str]]] = set()
        self._incoming: Dict[int, List[int]] = {}
        self._outgoing: Dict[int, List[int]] = {}

    def __len__(self) -> int:
        return len(self.artifacts)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def add_artifact(self, key: ArtifactKey) -> int:
        """Return the index of ``key``, creating the node if needed."""
        index = self._index.get(key)
        if index is None:
            index = len(self.artifacts)
            self.artifacts.append(Artifact(index=index, key=key))
            self._index[key] = index
        return index

    def add_root(self, index: int) -> None:
        if index not in self.roots:
            self.roots.append(index)

    def add_edge(self, edge: DependencyEdge) -> bool:
        """
        Add an edge unless an identical one is already present.

        Returns:
            True if the edge was added, False for a duplicate
        """
        if edge.identity in self._edge_ids:
            return False
        self._edge_ids.add(edge.identity)
        position = len(self.edges)
        self.edges.append(edge)
        self._outgoing.setdefault(edge.parent, []).append(position)
        if edge.is_link:
            return True

        self._incoming.setdefault(edge.child, []).append(position)
        child = self.artifacts[edge.child]
        child.requests.setdefault(edge.requested, set()).add(self.artifacts[edge.parent].key)
        return True

    def index_of(self, key: ArtifactKey) -> int:
        return self._index[key]

    def artifact(self, key: ArtifactKey) -> Artifact:
        return self.artifacts[self._index[key]]

    def incoming(self, index: int) -> List[DependencyEdge]:
        """Version requests for the artifact at ``index``, cyclic ones included."""
        return [self.edges[i] for i in self._incoming.get(index, [])]

    def children(self, index: int) -> List[DependencyEdge]:
        """Traversable (non-cyclic) outgoing edges."""
        return [self.edges[i] for i in self._outgoing.get(index, []) if not self.edges[i].cyclic]

    def walk(self, start: Optional[int] = None) -> Iterator[int]:
        """
        Depth-first walk over artifact indices, each visited once.

        Starts from ``start`` or from every root in order.
        """
        pending = [start] if start is not None else list(reversed(self.roots))
        visited: Set[int] = set()
        while pending:
            index = pending.pop()
            if index in visited:
                continue
            visited.add(index)
            yield index
            for edge in reversed(self.children(index)):
                if edge.child not in visited:
                    pending.append(edge.child)

    @property
    def cyclic_edges(self) -> List[DependencyEdge]:
        return [e for e in self.edges if e.cyclic]

    def summary(self) -> Dict[str, int]:
        return {
            "artifacts": len(self.artifacts),
            "edges": len(self.edges),
            "roots": len(self.roots),
            "cycles": len(self.cyclic_edges),
        }


# =============================================================================
# Loader
# =============================================================================


@dataclass
class _StackEntry:
    column: int
    index: int
    depth: int


class GraphLoader:
    """
    Builds DependencyGraph instances from build-tool output.

    A loader is cheap; create one per report.
    """

    def __init__(self, project_name: str = DEFAULT_PROJECT_NAME):
        """
        Initialize the loader.

        Args:
            project_name: Name of the synthetic root used when a report has
                no root line (Gradle output)
        """
        self.project_name = project_name

    # -------------------------------------------------------------------------
    # Text reports
    # -------------------------------------------------------------------------

    def load_tree(self, text: str) -> DependencyGraph:
        """
        Load a Maven or Gradle dependency-tree report.

        Nesting is inferred from the column of each coordinate with an
        indentation stack, so both Maven and Gradle indents work.

        Raises:
            MalformedInputError: If no line holds an artifact/version pair
        """
        graph = DependencyGraph()
        stack: List[_StackEntry] = []
        project_name = self.project_name
        order = 0
        parsed_any = False

        for line_number, raw in enumerate(text.splitlines(), start=1):
            header = parse_project_header(raw)
            if header:
                project_name = header
                stack.clear()
                continue

            tree_line = parse_tree_line(raw)
            if tree_line is None:
                stripped = strip_log_prefix(raw)
                if _looks_like_branch(stripped):
                    graph.diagnostics.append(
                        Diagnostic(
                            severity=SEVERITY_WARNING,
                            code="UNPARSEABLE_LINE",
                            message=f"Skipped unparseable dependency line: {stripped.strip()}",
                            line=line_number,
                        )
                    )
                elif stripped[:1] not in ("", " ", "|"):
                    # a column-0 banner separates trees (Gradle configurations)
                    stack.clear()
                continue

            if tree_line.constraint or tree_line.unresolved:
                # (c) constraints and (n) unresolved declarations request nothing
                continue
            parsed_any = True

            while stack and stack[-1].column >= tree_line.column:
                stack.pop()

            key = tree_line.coordinate.key
            if not stack:
                if tree_line.column == 0:
                    index = graph.add_artifact(key)
                    graph.add_root(index)
                    stack.append(_StackEntry(column=0, index=index, depth=0))
                    continue
                root = graph.add_artifact(ArtifactKey(group="", name=project_name))
                graph.add_root(root)
                stack.append(_StackEntry(column=-1, index=root, depth=0))

            parent = stack[-1]
            child = graph.add_artifact(key)
            path = [entry.index for entry in stack]
            cyclic = child in path or tree_line.omitted == OMITTED_CYCLE

            order += 1
            graph.add_edge(
                DependencyEdge(
                    parent=parent.index,
                    child=child,
                    requested=tree_line.requested,
                    selected=tree_line.selected,
                    omitted=tree_line.omitted,
                    scope=tree_line.coordinate.scope,
                    depth=parent.depth + 1,
                    order=order,
                    cyclic=cyclic,
                )
            )

            if cyclic:
                start = path.index(child) if child in path else 0
                cycle = [str(graph.artifacts[i].key) for i in path[start:]] + [str(key)]
                _record_cycle(graph, cycle, line_number)
                continue
            if tree_line.repeated:
                # (*) subtree is listed elsewhere
                continue

            stack.append(_StackEntry(column=tree_line.column, index=child, depth=parent.depth + 1))

        if not parsed_any:
            raise MalformedInputError("No artifact coordinates found in dependency report")

        logger.info("Loaded dependency tree", **graph.summary())
        return graph

    # -------------------------------------------------------------------------
    # Structured input
    # -------------------------------------------------------------------------

    def load_edges(self, edges: Iterable[Any]) -> DependencyGraph:
        """
        Load a graph from structured edges.

        Each edge is a mapping with ``parent``, ``child`` and optionally
        ``version``, ``selected``, ``scope`` and ``omitted``; or a tuple
        ``(parent, child[, version])``. Parent and child accept
        ``group:name[:version]``, ``name@version`` or ``name``; the child
        version may come from the coordinate instead of ``version``. An edge
        whose child has no version is kept as a structural link: it counts
        for roots and depths but requests no version.

        Raises:
            MalformedInputError: If no edge yields an artifact/version pair
        """
        graph = DependencyGraph()
        raw: List[Tuple[int, int, Optional[str], Optional[str], Optional[str], Optional[str]]] = []
        seen: Set[Tuple[int, int, Optional[str], Optional[str]]] = set()

        for position, item in enumerate(edges):
            try:
                parent, child, version, selected, scope, omitted = _unpack_edge(item)
            except ValueError as e:
                graph.diagnostics.append(
                    Diagnostic(
                        severity=SEVERITY_WARNING,
                        code="INVALID_EDGE",
                        message=f"Skipped edge #{position}: {e}",
                    )
                )
                continue

            parent_index = graph.add_artifact(parent.key)
            child_index = graph.add_artifact(child.key)
            identity = (parent_index, child_index, version, selected)
            if identity in seen:
                continue
            seen.add(identity)
            raw.append((parent_index, child_index, version, selected, scope, omitted))

        if not any(version for _, _, version, *_ in raw):
            raise MalformedInputError("No artifact/version pairs found in structured input")

        targets = {child for _, child, *_ in raw}
        roots = [i for i in range(len(graph.artifacts)) if i not in targets]
        if not roots:
            roots = [raw[0][0]]
        for root in roots:
            graph.add_root(root)

        back_edges, cycles = _find_back_edges(len(graph.artifacts), raw, roots)
        for cycle in cycles:
            _record_cycle(graph, [str(graph.artifacts[i].key) for i in cycle])

        depths = _bfs_depths(len(graph.artifacts), raw, roots, back_edges)
        for order, (parent, child, version, selected, scope, omitted) in enumerate(raw, start=1):
            graph.add_edge(
                DependencyEdge(
                    parent=parent,
                    child=child,
                    requested=version,
                    selected=selected,
                    omitted=omitted,
                    scope=scope,
                    depth=depths.get(parent, 0) + 1,
                    order=order,
                    cyclic=(order - 1) in back_edges,
                )
            )

        logger.info("Loaded structured edges", **graph.summary())
        return graph


def _looks_like_branch(text: str) -> bool:
    stripped = text.lstrip("| ")
    return stripped.startswith(("+-", "\\-"))


def _record_cycle(graph: DependencyGraph, cycle: List[str], line: Optional[int] = None) -> None:
    warning = CyclicDependencyWarning(cycle)
    logger.warning(str(warning))
    graph.diagnostics.append(
        Diagnostic(
            severity=SEVERITY_WARNING,
            code="CYCLIC_DEPENDENCY",
            message=str(warning),
            line=line,
        )
    )


def _unpack_edge(
    item: Any,
) -> Tuple[Coordinate, Coordinate, Optional[str], Optional[str], Optional[str], Optional[str]]:
    selected = scope = omitted = None
    version: Optional[str] = None

    if isinstance(item, Mapping):
        parent_token = item.get("parent")
        child_token = item.get("child")
        version = item.get("version")
        selected = item.get("selected")
        scope = item.get("scope")
        omitted = item.get("omitted")
    elif isinstance(item, (list, tuple)) and 2 <= len(item) <= 3:
        parent_token, child_token = item[0], item[1]
        version = item[2] if len(item) == 3 else None
    else:
        raise ValueError(f"unsupported edge format: {item!r}")

    if not parent_token or not child_token:
        raise ValueError("edge needs both 'parent' and 'child'")

    parent = parse_coordinate(str(parent_token))
    child = parse_coordinate(str(child_token))
    if parent is None or child is None:
        raise ValueError(f"cannot tokenize '{parent_token}' -> '{child_token}'")

    version = str(version).strip() if version is not None else child.version

    return (
        parent,
        child,
        version or None,
        str(selected) if selected is not None else None,
        scope,
        omitted,
    )


def _adjacency(count: int, raw: List[Tuple]) -> List[List[int]]:
    adjacency: List[List[int]] = [[] for _ in range(count)]
    for edge_id, edge in enumerate(raw):
        adjacency[edge[0]].append(edge_id)
    return adjacency


def _find_back_edges(
    count: int, raw: List[Tuple], roots: List[int]
) -> Tuple[Set[int], List[List[int]]]:
    """Iterative three-colour DFS; returns back-edge ids and the cycles they close."""
    white, grey, black = 0, 1, 2
    colour = [white] * count
    adjacency = _adjacency(count, raw)
    back_edges: Set[int] = set()
    cycles: List[List[int]] = []

    for start in list(roots) + list(range(count)):
        if colour[start] != white:
            continue
        colour[start] = grey
        path = [start]
        stack = [(start, iter(adjacency[start]))]
        while stack:
            node, pending = stack[-1]
            advanced = False
            for edge_id in pending:
                child = raw[edge_id][1]
                if colour[child] == grey:
                    back_edges.add(edge_id)
                    cycles.append(path[path.index(child) :] + [child])
                elif colour[child] == white:
                    colour[child] = grey
                    path.append(child)
                    stack.append((child, iter(adjacency[child])))
                    advanced = True
                    break
            if not advanced:
                colour[node] = black
                path.pop()
                stack.pop()

    return back_edges, cycles


def _bfs_depths(
    count: int, raw: List[Tuple], roots: List[int], back_edges: Set[int]
) -> Dict[int, int]:
    adjacency = _adjacency(count, raw)
    depths: Dict[int, int] = {root: 0 for root in roots}
    queue = deque(roots)
    while queue:
        node = queue.popleft()
        for edge_id in adjacency[node]:
            if edge_id in back_edges:
                continue
            child = raw[edge_id][1]
            if child not in depths:
                depths[child] = depths[node] + 1
                queue.append(child)
    return depths


def load_tree(text: str, project_name: str = DEFAULT_PROJECT_NAME) -> DependencyGraph:
    """Convenience wrapper around GraphLoader.load_tree."""
    return GraphLoader(project_name=project_name).load_tree(text)


def load_edges(edges: Iterable[Any]) -> DependencyGraph:
    """Convenience wrapper around GraphLoader.load_edges."""
    return GraphLoader().load_edges(edges)
