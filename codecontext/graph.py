"""File-level dependency graph built from parsed import references.

Vertices are file identities (absolute paths). An edge ``a -> b`` means file
``a`` depends on file ``b``. References resolve by fully qualified name
(``namespace.localName``) or, for wildcard references such as ``pkg.*``, to
every file declared in that namespace. References that match nothing in the
batch (third-party libraries, the standard library) produce no edge.

The graph is rebuilt from scratch for every analysis and frozen once built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from .config import WILDCARD_SUFFIX
from .models import ParsedUnit

logger = logging.getLogger(__name__)


class GraphBuildError(RuntimeError):
    """Raised when a graph could not be built for reasons other than input shape."""


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable dependency graph plus its cycle flag."""

    graph: nx.DiGraph
    cyclic: bool = False

    @classmethod
    def empty(cls) -> "DependencyGraph":
        return cls(nx.freeze(nx.DiGraph()), False)

    @property
    def vertices(self) -> List[str]:
        return sorted(self.graph.nodes)

    @property
    def edges(self) -> FrozenSet[Tuple[str, str]]:
        return frozenset(self.graph.edges)

    def has_edge(self, source: str, target: str) -> bool:
        return self.graph.has_edge(source, target)

    def in_degree(self, vertex: str) -> int:
        return self.graph.in_degree(vertex)

    def out_degree(self, vertex: str) -> int:
        return self.graph.out_degree(vertex)

    def successors(self, vertex: str) -> List[str]:
        return sorted(self.graph.successors(vertex))

    def predecessors(self, vertex: str) -> List[str]:
        return sorted(self.graph.predecessors(vertex))

    def cycle_members(self) -> Set[str]:
        """Vertices that sit on at least one directed cycle."""
        if not self.cyclic:
            return set()
        members: Set[str] = set()
        for component in nx.strongly_connected_components(self.graph):
            if len(component) > 1:
                members.update(component)
        return members

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, vertex: object) -> bool:
        return vertex in self.graph


@dataclass(frozen=True)
class BuildResult:
    graph: Optional[DependencyGraph] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.graph is not None

    def unwrap(self) -> DependencyGraph:
        if self.graph is None or self.error is not None:
            raise GraphBuildError(f"Failed to build dependency graph: {self.error}") from self.error
        return self.graph


def has_cycle(graph: nx.DiGraph) -> bool:
    """Return True if *graph* contains a directed cycle. Runs in O(V + E)."""
    if graph.number_of_nodes() == 0:
        return False
    return not nx.is_directed_acyclic_graph(graph)


def resolution_map(units: Sequence[ParsedUnit]) -> Dict[str, str]:
    """Map fully qualified names to file identities.

    When two units share an FQN the later one in *units* wins.
    """
    fqns: Dict[str, str] = {}
    for unit in units:
        fqns[unit.fqn] = unit.identity
    return fqns


def _resolve(
    unit: ParsedUnit,
    fqns: Dict[str, str],
    by_namespace: Dict[str, List[str]],
) -> Iterable[str]:
    for reference in unit.references:
        if reference.endswith(WILDCARD_SUFFIX):
            namespace = reference[: -len(WILDCARD_SUFFIX)]
            yield from by_namespace.get(namespace, ())
        else:
            target = fqns.get(reference)
            if target is not None:
                yield target


def build_graph(units: Iterable[ParsedUnit]) -> DependencyGraph:
    """Build a frozen :class:`DependencyGraph` from a batch of parsed units."""
    # Units arrive in extraction completion order; sort so duplicate FQNs resolve the same way every run.
    ordered = sorted(units, key=lambda u: u.identity)

    fqns = resolution_map(ordered)
    by_namespace: Dict[str, List[str]] = {}
    for unit in ordered:
        by_namespace.setdefault(unit.namespace, []).append(unit.identity)

    digraph = nx.DiGraph()
    digraph.add_nodes_from(unit.identity for unit in ordered)

    for unit in ordered:
        source = unit.identity
        for target in _resolve(unit, fqns, by_namespace):
            if source == target or digraph.has_edge(source, target):
                continue
            if source in digraph and target in digraph:
                digraph.add_edge(source, target)

    cyclic = has_cycle(digraph)
    dependency_graph = DependencyGraph(nx.freeze(digraph), cyclic)
    if cyclic:
        logger.warning(
            "Circular dependencies detected (%d files sit on cycles)",
            len(dependency_graph.cycle_members()),
        )
    logger.debug(
        "Built dependency graph: %d files, %d edges",
        digraph.number_of_nodes(), digraph.number_of_edges(),
    )
    return dependency_graph


class GraphBuilder:
    """Success-or-failure wrapper around :func:`build_graph`."""

    def build(self, units: Iterable[ParsedUnit]) -> BuildResult:
        try:
            return BuildResult(graph=build_graph(units))
        except Exception as exc:
            logger.error("Dependency graph build failed: %s", exc)
            return BuildResult(error=exc)
