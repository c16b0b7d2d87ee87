"""Dependencies-first reading order for a codebase.

For an acyclic graph the path is a reversed topological order: files that
depend on nothing come first and top-level orchestrators come last. A cyclic
graph has no topological order, so the fallback lists files by how few other
files they depend on.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import networkx as nx

from .graph import DependencyGraph
from .models import LearningStep, Role

logger = logging.getLogger(__name__)

RATIONALES: Dict[Role, str] = {
    Role.FUNDAMENTAL: "This file stands alone. Start here to understand basic blocks.",
    Role.ENTRY_POINT: "This is a high-level orchestrator. Read this last to see how everything fits.",
    Role.CORE_LOGIC: "Connects different parts of the system.",
    Role.CYCLE_MEMBER: (
        "Part of a circular dependency between files; "
        "this position in the path is approximate."
    ),
}


def classify(graph: DependencyGraph, vertex: str) -> Role:
    if graph.out_degree(vertex) == 0:
        return Role.FUNDAMENTAL
    if graph.in_degree(vertex) == 0:
        return Role.ENTRY_POINT
    return Role.CORE_LOGIC


class LearningPathGenerator:
    def generate(
        self,
        graph: DependencyGraph,
        scores: Optional[Dict[str, float]] = None,
    ) -> List[LearningStep]:
        scores = scores or {}

        if graph.cyclic:
            return self._cycle_fallback(graph, scores)

        # A -> B means A depends on B, so topological order lists dependents first.
        try:
            order = list(nx.lexicographical_topological_sort(graph.graph))
        except nx.NetworkXUnfeasible:
            return self._cycle_fallback(graph, scores)
        order.reverse()
        return [self._step(v, classify(graph, v), scores) for v in order]

    @staticmethod
    def _step(vertex: str, role: Role, scores: Dict[str, float]) -> LearningStep:
        return LearningStep(
            identity=vertex,
            role=role,
            rationale=RATIONALES[role],
            score=scores.get(vertex, 0.0),
        )

    def _cycle_fallback(self, graph: DependencyGraph, scores: Dict[str, float]) -> List[LearningStep]:
        logger.warning("Cyclic dependencies detected; learning path order is approximate")
        ordered = sorted(graph.vertices, key=lambda v: (graph.out_degree(v), v))
        return [self._step(v, Role.CYCLE_MEMBER, scores) for v in ordered]
