"""PageRank-style hotspot scoring over the dependency graph.

Edges point from a dependent to its dependency, so score flows towards files
that many others rely on. The iteration count is fixed (no convergence check)
and vertices are always visited in sorted order, which makes the scores
bit-for-bit reproducible for a given graph.

Vertices without outgoing edges ("dangling" files) spread their score evenly
over every vertex on each round, the standard PageRank treatment. The scores
of a non-empty graph therefore always sum to 1.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .config import DAMPING_FACTOR, PAGERANK_ITERATIONS
from .graph import DependencyGraph


class HotspotScorer:
    def __init__(self, damping: float = DAMPING_FACTOR, iterations: int = PAGERANK_ITERATIONS) -> None:
        if not 0.0 <= damping <= 1.0:
            raise ValueError("damping must be within [0, 1]")
        if iterations < 0:
            raise ValueError("iterations must be non-negative")
        self.damping = damping
        self.iterations = iterations

    def score(self, graph: DependencyGraph) -> Dict[str, float]:
        vertices = graph.vertices
        n = len(vertices)
        if n == 0:
            return {}

        d = self.damping
        out_degree = {v: graph.out_degree(v) for v in vertices}
        incoming = {v: graph.predecessors(v) for v in vertices}
        dangling = [v for v in vertices if out_degree[v] == 0]

        scores = {v: 1.0 / n for v in vertices}
        for _ in range(self.iterations):
            dangling_mass = sum(scores[v] for v in dangling)
            base = (1.0 - d) / n + d * dangling_mass / n
            scores = {
                v: base + d * sum(scores[u] / out_degree[u] for u in incoming[v])
                for v in vertices
            }
        return scores


def top_hotspots(scores: Dict[str, float], limit: int = 10) -> List[Tuple[str, float]]:
    """Return the *limit* highest scoring files, best first."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:max(limit, 0)]
