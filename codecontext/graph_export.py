"""Export helpers for analysis results: JSON and Graphviz DOT."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .orchestrator import AnalysisResult


def result_payload(result: AnalysisResult) -> Dict[str, Any]:
    units = {unit.identity: unit for unit in result.units}
    roles = {step.identity: step.role.value for step in result.learning_path}

    nodes = []
    for vertex in result.graph.vertices:
        unit = units.get(vertex)
        nodes.append({
            "id": vertex,
            "label": Path(vertex).name,
            "namespace": unit.namespace if unit else "",
            "description": unit.description if unit else "",
            "score": result.scores.get(vertex, 0.0),
            "role": roles.get(vertex, ""),
            "history": unit.history.to_dict() if unit else {},
        })

    return {
        "root": str(result.root),
        "cyclic": result.graph.cyclic,
        "nodes": nodes,
        "edges": [{"src": src, "dst": dst} for src, dst in sorted(result.graph.edges)],
        "learning_path": [
            {"file": step.identity, "role": step.role.value, "reason": step.rationale}
            for step in result.learning_path
        ],
    }


def export_json(result: AnalysisResult, output_file: Path) -> None:
    output_file.write_text(json.dumps(result_payload(result), indent=2), encoding="utf-8")


def export_dot(result: AnalysisResult, output_file: Path) -> None:
    graph = result.graph
    on_cycle = graph.cycle_members()

    lines = ["digraph CodeContext {"]
    lines.append("  rankdir=LR;")

    for vertex in graph.vertices:
        label = f"{Path(vertex).name}\\n{result.scores.get(vertex, 0.0):.4f}"
        style = ', color="red"' if vertex in on_cycle else ""
        lines.append(f'  "{_esc(vertex)}" [label="{_esc(label)}"{style}];')

    for src, dst in sorted(graph.edges):
        lines.append(f'  "{_esc(src)}" -> "{_esc(dst)}";')

    lines.append("}")
    output_file.write_text("\n".join(lines), encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace('"', '\\"')
