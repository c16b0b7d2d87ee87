"""Tests for the learning path generator."""

import random

from codecontext.graph import build_graph
from codecontext.learning_path import RATIONALES, LearningPathGenerator
from codecontext.models import Role


def test_orders_simple_chain(make_unit):
    """A depends on B depends on C: read C, then B, then A."""
    graph = build_graph([
        make_unit("A.kt", "", ["B"]),
        make_unit("B.kt", "", ["C"]),
        make_unit("C.kt", ""),
    ])

    path = LearningPathGenerator().generate(graph)

    assert [step.identity for step in path] == ["/repo/C.kt", "/repo/B.kt", "/repo/A.kt"]
    assert [step.role for step in path] == [Role.FUNDAMENTAL, Role.CORE_LOGIC, Role.ENTRY_POINT]


def test_orders_tree_structure(make_unit):
    """Main -> {Core, Utils}, Core -> Utils: Utils first, Main last."""
    graph = build_graph([
        make_unit("Main.kt", "", ["Core", "Utils"]),
        make_unit("Core.kt", "", ["Utils"]),
        make_unit("Utils.kt", ""),
    ])

    path = [step.identity for step in LearningPathGenerator().generate(graph)]

    assert path[0] == "/repo/Utils.kt"
    assert path[-1] == "/repo/Main.kt"


def test_path_respects_every_dependency(make_unit):
    """Every dependency appears before each of its dependents."""
    graph = build_graph([
        make_unit("App.kt", "", ["Service", "Config"]),
        make_unit("Service.kt", "", ["Repo", "Model"]),
        make_unit("Repo.kt", "", ["Model", "Db"]),
        make_unit("Model.kt", ""),
        make_unit("Db.kt", ""),
        make_unit("Config.kt", ""),
    ])

    position = {step.identity: i for i, step in enumerate(LearningPathGenerator().generate(graph))}

    for src, dst in graph.edges:
        assert position[dst] < position[src]


def test_handles_cycles_gracefully(make_unit):
    """A <-> B returns both files, labelled as cycle members."""
    graph = build_graph([make_unit("A.kt", "", ["B"]), make_unit("B.kt", "", ["A"])])

    path = LearningPathGenerator().generate(graph)

    assert len(path) == 2
    assert all(step.role is Role.CYCLE_MEMBER for step in path)
    assert all(step.rationale == RATIONALES[Role.CYCLE_MEMBER] for step in path)


def test_cycle_fallback_orders_by_out_degree(make_unit):
    graph = build_graph([
        make_unit("A.kt", "", ["B", "C"]),
        make_unit("B.kt", "", ["A"]),
        make_unit("C.kt", ""),
    ])

    path = [step.identity for step in LearningPathGenerator().generate(graph)]

    assert path == ["/repo/C.kt", "/repo/B.kt", "/repo/A.kt"]


def test_isolated_file_is_fundamental(make_unit):
    path = LearningPathGenerator().generate(build_graph([make_unit("Alone.kt")]))

    assert len(path) == 1
    assert path[0].role is Role.FUNDAMENTAL


def test_empty_graph_gives_empty_path():
    assert LearningPathGenerator().generate(build_graph([])) == []


def test_scores_are_attached_but_do_not_reorder(make_unit):
    graph = build_graph([make_unit("A.kt", "", ["B"]), make_unit("B.kt", "")])
    scores = {"/repo/A.kt": 0.9, "/repo/B.kt": 0.1}

    path = LearningPathGenerator().generate(graph, scores)

    assert [step.identity for step in path] == ["/repo/B.kt", "/repo/A.kt"]
    assert [step.score for step in path] == [0.1, 0.9]


def test_includes_every_file(make_unit):
    """The path always has one step per file, with or without cycles."""
    rng = random.Random(42)
    generator = LearningPathGenerator()
    for _ in range(50):
        names = sorted({f"f{rng.randint(0, 999)}" for _ in range(rng.randint(1, 20))})
        units = [
            make_unit(f"{name}.kt", "com.pkg", [f"com.pkg.{d}" for d in rng.sample(names, min(len(names), rng.randint(0, 3)))])
            for name in names
        ]
        graph = build_graph(units)

        path = generator.generate(graph)

        assert sorted(step.identity for step in path) == sorted(u.identity for u in units)
