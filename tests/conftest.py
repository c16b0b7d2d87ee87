"""Pytest configuration and fixtures for CodeContext tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, Sequence

import pytest

from codecontext.models import ParsedUnit

UnitFactory = Callable[..., ParsedUnit]


@pytest.fixture(autouse=True)
def _isolated_cache_dir(tmp_path_factory, monkeypatch):
    """Keep every test's parse cache out of the real ~/.codecontext."""
    cache_dir = tmp_path_factory.mktemp("codecontext_home") / "cache"
    monkeypatch.setattr("codecontext.config.CACHE_DIR", cache_dir)
    return cache_dir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp.resolve()
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample Python test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def make_unit() -> UnitFactory:
    """Build ParsedUnits for in-memory graph tests.

    ``make_unit("A.kt", "com", ["com.B"])`` creates a unit whose identity is
    ``/repo/A.kt``.
    """

    def _make(name: str, namespace: str = "", references: Sequence[str] = (), root: str = "/repo") -> ParsedUnit:
        return ParsedUnit(
            identity=f"{root}/{name}",
            namespace=namespace,
            references=tuple(references),
            description=f"Simulated {name}",
        )

    return _make


@pytest.fixture
def kotlin_project(temp_dir: Path) -> Path:
    """A small Kotlin project: Main -> {Core, Utils}, Core -> Utils."""
    src = temp_dir / "kotlin_project" / "src" / "com" / "example"
    (src / "util").mkdir(parents=True)

    (src / "Main.kt").write_text(
        "package com.example\n\n"
        "import com.example.Core\n"
        "import com.example.util.*\n\n"
        "/**\n * Application entry point.\n */\n"
        "fun main() { Core().run() }\n",
        encoding="utf-8",
    )
    (src / "Core.kt").write_text(
        "package com.example\n\n"
        "import com.example.util.Utils\n"
        "import kotlinx.coroutines.runBlocking\n\n"
        "class Core { fun run() = Utils.greet() }\n",
        encoding="utf-8",
    )
    (src / "util" / "Utils.kt").write_text(
        "package com.example.util\n\n"
        "/** Shared helpers. */\n"
        "object Utils { fun greet() = println(\"hi\") }\n",
        encoding="utf-8",
    )
    return temp_dir / "kotlin_project"
