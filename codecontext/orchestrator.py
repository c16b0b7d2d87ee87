"""Orchestrator coordinating scanning, extraction, graph analysis and the learning path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .cache import NullCache, ParseCache
from .config_manager import AnalysisConfig
from .extraction import Cache, ExtractionReport, ParallelExtractor
from .graph import DependencyGraph, GraphBuilder
from .history import GitHistoryAnalyzer
from .hotspots import HotspotScorer, top_hotspots
from .learning_path import LearningPathGenerator
from .models import LearningStep, ParsedUnit
from .parser import ParserRegistry
from .scanner import RepositoryScanner

logger = logging.getLogger(__name__)


class TooManyFilesError(RuntimeError):
    def __init__(self, found: int, limit: int) -> None:
        super().__init__(f"Too many files ({found}). Limit: {limit}")
        self.found = found
        self.limit = limit


@dataclass
class AnalysisResult:
    root: Path
    units: List[ParsedUnit]
    report: ExtractionReport
    graph: DependencyGraph
    scores: Dict[str, float] = field(default_factory=dict)
    learning_path: List[LearningStep] = field(default_factory=list)

    def hotspots(self, limit: int = 10) -> List[Tuple[str, float]]:
        return top_hotspots(self.scores, limit)

    def unit(self, identity: str) -> Optional[ParsedUnit]:
        for unit in self.units:
            if unit.identity == identity:
                return unit
        return None


class AnalysisOrchestrator:
    """Runs the full analysis pipeline over one source tree."""

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        cache: Optional[Cache] = None,
        with_history: bool = True,
    ) -> None:
        self.config = config or AnalysisConfig()
        if cache is None:
            cache = ParseCache() if self.config.enable_cache else NullCache()
        self.cache = cache
        self.with_history = with_history
        self.builder = GraphBuilder()
        self.scorer = HotspotScorer()
        self.path_generator = LearningPathGenerator()

    def scan(self, root: Path) -> List[Path]:
        registry = ParserRegistry(root)
        scanner = RepositoryScanner(registry.supported_extensions, self.config.exclude_paths)
        return scanner.scan(root)

    def extract(self, root: Path, files: List[Path]) -> ExtractionReport:
        extractor = ParallelExtractor(
            ParserRegistry(root),
            cache=self.cache,
            chunk_size=self.config.chunk_size,
            parallel=self.config.enable_parallel,
            scope=str(root.resolve()),
        )
        return extractor.extract(files)

    def run(self, root: Path) -> AnalysisResult:
        root = root.resolve()
        files = self.scan(root)
        if len(files) > self.config.max_files_analyze:
            raise TooManyFilesError(len(files), self.config.max_files_analyze)

        report = self.extract(root, files)
        units = report.units
        if self.with_history and units:
            units = GitHistoryAnalyzer(self.config.git_commit_limit).analyze(root, units)

        graph = self.builder.build(units).unwrap()
        scores = self.scorer.score(graph)
        learning_path = self.path_generator.generate(graph, scores)

        logger.info(
            "Analyzed %s: %d files, %d dependencies%s",
            root, len(graph), len(graph.edges), " (cyclic)" if graph.cyclic else "",
        )
        return AnalysisResult(
            root=root,
            units=units,
            report=report,
            graph=graph,
            scores=scores,
            learning_path=learning_path,
        )
