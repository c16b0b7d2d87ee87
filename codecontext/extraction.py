"""Parallel extraction of :class:`ParsedUnit` records from source files.

Files are processed in fixed-size chunks. Every file in a chunk is parsed
concurrently on a bounded thread pool, and the whole chunk is awaited before
the next one is submitted, so at most ``chunk_size`` parses are ever in flight.

Each file produces an explicit :class:`ExtractionOutcome`; a parser failure
becomes an empty unit with status ``FAILED`` instead of aborting the batch.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .cache import NullCache, ParseCache
from .config import CHUNK_SIZE
from .models import ParsedUnit

logger = logging.getLogger(__name__)

ParseFunction = Callable[[Path], ParsedUnit]
Cache = Union[ParseCache, NullCache]


class ExtractionStatus(str, Enum):
    PARSED = "parsed"
    CACHED = "cached"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionOutcome:
    unit: ParsedUnit
    status: ExtractionStatus
    error: str = ""


@dataclass
class ExtractionReport:
    outcomes: List[ExtractionOutcome] = field(default_factory=list)

    @property
    def units(self) -> List[ParsedUnit]:
        return [o.unit for o in self.outcomes]

    @property
    def parsed(self) -> int:
        """Files that produced a unit, including failed ones replaced by empty units."""
        return len(self.outcomes)

    @property
    def cached(self) -> int:
        return sum(1 for o in self.outcomes if o.status is ExtractionStatus.CACHED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status is ExtractionStatus.FAILED)

    @property
    def failures(self) -> List[Tuple[str, str]]:
        return [(o.unit.identity, o.error) for o in self.outcomes if o.status is ExtractionStatus.FAILED]


def chunked(items: Sequence[Path], size: int) -> List[Sequence[Path]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [items[i:i + size] for i in range(0, len(items), size)]


class ParallelExtractor:
    """Apply a parse function to a batch of files, consulting a parse cache.

    *scope* partitions cache entries, normally the project root the parse
    function resolves namespaces against.
    """

    def __init__(
        self,
        parse_fn: ParseFunction,
        cache: Optional[Cache] = None,
        chunk_size: int = CHUNK_SIZE,
        parallel: bool = True,
        scope: str = "",
    ) -> None:
        self.parse_fn = parse_fn
        self.cache: Cache = cache if cache is not None else NullCache()
        self.chunk_size = chunk_size
        self.parallel = parallel
        self.scope = scope

    def extract(self, files: Sequence[Path]) -> ExtractionReport:
        report = ExtractionReport()
        if not files:
            return report

        snapshot = list(files)
        chunks = chunked(snapshot, self.chunk_size)
        if not self.parallel:
            for chunk in chunks:
                report.outcomes.extend(self.extract_one(path) for path in chunk)
        else:
            workers = min(self.chunk_size, len(snapshot))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="codecontext-parse") as pool:
                for chunk in chunks:
                    futures = [pool.submit(self.extract_one, path) for path in chunk]
                    for future in as_completed(futures):
                        report.outcomes.append(future.result())

        if report.failed:
            logger.warning("Failed to parse %d of %d files", report.failed, len(snapshot))
        logger.debug(
            "Extracted %d files (%d from cache, %d failed)",
            report.parsed, report.cached, report.failed,
        )
        return report

    def extract_one(self, path: Path) -> ExtractionOutcome:
        identity = str(path)
        try:
            identity = str(Path(path).resolve())
            cached = self._cached(identity)
            if cached is not None:
                return ExtractionOutcome(cached, ExtractionStatus.CACHED)
            unit = self.parse_fn(Path(identity))
        except Exception as exc:
            logger.warning("Failed to parse %s: %s", identity, exc)
            return ExtractionOutcome(ParsedUnit.empty(identity), ExtractionStatus.FAILED, str(exc))

        if unit.identity != identity:
            unit = replace(unit, identity=identity)
        try:
            self.cache.put(identity, unit, self.scope)
        except Exception as exc:
            logger.warning("Failed to cache %s: %s", identity, exc)
        return ExtractionOutcome(unit, ExtractionStatus.PARSED)

    def _cached(self, identity: str) -> Optional[ParsedUnit]:
        """Look *identity* up in the cache; a failing cache counts as a miss."""
        try:
            return self.cache.get(identity, self.scope)
        except Exception as exc:
            logger.warning("Cache lookup failed for %s: %s", identity, exc)
            return None
