"""Git history enrichment for parsed units.

A single ``git log --name-status`` pass collects per-file change statistics,
which are then copied onto the units. Any git problem leaves the units as they
were; history is informational and never affects the dependency graph.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from .models import GitHistory, ParsedUnit

logger = logging.getLogger(__name__)

_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
_LOG_FORMAT = f"{_RECORD_SEP}%ct{_FIELD_SEP}%an{_FIELD_SEP}%s"


@dataclass
class FileChangeStats:
    changes: int = 0
    last_modified: int = 0
    authors: Counter = field(default_factory=Counter)
    messages: List[str] = field(default_factory=list)

    def to_history(self, top: int = 3) -> GitHistory:
        return GitHistory(
            last_modified=self.last_modified,
            change_frequency=self.changes,
            top_authors=tuple(name for name, _ in self.authors.most_common(top)),
            recent_messages=tuple(self.messages[:top]),
        )


def parse_git_log(output: str) -> Dict[str, FileChangeStats]:
    """Aggregate ``git log --name-status`` output (newest first) per path."""
    stats: Dict[str, FileChangeStats] = {}
    for record in output.split(_RECORD_SEP):
        lines = [line for line in record.splitlines() if line.strip()]
        if not lines:
            continue
        header = lines[0].split(_FIELD_SEP)
        if len(header) != 3:
            continue
        timestamp, author, subject = header
        try:
            committed_ms = int(timestamp) * 1000
        except ValueError:
            continue
        for line in lines[1:]:
            parts = line.split("\t")
            if len(parts) < 2:
                continue
            path = parts[-1]
            entry = stats.setdefault(path, FileChangeStats())
            entry.changes += 1
            entry.last_modified = max(entry.last_modified, committed_ms)
            entry.authors[author] += 1
            entry.messages.append(subject)
    return stats


class GitHistoryAnalyzer:
    def __init__(self, commit_limit: int = 1000, git_executable: str = "git") -> None:
        self.commit_limit = commit_limit
        self.git_executable = git_executable

    def analyze(self, repo_root: Path, units: Sequence[ParsedUnit]) -> List[ParsedUnit]:
        repo_root = repo_root.resolve()
        if not (repo_root / ".git").exists():
            logger.warning("No .git directory found in %s. Skipping Git analysis.", repo_root)
            return list(units)
        if shutil.which(self.git_executable) is None:
            logger.warning("git executable not found. Skipping Git analysis.")
            return list(units)

        try:
            result = subprocess.run(
                [
                    self.git_executable, "-C", str(repo_root), "log",
                    f"--max-count={self.commit_limit}",
                    "--name-status", "--no-renames", "--relative",
                    f"--format={_LOG_FORMAT}",
                ],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=120,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Git analysis failed: %s", exc)
            return list(units)

        stats = parse_git_log(result.stdout)
        logger.debug("Collected git history for %d paths", len(stats))

        enriched: List[ParsedUnit] = []
        for unit in units:
            try:
                rel = Path(unit.identity).relative_to(repo_root).as_posix()
            except ValueError:
                enriched.append(unit)
                continue
            entry = stats.get(rel)
            enriched.append(unit.with_history(entry.to_history()) if entry else unit)
        return enriched
