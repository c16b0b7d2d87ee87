"""Source file discovery for a repository tree."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import DEFAULT_EXCLUDE_PATHS

logger = logging.getLogger(__name__)


class RepositoryScanner:
    """Walk a directory tree and collect files with supported extensions.

    A directory or file is skipped when any path component equals, or
    glob-matches, one of *exclude_paths*.
    """

    def __init__(
        self,
        extensions: Iterable[str],
        exclude_paths: Sequence[str] = DEFAULT_EXCLUDE_PATHS,
    ) -> None:
        self.extensions = set(extensions)
        self.exclude_paths = list(exclude_paths)

    def is_excluded(self, name: str) -> bool:
        return any(name == pattern or fnmatch.fnmatch(name, pattern) for pattern in self.exclude_paths)

    def scan(self, root: Path) -> List[Path]:
        root = root.resolve()
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not self.is_excluded(d))
            for filename in filenames:
                if self.is_excluded(filename):
                    continue
                path = Path(dirpath) / filename
                if path.suffix in self.extensions:
                    found.append(path)

        logger.debug("Scanned %s: %d source files", root, len(found))
        return sorted(found)
