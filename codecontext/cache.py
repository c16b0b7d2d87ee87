"""Persistent parse cache keyed by source file path.

Each source file owns one JSON entry named after the MD5 digest of its absolute
path, prefixed by the project root when one is given. Parsers that derive a
namespace from the file's location relative to the root therefore never share
entries across roots. An entry is only trusted while the source file is not
newer than the entry itself. Any failure to read or write an entry degrades to
a cache miss.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from . import config
from .models import ParsedUnit

logger = logging.getLogger(__name__)


def cache_key(identity: str, scope: str = "") -> str:
    raw = f"{scope}\0{identity}" if scope else identity
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class NullCache:
    """Cache that never hits; used when caching is disabled."""

    def get(self, identity: str, scope: str = "") -> Optional[ParsedUnit]:
        return None

    def put(self, identity: str, unit: ParsedUnit, scope: str = "") -> None:
        return None

    def clear(self) -> int:
        return 0


class ParseCache:
    """File-backed cache of :class:`ParsedUnit` records.

    The directory is created on the first write.
    """

    def __init__(self, cache_dir: Optional[Path] = None) -> None:
        self.cache_dir = cache_dir or config.CACHE_DIR

    def entry_path(self, identity: str, scope: str = "") -> Path:
        return self.cache_dir / f"{cache_key(identity, scope)}.json"

    def get(self, identity: str, scope: str = "") -> Optional[ParsedUnit]:
        entry = self.entry_path(identity, scope)
        try:
            if not entry.exists():
                return None
            if Path(identity).stat().st_mtime > entry.stat().st_mtime:
                logger.debug("Stale cache entry for %s", identity)
                return None
            payload = json.loads(entry.read_text(encoding="utf-8"))
            unit = ParsedUnit.from_dict(payload)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.debug("Ignoring unreadable cache entry %s: %s", entry, exc)
            return None

        if unit.identity != identity:
            logger.debug("Cache entry %s belongs to %s, ignoring", entry, unit.identity)
            return None
        return unit

    def put(self, identity: str, unit: ParsedUnit, scope: str = "") -> None:
        entry = self.entry_path(identity, scope)
        tmp_name = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(unit.to_dict(), f)
            os.replace(tmp_name, entry)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to cache %s: %s", identity, exc)
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)

    def clear(self) -> int:
        """Delete every cache entry and return how many were removed."""
        removed = 0
        if not self.cache_dir.exists():
            return removed
        for entry in self.cache_dir.glob("*.json"):
            try:
                entry.unlink()
                removed += 1
            except OSError as exc:
                logger.warning("Could not remove cache entry %s: %s", entry, exc)
        return removed
