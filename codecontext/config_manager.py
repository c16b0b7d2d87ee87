"""Configuration manager for CodeContext analysis runs using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .config import CHUNK_SIZE, CONFIG_FILENAME, DEFAULT_EXCLUDE_PATHS

logger = logging.getLogger(__name__)

SECTION = "analysis"


@dataclass
class AnalysisConfig:
    exclude_paths: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS))
    max_files_analyze: int = 5000
    git_commit_limit: int = 1000
    enable_cache: bool = True
    enable_parallel: bool = True
    hotspot_count: int = 15
    learning_path_length: int = 20
    chunk_size: int = CHUNK_SIZE

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AnalysisConfig":
        """Build a config from a mapping.

        Keys this version does not know are ignored. A known key with a value
        of the wrong type, or a non-positive count, is logged and replaced by
        its default.
        """
        known = {f.name for f in fields(cls)}
        accepted: Dict[str, Any] = {}
        for key, value in payload.items():
            if key not in known:
                continue
            problem = _check_value(key, value)
            if problem:
                logger.warning("Ignoring config value %s = %r: %s", key, value, problem)
                continue
            accepted[key] = value
        return cls(**accepted)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_BOOL_FIELDS = {"enable_cache", "enable_parallel"}
_COUNT_FIELDS = {
    "max_files_analyze",
    "git_commit_limit",
    "hotspot_count",
    "learning_path_length",
    "chunk_size",
}


def _check_value(key: str, value: Any) -> Optional[str]:
    """Return why *value* is unusable for *key*, or None when it is fine."""
    if key in _BOOL_FIELDS:
        return None if isinstance(value, bool) else "expected true or false"
    if key in _COUNT_FIELDS:
        # bool is an int subclass; `chunk_size = true` is still a mistake
        if isinstance(value, bool) or not isinstance(value, int):
            return "expected an integer"
        return None if value > 0 else "must be positive"
    if key == "exclude_paths":
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return None
        return "expected a list of strings"
    return None


def find_config_file(root: Path) -> Optional[Path]:
    """Return the project config file under *root*, falling back to the cwd."""
    for candidate in (root / CONFIG_FILENAME, Path.cwd() / CONFIG_FILENAME):
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path]) -> AnalysisConfig:
    """Load the ``[analysis]`` table from a TOML file.

    Returns:
        The parsed configuration. Falls back to defaults when the file is
        missing or cannot be parsed.
    """
    if path is None or not path.exists():
        return AnalysisConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = toml.load(f)
        section = payload.get(SECTION, {})
        if not isinstance(section, dict):
            raise ValueError(f"[{SECTION}] must be a table")
        return AnalysisConfig.from_dict(section)
    except (OSError, ValueError, TypeError, toml.TomlDecodeError) as exc:
        logger.warning("Failed to parse config %s, using defaults: %s", path, exc)
        return AnalysisConfig()


def save_config(config: AnalysisConfig, path: Path) -> Path:
    """Write *config* as the ``[analysis]`` table of *path*, preserving other tables."""
    payload: Dict[str, Any] = {}
    if path.exists():
        try:
            payload = toml.load(str(path))
        except (OSError, toml.TomlDecodeError) as exc:
            logger.warning("Overwriting unreadable config %s: %s", path, exc)
            payload = {}

    payload[SECTION] = config.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        toml.dump(payload, f)
    return path
