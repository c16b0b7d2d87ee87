"""Configuration paths and analysis constants for CodeContext."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("CODECONTEXT_HOME", str(Path.home() / ".codecontext"))).expanduser()
CACHE_DIR = BASE_DIR / "cache"
CONFIG_FILENAME = ".codecontext.toml"

# Extraction fan-out: files parsed concurrently per chunk
CHUNK_SIZE = 100

# Hotspot scoring
DAMPING_FACTOR = 0.85
PAGERANK_ITERATIONS = 100

# A reference ending in this marker targets a whole namespace
WILDCARD_SUFFIX = ".*"

DEFAULT_EXCLUDE_PATHS = [
    ".git",
    ".idea",
    ".gradle",
    "build",
    "target",
    "node_modules",
    ".vscode",
    "out",
    "dist",
    ".next",
    "__pycache__",
    ".venv",
    "venv",
    ".codecontext",
]
