"""Per-language extraction of package, import and doc-comment metadata.

Each parser turns one source file into a :class:`ParsedUnit`. Parsers are
deliberately shallow: Kotlin and Java are read with regular expressions (robust
against broken syntax), Python with the built-in ``ast`` module. Parsers may
raise on unreadable input; the extraction orchestrator records those failures.
"""

from __future__ import annotations

import ast
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import WILDCARD_SUFFIX
from .models import ParsedUnit

logger = logging.getLogger(__name__)

_DOC_COMMENT_RE = re.compile(r"/\*\*([\s\S]*?)\*/")


# ===================================================================
# Abstract Parser Interface
# ===================================================================

class LanguageParser(ABC):
    """Abstract base class for all language parsers."""

    extensions: Tuple[str, ...] = ()

    @abstractmethod
    def parse(self, file_path: Path) -> ParsedUnit:
        """Parse a single file into a :class:`ParsedUnit`."""
        ...

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix in self.extensions

    @staticmethod
    def _read(file_path: Path) -> str:
        return file_path.read_text(encoding="utf-8", errors="ignore")


def _flatten_doc_comment(body: str) -> str:
    """Join the lines of a ``/** ... */`` body into a single sentence-like string."""
    lines = []
    for line in body.splitlines():
        text = line.strip()
        if text.startswith("*"):
            text = text[1:].strip()
        if text:
            lines.append(text)
    return " ".join(lines)


# ===================================================================
# Kotlin
# ===================================================================

class KotlinRegexParser(LanguageParser):
    """Line-oriented Kotlin parser.

    Handles ``import a.b.C as Alias`` (alias dropped), backtick-quoted names,
    and wildcard imports. The first KDoc block becomes the description.
    """

    extensions = (".kt", ".kts")

    _package_re = re.compile(r"^\s*package\s+([`\w.]+)")
    _import_re = re.compile(r"^\s*import\s+([`\w.*]+)(?:\s+as\s+[`\w]+)?")

    def parse(self, file_path: Path) -> ParsedUnit:
        content = self._read(file_path)
        namespace = ""
        imports: List[str] = []

        for line in content.splitlines():
            stripped = line.strip()
            if stripped.startswith("package "):
                match = self._package_re.match(stripped)
                if match:
                    namespace = match.group(1).replace("`", "")
            elif stripped.startswith("import "):
                match = self._import_re.match(stripped)
                if match:
                    imports.append(match.group(1).replace("`", ""))

        match = _DOC_COMMENT_RE.search(content)
        description = _flatten_doc_comment(match.group(1)) if match else ""

        return ParsedUnit(
            identity=str(file_path),
            namespace=namespace,
            references=tuple(imports),
            description=description,
        )


# ===================================================================
# Java
# ===================================================================

class JavaRegexParser(LanguageParser):
    """Java parser reading package and import declarations.

    ``import static a.b.C.member`` is recorded as ``a.b.C`` so it resolves to
    the declaring file. The description is the first Javadoc comment, cut at
    its first block tag.
    """

    extensions = (".java",)

    _package_re = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)
    _import_re = re.compile(r"^\s*import\s+(static\s+)?([\w.]+(?:\.\*)?)\s*;", re.MULTILINE)

    def parse(self, file_path: Path) -> ParsedUnit:
        content = self._read(file_path)

        package = self._package_re.search(content)
        namespace = package.group(1) if package else ""

        imports: List[str] = []
        for match in self._import_re.finditer(content):
            name = match.group(2)
            if match.group(1) and not name.endswith(WILDCARD_SUFFIX):
                name = name.rsplit(".", 1)[0]
            elif match.group(1):
                name = name[: -len(WILDCARD_SUFFIX)]
            imports.append(name)

        description = ""
        doc = _DOC_COMMENT_RE.search(content)
        if doc:
            text = _flatten_doc_comment(doc.group(1))
            description = text.split(" @", 1)[0].strip()
            if description.startswith("@"):
                description = ""

        return ParsedUnit(
            identity=str(file_path),
            namespace=namespace,
            references=tuple(imports),
            description=description,
        )


# ===================================================================
# Python
# ===================================================================

_PACKAGE_INIT = "__init__"


class PythonAstParser(LanguageParser):
    """Python parser built on :mod:`ast`.

    The namespace is the dotted package path of the file relative to the
    project root, so ``pkg/sub/mod.py`` has namespace ``pkg.sub`` and resolves
    as ``pkg.sub.mod``. ``from pkg import name`` references both ``pkg`` and
    ``pkg.name`` because *name* may be a submodule. Every imported module is
    also referenced as ``module.__init__`` so that package imports reach the
    package's ``__init__.py``.
    """

    extensions = (".py",)

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root.resolve()

    def namespace_for(self, file_path: Path) -> str:
        try:
            rel = file_path.resolve().relative_to(self.project_root)
        except ValueError:
            return ""
        return ".".join(rel.parent.parts)

    def parse(self, file_path: Path) -> ParsedUnit:
        source = self._read(file_path)
        tree = ast.parse(source, filename=str(file_path))
        namespace = self.namespace_for(file_path)

        references: List[str] = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    references.extend((alias.name, f"{alias.name}.{_PACKAGE_INIT}"))
            elif isinstance(node, ast.ImportFrom):
                module = self._absolute_module(namespace, node.module, node.level)
                if module is None:
                    continue
                if module:
                    references.extend((module, f"{module}.{_PACKAGE_INIT}"))
                for alias in node.names:
                    if alias.name == "*":
                        references.append(f"{module}{WILDCARD_SUFFIX}")
                    else:
                        references.append(f"{module}.{alias.name}" if module else alias.name)

        docstring = ast.get_docstring(tree) or ""
        description = " ".join(docstring.strip().split("\n\n", 1)[0].split())

        return ParsedUnit(
            identity=str(file_path),
            namespace=namespace,
            references=tuple(references),
            description=description,
        )

    @staticmethod
    def _absolute_module(namespace: str, module: Optional[str], level: int) -> Optional[str]:
        """Resolve a possibly relative ``from`` import; None if it escapes the root."""
        if level == 0:
            return module or ""
        parts = namespace.split(".") if namespace else []
        if level - 1 > len(parts):
            return None
        base = parts[: len(parts) - (level - 1)]
        if module:
            base.append(module)
        return ".".join(base)


# ===================================================================
# Registry
# ===================================================================

class ParserRegistry:
    """Dispatch files to the parser registered for their extension.

    Instances are callable and serve as the ``File -> ParsedUnit`` function of
    :class:`~codecontext.extraction.ParallelExtractor`.
    """

    def __init__(self, project_root: Path, parsers: Optional[List[LanguageParser]] = None) -> None:
        self.project_root = project_root
        self._by_extension: Dict[str, LanguageParser] = {}
        for parser in parsers or [KotlinRegexParser(), JavaRegexParser(), PythonAstParser(project_root)]:
            for ext in parser.extensions:
                self._by_extension[ext] = parser

    @property
    def supported_extensions(self) -> Tuple[str, ...]:
        return tuple(sorted(self._by_extension))

    def parser_for(self, file_path: Path) -> Optional[LanguageParser]:
        return self._by_extension.get(file_path.suffix)

    def parse(self, file_path: Path) -> ParsedUnit:
        parser = self.parser_for(file_path)
        if parser is None:
            logger.debug("No parser registered for %s", file_path)
            return ParsedUnit.empty(str(file_path))
        return parser.parse(file_path)

    __call__ = parse
