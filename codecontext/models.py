"""Core data models shared by extraction, graph analysis and the learning path."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class GitHistory:
    last_modified: int = 0
    change_frequency: int = 0
    top_authors: Tuple[str, ...] = ()
    recent_messages: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_modified": self.last_modified,
            "change_frequency": self.change_frequency,
            "top_authors": list(self.top_authors),
            "recent_messages": list(self.recent_messages),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GitHistory":
        return cls(
            last_modified=int(payload.get("last_modified", 0)),
            change_frequency=int(payload.get("change_frequency", 0)),
            top_authors=tuple(payload.get("top_authors", ())),
            recent_messages=tuple(payload.get("recent_messages", ())),
        )


@dataclass(frozen=True)
class ParsedUnit:
    """Normalized metadata extracted from one source file.

    ``identity`` is the resolved absolute path of the file and is the vertex key
    in the dependency graph. ``references`` keeps the order and duplicates the
    parser saw; the graph treats it as a set.
    """

    identity: str
    namespace: str = ""
    references: Tuple[str, ...] = ()
    history: GitHistory = field(default_factory=GitHistory)
    description: str = ""

    @property
    def local_name(self) -> str:
        return PurePath(self.identity).stem

    @property
    def fqn(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.local_name}"
        return self.local_name

    @classmethod
    def empty(cls, identity: str) -> "ParsedUnit":
        return cls(identity=identity)

    def with_history(self, history: GitHistory) -> "ParsedUnit":
        return replace(self, history=history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "namespace": self.namespace,
            "references": list(self.references),
            "history": self.history.to_dict(),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ParsedUnit":
        return cls(
            identity=str(payload["identity"]),
            namespace=str(payload.get("namespace", "")),
            references=tuple(str(r) for r in payload.get("references", ())),
            history=GitHistory.from_dict(payload.get("history") or {}),
            description=str(payload.get("description", "")),
        )


class Role(str, Enum):
    FUNDAMENTAL = "Fundamental"
    ENTRY_POINT = "EntryPoint"
    CORE_LOGIC = "CoreLogic"
    CYCLE_MEMBER = "CycleMember"


@dataclass(frozen=True)
class LearningStep:
    identity: str
    role: Role
    rationale: str
    score: float = 0.0

    @property
    def name(self) -> str:
        return PurePath(self.identity).name
