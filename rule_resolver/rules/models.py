"""Rule data models."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Optional


class Origin(str, Enum):
    GLOBAL = "global"
    WORKSPACE = "workspace"
    PROJECT = "project"
    REFERENCE = "reference"

    @property
    def tier(self) -> int:
        return _ORIGIN_TIERS[self]

    @classmethod
    def parse(cls, value: str) -> "Origin":
        normalized = value.strip().lower().replace("_", "-")
        normalized = _ORIGIN_ALIASES.get(normalized, normalized)
        return cls(normalized)


_ORIGIN_TIERS = {
    Origin.GLOBAL: 0,
    Origin.WORKSPACE: 1,
    Origin.PROJECT: 2,
    Origin.REFERENCE: 3,
}

_ORIGIN_ALIASES = {
    "project-scoped": "project",
    "projectscoped": "project",
    "explicit": "reference",
    "explicit-reference": "reference",
    "explicitreference": "reference",
}


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ContentBlock:
    text: str
    digest: str = ""

    def __post_init__(self) -> None:
        if not self.digest:
            object.__setattr__(self, "digest", sha256_text(self.text))


@dataclass(frozen=True)
class RawRuleSource:
    id: str
    text: str
    source_path: Optional[Path] = None
    default_origin: Optional[Origin] = None
    namespace: Optional[str] = None


@dataclass(frozen=True)
class RuleDocument:
    id: str
    origin: Origin
    scope_patterns: tuple[str, ...] = ()
    tool_targets: frozenset[str] = frozenset()
    references: tuple[str, ...] = ()
    blocks: tuple[ContentBlock, ...] = ()
    fingerprint: str = ""
    source_path: Optional[Path] = None
    description: str = ""

    @property
    def is_scoped(self) -> bool:
        return bool(self.scope_patterns)

    @property
    def body(self) -> str:
        return "\n\n".join(block.text for block in self.blocks)


@dataclass(frozen=True)
class ResolutionRequest:
    target_path: str
    tool_id: str

    @classmethod
    def create(cls, target_path: str | Path, tool_id: str) -> "ResolutionRequest":
        return cls(target_path=normalize_target_path(target_path), tool_id=tool_id.strip())


def normalize_target_path(target_path: str | Path) -> str:
    text = str(target_path).replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    if not text:
        return text
    return str(PurePosixPath(text))


@dataclass(frozen=True)
class EffectiveBlock:
    text: str
    document_id: str
    included_by: str

    def as_dict(self) -> dict[str, str]:
        return {
            "document": self.document_id,
            "included_by": self.included_by,
            "text": self.text,
        }


@dataclass(frozen=True)
class ConflictCandidate:
    first_id: str
    second_id: str
    topics: tuple[str, ...]

    @property
    def preferred_id(self) -> str:
        return self.second_id

    def as_dict(self) -> dict[str, Any]:
        return {
            "first": self.first_id,
            "second": self.second_id,
            "topics": list(self.topics),
            "preferred": self.preferred_id,
        }


@dataclass(frozen=True)
class EffectiveRuleSet:
    request: ResolutionRequest
    blocks: tuple[EffectiveBlock, ...] = ()
    document_ids: tuple[str, ...] = ()
    conflicts: tuple[ConflictCandidate, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def texts(self) -> list[str]:
        return [block.text for block in self.blocks]

    def as_dict(self) -> dict[str, Any]:
        return {
            "target": self.request.target_path,
            "tool": self.request.tool_id,
            "documents": list(self.document_ids),
            "blocks": [block.as_dict() for block in self.blocks],
            "conflicts": [conflict.as_dict() for conflict in self.conflicts],
        }


@dataclass
class LoadReport:
    documents: list[RuleDocument] = field(default_factory=list)
    warnings: list[Exception] = field(default_factory=list)

    def document_ids(self) -> list[str]:
        return [document.id for document in self.documents]
