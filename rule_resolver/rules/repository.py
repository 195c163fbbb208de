"""Repository for discovering rule sources on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rule_resolver.constants import RULE_SUFFIX, SOURCE_ID_SEPARATOR
from rule_resolver.rules.models import Origin, RawRuleSource


class RulesRepository:
    def __init__(
        self,
        root: Path,
        name: Optional[str] = None,
        default_origin: Optional[Origin] = None,
    ) -> None:
        self._root = root
        self._name = name
        self._default_origin = default_origin

    @property
    def rules_dir(self) -> Path:
        return self._root

    @property
    def name(self) -> Optional[str]:
        return self._name

    def document_id(self, path: Path) -> str:
        relative = path.relative_to(self._root).with_suffix("").as_posix()
        if self._name:
            return f"{self._name}{SOURCE_ID_SEPARATOR}{relative}"
        return relative

    def list_paths(self) -> list[Path]:
        if not self._root.exists():
            return []
        paths: list[Path] = []
        for child in sorted(self._root.rglob(f"*{RULE_SUFFIX}")):
            relative_parts = child.relative_to(self._root).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if child.is_file():
                paths.append(child)
        return paths

    def list_sources(self) -> list[RawRuleSource]:
        return [self.read_source(path) for path in self.list_paths()]

    def read_source(self, path: Path) -> RawRuleSource:
        return RawRuleSource(
            id=self.document_id(path),
            text=path.read_text(encoding="utf-8"),
            source_path=path,
            default_origin=self._default_origin,
            namespace=self._name,
        )

    def get_source(self, relative_id: str) -> RawRuleSource | None:
        path = self._root / f"{relative_id}{RULE_SUFFIX}"
        if not path.exists():
            return None
        return self.read_source(path)
