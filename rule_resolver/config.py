import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from rule_resolver.constants import (
    APP_NAME,
    CONFIG_FILENAME,
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_TOOL_ID,
    HOME_ENV_VAR,
    RULES_DIRNAME,
    TOPIC_CLASSIFIERS,
)
from rule_resolver.errors import InvalidConfigError
from rule_resolver.rules.models import Origin
from rule_resolver.utils import load_json_file, save_json_file

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "sources": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "path": {"type": "string", "minLength": 1},
                    "origin": {"type": "string"},
                },
                "required": ["name", "path"],
                "additionalProperties": False,
            },
        },
        "defaultTool": {"type": "string", "minLength": 1},
        "topicClassifier": {"enum": list(TOPIC_CLASSIFIERS)},
        "cache": {
            "type": "object",
            "properties": {"maxEntries": {"type": "integer", "minimum": 1}},
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}

_VALIDATOR = Draft202012Validator(CONFIG_SCHEMA)


def _schema_error_message(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


def default_root() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / APP_NAME


@dataclass(frozen=True)
class SourceConfig:
    name: str
    path: Path
    origin: Origin = Origin.PROJECT

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "path": str(self.path), "origin": self.origin.value}


@dataclass(frozen=True)
class ResolverConfig:
    sources: list[SourceConfig] = field(default_factory=list)
    default_tool: str = DEFAULT_TOOL_ID
    topic_classifier: str = "headings"
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES


class ConfigRepository:
    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = root or default_root()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def global_rules_dir(self) -> Path:
        return self.root / RULES_DIRNAME

    def load_payload(self) -> dict[str, Any]:
        payload, error = load_json_file(self.config_path)
        if error is not None:
            raise InvalidConfigError(self.config_path, f"invalid JSON: {error}")
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise InvalidConfigError(self.config_path, "must be a JSON object")
        schema_error = next(iter(_VALIDATOR.iter_errors(payload)), None)
        if schema_error is not None:
            raise InvalidConfigError(self.config_path, _schema_error_message(schema_error))
        return payload

    def load(self) -> ResolverConfig:
        payload = self.load_payload()
        sources = [self._source_from_item(item) for item in payload.get("sources", [])]
        if "sources" not in payload and self.global_rules_dir.is_dir():
            sources = [SourceConfig(name="global", path=self.global_rules_dir, origin=Origin.GLOBAL)]

        cache = payload.get("cache", {})
        return ResolverConfig(
            sources=sources,
            default_tool=payload.get("defaultTool", DEFAULT_TOOL_ID),
            topic_classifier=payload.get("topicClassifier", "headings"),
            cache_max_entries=cache.get("maxEntries", DEFAULT_CACHE_MAX_ENTRIES),
        )

    def _source_from_item(self, item: dict[str, str]) -> SourceConfig:
        origin_value = item.get("origin", Origin.PROJECT.value)
        try:
            origin = Origin.parse(origin_value)
        except ValueError:
            raise InvalidConfigError(
                self.config_path, f"unknown origin '{origin_value}' for source '{item['name']}'"
            ) from None
        return SourceConfig(
            name=item["name"].strip(),
            path=Path(item["path"]).expanduser(),
            origin=origin,
        )

    def save_sources(self, sources: list[SourceConfig]) -> None:
        payload = self.load_payload()
        payload["sources"] = [
            source.as_dict() for source in sorted(sources, key=lambda item: item.name.lower())
        ]
        save_json_file(self.config_path, payload)

    def add_source(self, name: str, path: Path, origin: Origin = Origin.PROJECT) -> SourceConfig:
        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("Source name cannot be empty")
        normalized_path = path.expanduser().resolve()
        if not normalized_path.exists() or not normalized_path.is_dir():
            raise ValueError(f"Source path does not exist or is not a directory: {normalized_path}")

        sources = self.load().sources
        for item in sources:
            if item.name == normalized_name:
                raise ValueError(f"Source name already exists: {normalized_name}")
            if item.path.expanduser().resolve() == normalized_path:
                raise ValueError(f"Source path already exists: {normalized_path}")

        source = SourceConfig(name=normalized_name, path=normalized_path, origin=origin)
        sources.append(source)
        self.save_sources(sources)
        return source

    def remove_source(self, name: str) -> bool:
        target_name = name.strip()
        sources = self.load().sources
        kept = [item for item in sources if item.name != target_name]
        if len(kept) == len(sources):
            return False
        self.save_sources(kept)
        return True
