"""Parse rule sources with YAML frontmatter into rule documents."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import yaml

from rule_resolver.constants import SOURCE_ID_SEPARATOR
from rule_resolver.errors import MalformedDocumentError
from rule_resolver.resolution.scope import compile_glob
from rule_resolver.rules.models import (
    ContentBlock,
    Origin,
    RawRuleSource,
    RuleDocument,
    sha256_text,
)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)
_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t#]*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")

_SCOPE_KEYS = ("scope", "globs")


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Return (raw frontmatter or None, body)."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end() :]


def split_blocks(body: str) -> list[str]:
    """Split a markdown body into heading-delimited blocks.

    Headings inside fenced code are ignored. Text before the first heading is
    its own block.
    """
    blocks: list[str] = []
    current: list[str] = []
    fence: Optional[str] = None

    for line in body.split("\n"):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
        elif fence is None and _HEADING_RE.match(line) and current:
            blocks.append("\n".join(current))
            current = []
        current.append(line)

    if current:
        blocks.append("\n".join(current))
    return [stripped for stripped in (_strip_blank_lines(block) for block in blocks) if stripped]


def heading_of(block_text: str) -> Optional[str]:
    first_line = block_text.split("\n", 1)[0]
    match = _HEADING_RE.match(first_line)
    if not match:
        return None
    return (match.group(2) or "").strip()


def _strip_blank_lines(text: str) -> str:
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def _string_list(raw: dict[str, Any], key: str, source: RawRuleSource) -> list[str]:
    value = raw.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise MalformedDocumentError(
            source.id, f"'{key}' must be a string or a list of strings", path=source.source_path
        )
    result: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise MalformedDocumentError(
                source.id, f"'{key}' contains a non-string or empty entry", path=source.source_path
            )
        result.append(item.strip())
    return result


def _unique(items: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _qualify(reference: str, source: RawRuleSource) -> str:
    if not source.namespace or SOURCE_ID_SEPARATOR in reference:
        return reference
    return f"{source.namespace}{SOURCE_ID_SEPARATOR}{reference}"


def _parse_origin(raw: dict[str, Any], source: RawRuleSource) -> Origin:
    value = raw.get("origin")
    if value is None:
        if source.default_origin is None:
            raise MalformedDocumentError(source.id, "missing 'origin'", path=source.source_path)
        return source.default_origin
    if not isinstance(value, str):
        raise MalformedDocumentError(source.id, "'origin' must be a string", path=source.source_path)
    try:
        return Origin.parse(value)
    except ValueError:
        raise MalformedDocumentError(
            source.id, f"unknown origin '{value}'", path=source.source_path
        ) from None


def _load_frontmatter(raw_text: Optional[str], source: RawRuleSource) -> dict[str, Any]:
    if raw_text is None:
        return {}
    try:
        raw = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise MalformedDocumentError(
            source.id, f"invalid YAML frontmatter ({exc})", path=source.source_path
        ) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedDocumentError(
            source.id, "frontmatter must be a mapping", path=source.source_path
        )
    return raw


def _scope_patterns(raw: dict[str, Any], source: RawRuleSource) -> tuple[str, ...]:
    patterns: list[str] = []
    for key in _SCOPE_KEYS:
        patterns.extend(_string_list(raw, key, source))
    for pattern in patterns:
        try:
            compile_glob(pattern)
        except re.error as exc:
            raise MalformedDocumentError(
                source.id, f"invalid scope pattern '{pattern}' ({exc})", path=source.source_path
            ) from exc
    return _unique(patterns)


def compute_fingerprint(
    origin: Origin,
    scope_patterns: tuple[str, ...],
    tool_targets: frozenset[str],
    references: tuple[str, ...],
    blocks: tuple[ContentBlock, ...],
) -> str:
    canonical = {
        "origin": origin.value,
        "scope": list(scope_patterns),
        "tools": sorted(tool_targets),
        "references": list(references),
        "blocks": [block.digest for block in blocks],
    }
    return sha256_text(json.dumps(canonical, sort_keys=True, separators=(",", ":")))


def parse_rule(source: RawRuleSource) -> RuleDocument:
    raw_frontmatter, body = split_frontmatter(source.text.replace("\r\n", "\n"))
    raw = _load_frontmatter(raw_frontmatter, source)

    origin = _parse_origin(raw, source)
    scope_patterns = _scope_patterns(raw, source)
    tool_targets = frozenset(_string_list(raw, "tools", source))
    references = _unique(
        [_qualify(reference, source) for reference in _string_list(raw, "references", source)]
    )
    if source.id in references:
        raise MalformedDocumentError(source.id, "document references itself", path=source.source_path)

    description = raw.get("description", "")
    blocks = tuple(ContentBlock(text) for text in split_blocks(body))

    return RuleDocument(
        id=source.id,
        origin=origin,
        scope_patterns=scope_patterns,
        tool_targets=tool_targets,
        references=references,
        blocks=blocks,
        fingerprint=compute_fingerprint(origin, scope_patterns, tool_targets, references, blocks),
        source_path=source.source_path,
        description=str(description) if description is not None else "",
    )
