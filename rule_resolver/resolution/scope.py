"""Scope matching of rule documents against a resolution request."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from rule_resolver.rules.models import ResolutionRequest, RuleDocument


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a path glob to a regular expression.

    ``*`` and ``?`` stay within one path segment, ``**`` crosses separators
    and ``**/`` also matches zero directories. Matching is case-sensitive.
    """
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                index += 2
                if pattern.startswith("/", index):
                    index += 1
                    parts.append("(?:.*/)?")
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = _class_end(pattern, index)
            if end is None:
                parts.append(re.escape(char))
            else:
                parts.append(_class_regex(pattern[index + 1 : end]))
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts) + r"\Z")


def _class_end(pattern: str, start: int) -> Optional[int]:
    index = start + 1
    if index < len(pattern) and pattern[index] in "!^":
        index += 1
    if index < len(pattern) and pattern[index] == "]":
        index += 1
    end = pattern.find("]", index)
    return None if end == -1 else end


def _class_regex(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    body = body.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
    if negate:
        return "[^/" + body + "]"
    return "[" + body + "]"


def glob_match(pattern: str, path: str) -> bool:
    return compile_glob(pattern).match(path) is not None


class ScopeMatcher:
    def matches_tool(self, document: RuleDocument, tool_id: str) -> bool:
        return not document.tool_targets or tool_id in document.tool_targets

    def matches_path(self, document: RuleDocument, target_path: str) -> bool:
        if not document.scope_patterns:
            return True
        return any(glob_match(pattern, target_path) for pattern in document.scope_patterns)

    def is_applicable(self, document: RuleDocument, request: ResolutionRequest) -> bool:
        return self.matches_tool(document, request.tool_id) and self.matches_path(
            document, request.target_path
        )

    def filter(
        self, documents: list[RuleDocument], request: ResolutionRequest
    ) -> list[RuleDocument]:
        return [document for document in documents if self.is_applicable(document, request)]
