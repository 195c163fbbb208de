"""Render effective rule sets for an external generation or review tool."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

from rule_resolver.rules.models import EffectiveRuleSet


class IRuleSetCompiler(ABC):
    @abstractmethod
    def compile(self, rule_set: EffectiveRuleSet) -> str:
        """Return the rule set rendered for the consuming tool."""


class MarkdownRuleSetCompiler(IRuleSetCompiler):
    """Concatenate blocks into one markdown document with provenance comments."""

    def __init__(self, provenance: bool = True) -> None:
        self.provenance = provenance

    def compile(self, rule_set: EffectiveRuleSet) -> str:
        parts: list[str] = []
        for block in rule_set.blocks:
            if self.provenance:
                parts.append(f"<!-- rule: {block.document_id} -->")
            parts.append(block.text)
            parts.append("")
        return "\n".join(parts)


class JsonRuleSetCompiler(IRuleSetCompiler):
    def compile(self, rule_set: EffectiveRuleSet) -> str:
        return json.dumps(rule_set.as_dict(), indent=2, ensure_ascii=False) + "\n"


COMPILERS: dict[str, type[IRuleSetCompiler]] = {
    "markdown": MarkdownRuleSetCompiler,
    "json": JsonRuleSetCompiler,
}
