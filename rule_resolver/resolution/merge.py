"""Compose ordered rule documents into an effective rule set."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from rule_resolver.resolution.references import ReferenceResolver
from rule_resolver.rules.models import EffectiveBlock, RuleDocument

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    blocks: list[EffectiveBlock] = field(default_factory=list)
    documents: list[RuleDocument] = field(default_factory=list)


class MergeEngine:
    def __init__(
        self, documents: Mapping[str, RuleDocument], references: ReferenceResolver
    ) -> None:
        self._documents = documents
        self._references = references

    def merge(self, ordered: list[RuleDocument]) -> MergeResult:
        """Concatenate blocks in precedence order.

        Each applicable document is expanded dependency-first. A document
        reached twice contributes once, and a block byte-identical to one
        already emitted is dropped. Blocks keep their order within a document.
        """
        result = MergeResult()
        merged_ids: set[str] = set()
        seen_texts: set[str] = set()

        for applicable in ordered:
            for document_id in self._references.expand(applicable.id):
                if document_id in merged_ids:
                    continue
                merged_ids.add(document_id)
                document = self._documents[document_id]
                result.documents.append(document)

                for block in document.blocks:
                    if block.text in seen_texts:
                        logger.debug("Dropping duplicate block from %s", document_id)
                        continue
                    seen_texts.add(block.text)
                    result.blocks.append(
                        EffectiveBlock(
                            text=block.text,
                            document_id=document_id,
                            included_by=applicable.id,
                        )
                    )
        return result
