"""Precedence ordering and conflict bookkeeping for applicable documents."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from itertools import combinations

from rule_resolver.rules.models import ConflictCandidate, RuleDocument
from rule_resolver.rules.parser import heading_of

_WHITESPACE_RE = re.compile(r"\s+")


class ITopicClassifier(ABC):
    @abstractmethod
    def shared_topics(self, first: RuleDocument, second: RuleDocument) -> frozenset[str]:
        """Return guidance topics both documents address; empty if unrelated."""


class NullTopicClassifier(ITopicClassifier):
    def shared_topics(self, first: RuleDocument, second: RuleDocument) -> frozenset[str]:
        return frozenset()


class HeadingTopicClassifier(ITopicClassifier):
    """Treat each markdown heading as a topic, compared case-insensitively."""

    def topics(self, document: RuleDocument) -> frozenset[str]:
        found: set[str] = set()
        for block in document.blocks:
            heading = heading_of(block.text)
            if heading:
                found.add(_WHITESPACE_RE.sub(" ", heading).strip().lower())
        return frozenset(found)

    def shared_topics(self, first: RuleDocument, second: RuleDocument) -> frozenset[str]:
        return self.topics(first) & self.topics(second)


def precedence_key(document: RuleDocument) -> tuple[int, int, str]:
    return (document.origin.tier, 1 if document.is_scoped else 0, document.id)


class PrecedenceResolver:
    def __init__(self, classifier: ITopicClassifier | None = None) -> None:
        self.classifier = classifier or NullTopicClassifier()

    def order(self, documents: list[RuleDocument]) -> list[RuleDocument]:
        """Order documents least specific first, so later ones refine earlier ones."""
        return sorted(documents, key=precedence_key)

    def conflicts(self, ordered: list[RuleDocument]) -> list[ConflictCandidate]:
        candidates: list[ConflictCandidate] = []
        for first, second in combinations(ordered, 2):
            if first.id == second.id:
                continue
            topics = self.classifier.shared_topics(first, second)
            if topics:
                candidates.append(
                    ConflictCandidate(
                        first_id=first.id,
                        second_id=second.id,
                        topics=tuple(sorted(topics)),
                    )
                )
        return candidates
