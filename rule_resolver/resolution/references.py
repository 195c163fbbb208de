"""Transitive expansion of rule document references."""

from __future__ import annotations

from typing import Mapping

from rule_resolver.errors import CyclicReferenceError, UnknownReferenceError
from rule_resolver.rules.models import RuleDocument


class ReferenceResolver:
    """Expand ``references`` into dependency-first inclusion lists.

    Documents are addressed by id; references are id lists, so the graph is
    walked through the ``documents`` mapping rather than object links. Every
    expansion is a post-order walk: a document's references (in declared
    order, recursively) come before the document itself, and each id appears
    once.
    """

    def __init__(self, documents: Mapping[str, RuleDocument]) -> None:
        self._documents = documents
        self._expanded: dict[str, tuple[str, ...]] = {}

    def expand(self, document_id: str) -> tuple[str, ...]:
        cached = self._expanded.get(document_id)
        if cached is not None:
            return cached

        order: list[str] = []
        emitted: set[str] = set()
        self._visit(document_id, [], set(), order, emitted)
        result = tuple(order)
        self._expanded[document_id] = result
        return result

    def expand_all(self) -> dict[str, tuple[str, ...]]:
        return {document_id: self.expand(document_id) for document_id in sorted(self._documents)}

    def check(self) -> None:
        """Raise on the first cycle or dangling reference in the graph."""
        self.expand_all()

    def _visit(
        self,
        document_id: str,
        stack: list[str],
        on_stack: set[str],
        order: list[str],
        emitted: set[str],
    ) -> None:
        if document_id in on_stack:
            start = stack.index(document_id)
            raise CyclicReferenceError([*stack[start:], document_id])
        if document_id in emitted:
            return

        document = self._documents[document_id]
        stack.append(document_id)
        on_stack.add(document_id)
        for reference in document.references:
            if reference not in self._documents:
                raise UnknownReferenceError(document_id, reference, path=document.source_path)
            cached = self._expanded.get(reference)
            if cached is not None:
                for item in cached:
                    if item not in emitted:
                        emitted.add(item)
                        order.append(item)
                continue
            self._visit(reference, stack, on_stack, order, emitted)
        stack.pop()
        on_stack.discard(document_id)

        emitted.add(document_id)
        order.append(document_id)
