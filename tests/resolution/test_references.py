"""Tests for reference expansion and cycle detection."""

import pytest

from rule_resolver.errors import CyclicReferenceError, UnknownReferenceError
from rule_resolver.resolution.references import ReferenceResolver
from rule_resolver.rules.models import Origin, RuleDocument


def _docs(**references: list[str]) -> dict[str, RuleDocument]:
    return {
        doc_id: RuleDocument(id=doc_id, origin=Origin.GLOBAL, references=tuple(refs))
        for doc_id, refs in references.items()
    }


def test_expand_without_references_is_self() -> None:
    resolver = ReferenceResolver(_docs(a=[]))
    assert resolver.expand("a") == ("a",)


def test_expand_is_post_order_in_declared_order() -> None:
    resolver = ReferenceResolver(_docs(top=["left", "right"], left=["leaf"], right=[], leaf=[]))
    assert resolver.expand("top") == ("leaf", "left", "right", "top")


def test_diamond_emits_shared_dependency_once() -> None:
    resolver = ReferenceResolver(_docs(top=["b", "c"], b=["base"], c=["base"], base=[]))
    assert resolver.expand("top") == ("base", "b", "c", "top")


def test_expand_all_covers_every_document() -> None:
    resolver = ReferenceResolver(_docs(a=["b"], b=[]))
    assert resolver.expand_all() == {"a": ("b", "a"), "b": ("b",)}


def test_two_node_cycle() -> None:
    resolver = ReferenceResolver(_docs(a=["b"], b=["a"]))
    with pytest.raises(CyclicReferenceError) as excinfo:
        resolver.check()
    assert excinfo.value.cycle == ("a", "b", "a")
    assert "a -> b -> a" in str(excinfo.value)


def test_cycle_path_excludes_entry_prefix() -> None:
    resolver = ReferenceResolver(_docs(entry=["x"], x=["y"], y=["z"], z=["x"]))
    with pytest.raises(CyclicReferenceError) as excinfo:
        resolver.expand("entry")
    assert excinfo.value.cycle == ("x", "y", "z", "x")


def test_cycle_detected_after_memoized_expansion() -> None:
    resolver = ReferenceResolver(_docs(a=["b"], b=["c"], c=["b"]))
    with pytest.raises(CyclicReferenceError):
        resolver.expand("c")


def test_unknown_reference() -> None:
    resolver = ReferenceResolver(_docs(a=["ghost"]))
    with pytest.raises(UnknownReferenceError) as excinfo:
        resolver.expand("a")
    assert excinfo.value.reference == "ghost"


def test_expansion_is_deterministic() -> None:
    documents = _docs(top=["m2", "m1"], m1=["base"], m2=["base"], base=[])
    first = ReferenceResolver(documents).expand("top")
    second = ReferenceResolver(documents).expand("top")
    assert first == second == ("base", "m2", "m1", "top")
