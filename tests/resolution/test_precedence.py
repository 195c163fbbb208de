"""Tests for precedence ordering and conflict bookkeeping."""

from rule_resolver.resolution.precedence import (
    HeadingTopicClassifier,
    ITopicClassifier,
    NullTopicClassifier,
    PrecedenceResolver,
)
from rule_resolver.rules.models import ContentBlock, Origin, RuleDocument


def _doc(doc_id: str, origin: Origin, scope: tuple[str, ...] = (), *texts: str) -> RuleDocument:
    return RuleDocument(
        id=doc_id,
        origin=origin,
        scope_patterns=scope,
        blocks=tuple(ContentBlock(text) for text in texts),
        fingerprint=f"fp-{doc_id}",
    )


def test_origin_tier_orders_first() -> None:
    documents = [
        _doc("r", Origin.REFERENCE),
        _doc("p", Origin.PROJECT),
        _doc("w", Origin.WORKSPACE),
        _doc("g", Origin.GLOBAL),
    ]
    ordered = PrecedenceResolver().order(documents)
    assert [doc.id for doc in ordered] == ["g", "w", "p", "r"]


def test_scoped_sorts_after_unscoped_within_tier() -> None:
    documents = [
        _doc("a-scoped", Origin.PROJECT, ("**/*.m",)),
        _doc("z-unscoped", Origin.PROJECT),
    ]
    ordered = PrecedenceResolver().order(documents)
    assert [doc.id for doc in ordered] == ["z-unscoped", "a-scoped"]


def test_id_breaks_remaining_ties() -> None:
    documents = [_doc("b", Origin.GLOBAL), _doc("a", Origin.GLOBAL), _doc("c", Origin.GLOBAL)]
    assert [doc.id for doc in PrecedenceResolver().order(documents)] == ["a", "b", "c"]


def test_global_before_project_scoped() -> None:
    d1 = _doc("d1", Origin.GLOBAL)
    d2 = _doc("d2", Origin.PROJECT, ("**/*.m",))
    ordered = PrecedenceResolver().order([d2, d1])
    assert [doc.id for doc in ordered] == ["d1", "d2"]


def test_null_classifier_reports_nothing() -> None:
    first = _doc("a", Origin.GLOBAL, (), "# Naming\nx")
    second = _doc("b", Origin.PROJECT, (), "# Naming\ny")
    resolver = PrecedenceResolver(NullTopicClassifier())
    assert resolver.conflicts([first, second]) == []


def test_heading_classifier_flags_shared_topics() -> None:
    first = _doc("a", Origin.GLOBAL, (), "# Naming\nUse camelCase.", "# Layout\nx")
    second = _doc("b", Origin.PROJECT, (), "## naming \nUse snake_case.")
    third = _doc("c", Origin.PROJECT, (), "# Testing\nz")
    resolver = PrecedenceResolver(HeadingTopicClassifier())

    conflicts = resolver.conflicts([first, second, third])

    assert len(conflicts) == 1
    assert conflicts[0].first_id == "a"
    assert conflicts[0].second_id == "b"
    assert conflicts[0].topics == ("naming",)
    assert conflicts[0].preferred_id == "b"


def test_custom_classifier_is_used() -> None:
    class EverythingOverlaps(ITopicClassifier):
        def shared_topics(self, first: RuleDocument, second: RuleDocument) -> frozenset[str]:
            return frozenset({"all"})

    documents = [_doc("a", Origin.GLOBAL), _doc("b", Origin.GLOBAL), _doc("c", Origin.GLOBAL)]
    conflicts = PrecedenceResolver(EverythingOverlaps()).conflicts(documents)
    assert [(item.first_id, item.second_id) for item in conflicts] == [
        ("a", "b"),
        ("a", "c"),
        ("b", "c"),
    ]


def test_heading_classifier_without_fingerprints() -> None:
    first = RuleDocument(id="a", origin=Origin.GLOBAL, blocks=(ContentBlock("# Naming\nx"),))
    second = RuleDocument(id="b", origin=Origin.GLOBAL, blocks=(ContentBlock("# Layout\ny"),))
    classifier = HeadingTopicClassifier()

    assert classifier.topics(first) == frozenset({"naming"})
    assert classifier.topics(second) == frozenset({"layout"})
    assert classifier.shared_topics(first, second) == frozenset()
