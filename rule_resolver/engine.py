"""Rule resolution session: immutable snapshots plus the query API."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from rule_resolver.errors import ResolutionError, RuleResolverError
from rule_resolver.resolution.cache import ResolutionCache
from rule_resolver.resolution.merge import MergeEngine
from rule_resolver.resolution.precedence import (
    HeadingTopicClassifier,
    ITopicClassifier,
    PrecedenceResolver,
)
from rule_resolver.resolution.references import ReferenceResolver
from rule_resolver.resolution.scope import ScopeMatcher
from rule_resolver.rules.loader import load_documents
from rule_resolver.rules.models import (
    EffectiveRuleSet,
    LoadReport,
    RawRuleSource,
    ResolutionRequest,
    RuleDocument,
    sha256_text,
)

logger = logging.getLogger(__name__)


def snapshot_fingerprint(documents: Iterable[RuleDocument]) -> str:
    pairs = sorted((document.id, document.fingerprint) for document in documents)
    return sha256_text(json.dumps(pairs, separators=(",", ":")))


@dataclass(frozen=True, eq=False)
class RuleSnapshot:
    """Immutable document set for one load session."""

    documents: Mapping[str, RuleDocument]
    references: ReferenceResolver
    fingerprint: str
    warnings: tuple[Exception, ...] = field(default=())

    @classmethod
    def from_report(cls, report: LoadReport) -> "RuleSnapshot":
        documents = MappingProxyType({document.id: document for document in report.documents})
        references = ReferenceResolver(documents)
        references.expand_all()
        return cls(
            documents=documents,
            references=references,
            fingerprint=snapshot_fingerprint(report.documents),
            warnings=tuple(report.warnings),
        )

    @classmethod
    def load(cls, sources: Iterable[RawRuleSource]) -> "RuleSnapshot":
        return cls.from_report(load_documents(sources))

    def ordered_documents(self) -> list[RuleDocument]:
        return [self.documents[document_id] for document_id in sorted(self.documents)]


def resolve_in_snapshot(
    snapshot: RuleSnapshot,
    request: ResolutionRequest,
    matcher: Optional[ScopeMatcher] = None,
    precedence: Optional[PrecedenceResolver] = None,
) -> EffectiveRuleSet:
    matcher = matcher or ScopeMatcher()
    precedence = precedence or PrecedenceResolver()

    applicable = matcher.filter(snapshot.ordered_documents(), request)
    ordered = precedence.order(applicable)
    merged = MergeEngine(snapshot.documents, snapshot.references).merge(ordered)

    return EffectiveRuleSet(
        request=request,
        blocks=tuple(merged.blocks),
        document_ids=tuple(document.id for document in merged.documents),
        conflicts=tuple(precedence.conflicts(precedence.order(merged.documents))),
    )


@dataclass(frozen=True)
class _SessionState:
    snapshot: Optional[RuleSnapshot] = None
    failure: Optional[RuleResolverError] = None


class RuleEngine:
    """Load rule documents and answer ``resolve`` queries against them.

    A reload builds a complete new snapshot before swapping it in. Requests
    that started earlier keep using the snapshot they read, so a reload never
    mixes old and new documents in one resolution.
    """

    def __init__(
        self,
        classifier: Optional[ITopicClassifier] = None,
        cache: Optional[ResolutionCache] = None,
    ) -> None:
        self.matcher = ScopeMatcher()
        self.precedence = PrecedenceResolver(classifier or HeadingTopicClassifier())
        self.cache = cache if cache is not None else ResolutionCache()
        self._state = _SessionState()
        self._reload_lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[RuleSnapshot]:
        return self._state.snapshot

    @property
    def failure(self) -> Optional[RuleResolverError]:
        return self._state.failure

    def load(self, sources: Iterable[RawRuleSource]) -> RuleSnapshot:
        with self._reload_lock:
            try:
                snapshot = RuleSnapshot.load(sources)
            except RuleResolverError as exc:
                logger.error("Rule load failed: %s", exc)
                self._state = _SessionState(failure=exc)
                self.cache.invalidate()
                raise
            self._state = _SessionState(snapshot=snapshot)
            self.cache.invalidate()
        logger.info(
            "Loaded %d rule documents (%d warnings)",
            len(snapshot.documents),
            len(snapshot.warnings),
        )
        return snapshot

    reload = load

    def resolve(self, target_path: str | Path, tool_id: str) -> EffectiveRuleSet:
        return self.resolve_request(ResolutionRequest.create(target_path, tool_id))

    def resolve_request(self, request: ResolutionRequest) -> EffectiveRuleSet:
        state = self._state
        if state.failure is not None:
            raise ResolutionError("Rule documents failed to load", cause=state.failure)
        if state.snapshot is None:
            raise ResolutionError("No rule documents loaded")

        snapshot = state.snapshot
        cached = self.cache.get(request, snapshot.fingerprint)
        if cached is not None:
            logger.debug("Cache hit for %s (%s)", request.target_path, request.tool_id)
            return cached

        result = resolve_in_snapshot(snapshot, request, self.matcher, self.precedence)
        self.cache.put(request, snapshot.fingerprint, result)
        return result
