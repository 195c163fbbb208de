from pathlib import Path
from typing import Optional, Sequence

from rule_resolver.config import ResolverConfig, SourceConfig
from rule_resolver.engine import RuleEngine
from rule_resolver.resolution.cache import ResolutionCache
from rule_resolver.resolution.precedence import (
    HeadingTopicClassifier,
    ITopicClassifier,
    NullTopicClassifier,
)
from rule_resolver.rules.models import Origin, RawRuleSource
from rule_resolver.rules.repository import RulesRepository


def topic_classifier(name: str) -> ITopicClassifier:
    if name == "none":
        return NullTopicClassifier()
    return HeadingTopicClassifier()


class RuleSourceService:
    """Turn configured source directories into raw rule sources."""

    def __init__(self, config: ResolverConfig, extra_roots: Sequence[Path] = ()) -> None:
        self.config = config
        self.extra_roots = list(extra_roots)

    def source_configs(self) -> list[SourceConfig]:
        configs = list(self.config.sources)
        for index, root in enumerate(self.extra_roots):
            name = "project" if len(self.extra_roots) == 1 else f"project{index + 1}"
            configs.append(SourceConfig(name=name, path=root, origin=Origin.PROJECT))
        return configs

    def repositories(self) -> list[RulesRepository]:
        return [
            RulesRepository(source.path, name=source.name, default_origin=source.origin)
            for source in self.source_configs()
        ]

    def collect(self) -> list[RawRuleSource]:
        sources: list[RawRuleSource] = []
        for repository in self.repositories():
            sources.extend(repository.list_sources())
        return sources

    def build_engine(self, classifier: Optional[ITopicClassifier] = None) -> RuleEngine:
        engine = RuleEngine(
            classifier=classifier or topic_classifier(self.config.topic_classifier),
            cache=ResolutionCache(max_entries=self.config.cache_max_entries),
        )
        engine.load(self.collect())
        return engine
