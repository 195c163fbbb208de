"""Tests for the resolution cache."""

import threading

from rule_resolver.constants import DEFAULT_CACHE_MAX_ENTRIES
from rule_resolver.resolution.cache import ResolutionCache
from rule_resolver.rules.models import EffectiveRuleSet, ResolutionRequest


def _value(target: str) -> EffectiveRuleSet:
    return EffectiveRuleSet(request=ResolutionRequest.create(target, "any"))


def test_miss_then_hit() -> None:
    cache = ResolutionCache()
    request = ResolutionRequest.create("a.m", "any")
    assert cache.get(request, "fp") is None
    value = _value("a.m")
    cache.put(request, "fp", value)
    assert cache.get(request, "fp") is value
    assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1}


def test_different_fingerprint_misses() -> None:
    cache = ResolutionCache()
    request = ResolutionRequest.create("a.m", "any")
    cache.put(request, "old", _value("a.m"))
    assert cache.get(request, "new") is None


def test_tool_is_part_of_key() -> None:
    cache = ResolutionCache()
    cache.put(ResolutionRequest.create("a.m", "codex"), "fp", _value("a.m"))
    assert cache.get(ResolutionRequest.create("a.m", "cursor"), "fp") is None


def test_invalidate_clears_everything() -> None:
    cache = ResolutionCache()
    cache.put(ResolutionRequest.create("a.m", "any"), "fp", _value("a.m"))
    cache.put(ResolutionRequest.create("b.m", "any"), "fp", _value("b.m"))
    cache.invalidate()
    assert len(cache) == 0


def test_max_entries_evicts_oldest() -> None:
    cache = ResolutionCache(max_entries=2)
    requests = [ResolutionRequest.create(f"{name}.m", "any") for name in "abc"]
    for request in requests:
        cache.put(request, "fp", _value(request.target_path))
    assert len(cache) == 2
    assert cache.get(requests[0], "fp") is None
    assert cache.get(requests[2], "fp") is not None


def test_last_write_wins_under_concurrency() -> None:
    cache = ResolutionCache()
    request = ResolutionRequest.create("a.m", "any")
    values = [_value("a.m") for _ in range(8)]

    threads = [
        threading.Thread(target=cache.put, args=(request, "fp", value)) for value in values
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 1
    assert any(cache.get(request, "fp") is value for value in values)


def test_default_cache_is_bounded() -> None:
    assert ResolutionCache().max_entries == DEFAULT_CACHE_MAX_ENTRIES
    assert ResolutionCache(max_entries=None).max_entries is None
