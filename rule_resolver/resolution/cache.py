"""Process-wide memo of effective rule sets."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from rule_resolver.constants import DEFAULT_CACHE_MAX_ENTRIES
from rule_resolver.rules.models import EffectiveRuleSet, ResolutionRequest

CacheKey = tuple[str, str, str]


class ResolutionCache:
    """Map (target, tool, snapshot fingerprint) to an effective rule set.

    Entries are derived values, so concurrent writers simply overwrite each
    other (last write wins). Past ``max_entries`` the oldest entry is evicted;
    ``None`` leaves the cache unbounded.
    """

    def __init__(self, max_entries: Optional[int] = DEFAULT_CACHE_MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, EffectiveRuleSet]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def key(request: ResolutionRequest, fingerprint: str) -> CacheKey:
        return (request.target_path, request.tool_id, fingerprint)

    def get(self, request: ResolutionRequest, fingerprint: str) -> Optional[EffectiveRuleSet]:
        with self._lock:
            entry = self._entries.get(self.key(request, fingerprint))
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
            return entry

    def put(self, request: ResolutionRequest, fingerprint: str, value: EffectiveRuleSet) -> None:
        with self._lock:
            key = self.key(request, fingerprint)
            self._entries.pop(key, None)
            self._entries[key] = value
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
            }
