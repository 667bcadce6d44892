"""
Result Cache for PageAudit
Process-local store of finished reports keyed by normalized target identity,
with pluggable eviction
"""

from __future__ import annotations

import logging
import time
import urllib.parse
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple, Union

from .config import CacheConfig
from .model import AnalysisReport, AnalysisTarget


def normalize_target(target: str) -> str:
    """Normalize a target URL into a stable cache key."""
    target = target.strip()
    if not target.startswith(("http://", "https://", "file://")):
        target = f"https://{target}"

    parsed = urllib.parse.urlparse(target)
    if parsed.scheme == "file":
        return urllib.parse.urlunparse(parsed)

    # Remove default ports
    port = parsed.port
    hostname = (parsed.hostname or "").lower()
    if port is None or (port == 80 and parsed.scheme == "http") or (port == 443 and parsed.scheme == "https"):
        netloc = hostname
    else:
        netloc = f"{hostname}:{port}"

    return urllib.parse.urlunparse((
        parsed.scheme,
        netloc,
        parsed.path.rstrip("/") or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def make_target(target: Union[str, AnalysisTarget]) -> AnalysisTarget:
    if isinstance(target, AnalysisTarget):
        return target
    return AnalysisTarget(key=normalize_target(target), raw=target)


class EvictionPolicy:
    """Decides when cached entries are dropped. The base policy never evicts."""

    def is_expired(self, stored_at: float, now: float) -> bool:
        return False

    def over_capacity(self, size: int) -> bool:
        return False


class NoEviction(EvictionPolicy):
    pass


class TTLEviction(EvictionPolicy):
    def __init__(self, ttl_seconds: float):
        self.ttl_seconds = ttl_seconds

    def is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds


class LRUEviction(EvictionPolicy):
    def __init__(self, max_entries: int):
        self.max_entries = max_entries

    def over_capacity(self, size: int) -> bool:
        return size > self.max_entries


def policy_from_config(config: CacheConfig) -> EvictionPolicy:
    if config.policy == "ttl":
        return TTLEviction(config.ttl_seconds)
    if config.policy == "lru":
        return LRUEviction(config.max_entries)
    return NoEviction()


class ResultCache:
    """Memoizes finished `AnalysisReport`s per target for the process lifetime."""

    def __init__(self,
                 policy: Optional[EvictionPolicy] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.policy = policy or NoEviction()
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, AnalysisReport]]" = OrderedDict()
        self.logger = logging.getLogger(__name__)
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(target: Union[str, AnalysisTarget]) -> str:
        return make_target(target).key

    def get(self, target: Union[str, AnalysisTarget]) -> Optional[AnalysisReport]:
        key = self.key_for(target)
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        stored_at, report = entry
        if self.policy.is_expired(stored_at, self._clock()):
            self.logger.debug(f"Cache entry expired for {key}")
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return report

    def put(self, target: Union[str, AnalysisTarget], report: AnalysisReport) -> None:
        key = self.key_for(target)
        self._entries[key] = (self._clock(), report)
        self._entries.move_to_end(key)
        while self._entries and self.policy.over_capacity(len(self._entries)):
            evicted, _ = self._entries.popitem(last=False)
            self.logger.debug(f"Evicted cache entry for {evicted}")

    def invalidate(self, target: Union[str, AnalysisTarget]) -> bool:
        return self._entries.pop(self.key_for(target), None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, target: Union[str, AnalysisTarget]) -> bool:
        return self.key_for(target) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}
