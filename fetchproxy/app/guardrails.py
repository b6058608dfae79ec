import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class RateLimitConfig:
    max_requests: int = 30
    window_seconds: float = 60.0


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    reset_in: Optional[int] = None


class FixedWindowRateLimiter:
    """
    In-memory, per-process, per-client fixed window counter.

    A window opens on the first request from an identifier and is replaced by a
    fresh one on the first request after it has aged past ``window_seconds``.
    Bursts straddling a window boundary can reach roughly twice the nominal rate.
    """
    def __init__(self, cfg: RateLimitConfig, clock: Callable[[], float] = time.monotonic):
        self.cfg = cfg
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateDecision:
        limit = self.cfg.max_requests
        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)
            if entry is None or self._expired(entry, now):
                self._entries[identifier] = RateLimitEntry(count=1, window_start=now)
                return RateDecision(allowed=True, remaining=limit - 1)

            if entry.count >= limit:
                left = self.cfg.window_seconds - (now - entry.window_start)
                return RateDecision(allowed=False, remaining=0, reset_in=max(1, math.ceil(left)))

            entry.count += 1
            return RateDecision(allowed=True, remaining=limit - entry.count)

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if self._expired(e, now)]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def _expired(self, entry: RateLimitEntry, now: float) -> bool:
        return now - entry.window_start > self.cfg.window_seconds

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class CacheEntry:
    body: str
    byte_size: int
    stored_at: float


class FetchCache:
    """
    In-memory TTL cache of fetched bodies keyed by target URL.

    Stale entries are never served but stay in the table until ``sweep`` runs.
    There is no size bound besides the TTL.
    """
    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def lookup(self, url: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._store.get(url)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl:
                return None
            return entry

    def store(self, url: str, body: str, size: int) -> CacheEntry:
        entry = CacheEntry(body=body, byte_size=size, stored_at=self._clock())
        with self._lock:
            self._store[url] = entry
        return entry

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._store.items() if now - e.stored_at > self.ttl]
            for k in stale:
                del self._store[k]
        return len(stale)

    def __contains__(self, url: str) -> bool:
        return url in self._store

    def __len__(self) -> int:
        return len(self._store)
