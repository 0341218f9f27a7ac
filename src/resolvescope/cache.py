from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .strategies.base import ResolutionStrategy

""" Resolution cache keyed by (host, strategy) with lazy expiry. """

DEFAULT_TTL_SECONDS = 300

CacheKey = Tuple[str, ResolutionStrategy]


@dataclass(frozen=True)
class CacheEntry:
    """Brief: A successful resolution remembered for a fixed TTL.

    Inputs (constructor fields):
      - host: Normalized hostname.
      - ip_address: Address returned by the upstream.
      - strategy: Upstream that produced the answer.
      - ttl_seconds: Lifetime of the entry.
      - created_at: Epoch seconds when the entry was created.
      - expires_at: Epoch seconds when the entry stops being served.

    Notes:
      - Use CacheEntry.create() so expires_at == created_at + ttl_seconds.
    """

    host: str
    ip_address: str
    strategy: ResolutionStrategy
    ttl_seconds: int
    created_at: float
    expires_at: float

    @classmethod
    def create(
        cls,
        host: str,
        ip_address: str,
        strategy: ResolutionStrategy,
        *,
        now: float,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> "CacheEntry":
        ttl = max(0, int(ttl_seconds))
        return cls(
            host=host,
            ip_address=ip_address,
            strategy=strategy,
            ttl_seconds=ttl,
            created_at=now,
            expires_at=now + ttl,
        )

    @property
    def key(self) -> CacheKey:
        return (self.host, self.strategy)

    def seconds_remaining(self, now: float) -> int:
        """Brief: Whole seconds left before expiry, never negative."""

        return max(0, int(self.expires_at - now))


class ResolutionCache:
    """
    Thread-safe in-memory store of successful resolutions.

    Inputs:
        clock: Optional callable returning epoch seconds (default time.time).
    Outputs:
        ResolutionCache instance

    Notes:
        Every operation runs under one RLock. Reads and listings first purge
        entries whose expires_at is at or before now; entries count is small
        (distinct host x strategy pairs actually queried) so the purge is a
        plain scan. Writing a key that already exists replaces the whole
        entry, so the last writer wins.

    Example use:
        >>> from resolvescope.cache import CacheEntry, ResolutionCache
        >>> from resolvescope.strategies import ResolutionStrategy
        >>> cache = ResolutionCache(clock=lambda: 1000.0)
        >>> cache.put(CacheEntry.create("example.com", "93.184.216.34",
        ...                             ResolutionStrategy.SYSTEM, now=1000.0))
        >>> cache.get("example.com", ResolutionStrategy.SYSTEM).ip_address
        '93.184.216.34'
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock: Callable[[], float] = clock or time.time
        self._store: Dict[CacheKey, CacheEntry] = {}
        self._lock = threading.RLock()

    def now(self) -> float:
        return float(self._clock())

    def get(self, host: str, strategy: ResolutionStrategy) -> Optional[CacheEntry]:
        """
        Return the live entry for (host, strategy), or None on a miss.

        Inputs:
            host: Normalized hostname.
            strategy: Upstream the answer must come from.

        Outputs:
            CacheEntry whose expires_at is strictly in the future, else None.
        """
        now = self.now()
        with self._lock:
            self._purge_expired_locked(now)
            entry = self._store.get((host, strategy))
            if entry is None or entry.expires_at <= now:
                return None
            return entry

    def put(self, entry: CacheEntry) -> None:
        """
        Store entry, replacing any previous entry for the same key.

        Inputs:
            entry: CacheEntry to store.
        Outputs:
            None
        """
        with self._lock:
            self._store[entry.key] = entry
            # Opportunistic cleanup
            self._purge_expired_locked(self.now())

    def clear(self) -> int:
        """Remove every entry unconditionally.

        Outputs:
            Number of entries removed.
        """
        with self._lock:
            removed = len(self._store)
            self._store.clear()
            return removed

    def list_live(self) -> List[CacheEntry]:
        """Return live entries ordered by creation time, then host.

        Outputs:
            List of CacheEntry snapshots; expired entries are purged first.
        """
        with self._lock:
            self._purge_expired_locked(self.now())
            entries = list(self._store.values())
        entries.sort(key=lambda e: (e.created_at, e.host, e.strategy.value))
        return entries

    def purge_expired(self) -> int:
        """Remove all expired entries.

        Outputs:
            Number of entries removed.
        """
        with self._lock:
            return self._purge_expired_locked(self.now())

    def _purge_expired_locked(self, now: float) -> int:
        removed = 0
        for key, entry in list(self._store.items()):
            if entry.expires_at <= now:
                del self._store[key]
                removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
