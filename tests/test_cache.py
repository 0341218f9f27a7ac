"""
Brief: Tests for resolvescope.cache.ResolutionCache functionality.

Inputs:
  - None

Outputs:
  - None
"""

import threading

import pytest

from resolvescope.cache import DEFAULT_TTL_SECONDS, CacheEntry, ResolutionCache
from resolvescope.strategies import ResolutionStrategy

SYSTEM = ResolutionStrategy.SYSTEM
GOOGLE = ResolutionStrategy.GOOGLE


def _entry(host, ip, strategy, now, ttl=DEFAULT_TTL_SECONDS):
    return CacheEntry.create(host, ip, strategy, now=now, ttl_seconds=ttl)


def test_entry_create_sets_expiry():
    """
    Brief: expires_at equals created_at + ttl_seconds.

    Inputs:
      - now: fixed timestamp

    Outputs:
      - None: Asserts invariant and key shape
    """
    e = _entry("example.com", "1.2.3.4", SYSTEM, 1000.0)
    assert e.ttl_seconds == 300
    assert e.expires_at == e.created_at + e.ttl_seconds
    assert e.key == ("example.com", SYSTEM)


def test_entry_is_immutable():
    """
    Brief: CacheEntry fields cannot be reassigned.

    Inputs:
      - entry instance

    Outputs:
      - None: Asserts FrozenInstanceError (an AttributeError)
    """
    e = _entry("example.com", "1.2.3.4", SYSTEM, 1000.0)
    with pytest.raises(AttributeError):
        e.ip_address = "5.6.7.8"


def test_cache_put_and_get(clock):
    """
    Brief: A stored entry is returned until expiry.

    Inputs:
      - clock: FakeClock fixture

    Outputs:
      - None: Asserts hit
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("example.com", "1.2.3.4", SYSTEM, clock()))
    hit = c.get("example.com", SYSTEM)
    assert hit is not None
    assert hit.ip_address == "1.2.3.4"


def test_cache_get_missing_returns_none(clock):
    """
    Brief: Getting a missing key returns None.

    Inputs:
      - empty cache

    Outputs:
      - None: Asserts None returned
    """
    c = ResolutionCache(clock=clock)
    assert c.get("missing.example", SYSTEM) is None


def test_cache_keys_are_per_strategy(clock):
    """
    Brief: The same host cached under one strategy is a miss under another.

    Inputs:
      - entry for (example.com, system)

    Outputs:
      - None: Asserts google lookup misses
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("example.com", "1.2.3.4", SYSTEM, clock()))
    assert c.get("example.com", GOOGLE) is None
    assert c.get("example.com", SYSTEM) is not None


def test_cache_expiry_boundary(clock):
    """
    Brief: An entry is live strictly before expires_at and gone at or after it.

    Inputs:
      - clock advanced to the boundary and past it

    Outputs:
      - None: Asserts hit at T+299, miss at T+300 and T+301
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("example.com", "1.2.3.4", SYSTEM, clock()))
    clock.advance(299)
    assert c.get("example.com", SYSTEM) is not None
    clock.advance(1)
    assert c.get("example.com", SYSTEM) is None
    clock.advance(1)
    assert c.get("example.com", SYSTEM) is None
    assert c.list_live() == []


def test_cache_expired_entry_absent_from_listing(clock):
    """
    Brief: list_live prunes expired entries before returning.

    Inputs:
      - two entries created 200 seconds apart

    Outputs:
      - None: Asserts only the younger entry survives at T+301
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("old.example", "1.1.1.1", SYSTEM, clock()))
    clock.advance(200)
    c.put(_entry("new.example", "2.2.2.2", SYSTEM, clock()))
    clock.advance(101)
    live = c.list_live()
    assert [e.host for e in live] == ["new.example"]
    assert len(c) == 1


def test_cache_put_replaces_whole_entry(clock):
    """
    Brief: Writing the same key again replaces the previous entry.

    Inputs:
      - two writes for one key

    Outputs:
      - None: Asserts last write wins and only one entry exists
    """
    c = ResolutionCache(clock=clock)
    first = _entry("example.com", "1.1.1.1", SYSTEM, clock())
    c.put(first)
    clock.advance(10)
    second = _entry("example.com", "2.2.2.2", SYSTEM, clock())
    c.put(second)
    assert c.get("example.com", SYSTEM) is second
    assert len(c.list_live()) == 1


def test_cache_clear_then_list_is_empty(clock):
    """
    Brief: clear removes everything; listing afterwards is empty.

    Inputs:
      - populated cache

    Outputs:
      - None: Asserts count removed and empty listing
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("a.example", "1.1.1.1", SYSTEM, clock()))
    c.put(_entry("a.example", "1.1.1.2", GOOGLE, clock()))
    assert c.clear() == 2
    assert c.list_live() == []
    assert c.clear() == 0


def test_cache_purge_expired_returns_count(clock):
    """
    Brief: purge_expired reports the number of removed entries.

    Inputs:
      - one short-lived and one default entry

    Outputs:
      - None: Asserts one removal
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("short.example", "1.1.1.1", SYSTEM, clock(), ttl=5))
    c.put(_entry("long.example", "2.2.2.2", SYSTEM, clock()))
    clock.advance(5)
    assert c.purge_expired() == 1
    assert c.purge_expired() == 0


def test_cache_listing_is_ordered_by_creation(clock):
    """
    Brief: list_live orders entries by creation time.

    Inputs:
      - entries inserted out of alphabetical order

    Outputs:
      - None: Asserts insertion-time ordering
    """
    c = ResolutionCache(clock=clock)
    c.put(_entry("zeta.example", "1.1.1.1", SYSTEM, clock()))
    clock.advance(1)
    c.put(_entry("alpha.example", "2.2.2.2", SYSTEM, clock()))
    assert [e.host for e in c.list_live()] == ["zeta.example", "alpha.example"]


def test_cache_thread_safety_basic():
    """
    Brief: Concurrent put/get/list/purge operations do not raise.

    Inputs:
      - multiple threads performing cache operations

    Outputs:
      - None: Asserts no exceptions and consistent final state
    """
    c = ResolutionCache()
    errors = []

    def writer(n):
        try:
            for i in range(200):
                c.put(_entry(f"h{i % 10}.example", f"10.0.0.{n}", SYSTEM, c.now()))
        except Exception as exc:  # pragma: no cover - only on failure
            errors.append(exc)

    def reader():
        try:
            for i in range(200):
                c.get(f"h{i % 10}.example", SYSTEM)
                c.list_live()
                c.purge_expired()
        except Exception as exc:  # pragma: no cover - only on failure
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(3)]
    threads += [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(c.list_live()) == 10
