from __future__ import annotations

"""
Unit tests for the Folder Index Cache Service.

Verifies:
1. Hits, misses and TTL expiry driven by an injected clock.
2. Least-recently-used eviction.
3. Forced refresh and invalidation.
"""

from typing import List

import pytest

from geopath.core.services.folder_cache import FolderIndexCache


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> _FakeClock:
    return _FakeClock()


def _loader(calls: List[int], identifiers: List[str]):
    def load() -> List[str]:
        calls.append(1)
        return identifiers
    return load


def test_get_or_build_caches_index(clock: _FakeClock) -> None:
    cache = FolderIndexCache(ttl_seconds=60, clock=clock)
    calls: List[int] = []
    load = _loader(calls, ["A:f.jpg"])

    first = cache.get_or_build("col-1", load)
    second = cache.get_or_build("col-1", load)

    assert first is second
    assert len(calls) == 1
    assert first["A"].items[0].identifier == "A:f.jpg"


def test_entries_expire_after_ttl(clock: _FakeClock) -> None:
    cache = FolderIndexCache(ttl_seconds=60, clock=clock)
    calls: List[int] = []
    load = _loader(calls, ["A:f.jpg"])

    cache.get_or_build("col-1", load)
    clock.now = 59.0
    assert cache.get("col-1") is not None
    clock.now = 60.0
    assert cache.get("col-1") is None

    cache.get_or_build("col-1", load)
    assert len(calls) == 2


def test_zero_ttl_never_expires(clock: _FakeClock) -> None:
    cache = FolderIndexCache(ttl_seconds=0, clock=clock)
    cache.get_or_build("col-1", lambda: ["A:f.jpg"])
    clock.now = 10 ** 6
    assert cache.get("col-1") is not None


def test_lru_eviction(clock: _FakeClock) -> None:
    cache = FolderIndexCache(ttl_seconds=0, max_entries=2, clock=clock)
    cache.get_or_build("a", lambda: ["A:f.jpg"])
    cache.get_or_build("b", lambda: ["B:f.jpg"])

    # Touch 'a' so 'b' becomes the eviction candidate
    assert cache.get("a") is not None
    cache.get_or_build("c", lambda: ["C:f.jpg"])

    assert len(cache) == 2
    assert cache.get("b") is None
    assert cache.get("a") is not None
    assert cache.get("c") is not None


def test_max_entries_zero_disables_caching(clock: _FakeClock) -> None:
    cache = FolderIndexCache(max_entries=0, clock=clock)
    calls: List[int] = []
    load = _loader(calls, ["A:f.jpg"])

    cache.get_or_build("col-1", load)
    cache.get_or_build("col-1", load)
    assert len(calls) == 2
    assert len(cache) == 0


def test_refresh_and_invalidate(clock: _FakeClock) -> None:
    cache = FolderIndexCache(ttl_seconds=0, clock=clock)
    cache.get_or_build("col-1", lambda: ["A:f.jpg"])

    refreshed = cache.get_or_build("col-1", lambda: ["B:g.jpg"], refresh=True)
    assert "B" in refreshed
    assert cache.get("col-1") is refreshed

    assert cache.invalidate("col-1") is True
    assert cache.invalidate("col-1") is False

    cache.get_or_build("col-2", lambda: [])
    cache.clear()
    assert len(cache) == 0
