from __future__ import annotations

from typing import List

from spacescan.cache import ScanCache
from spacescan.models import Node


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _tree() -> Node:
    deep = Node(name="deep", path="/r/A/deep", is_dir=True, size=5, children=None, file_count=1)
    a = Node(name="A", path="/r/A", is_dir=True, size=5, children=[deep], file_count=1)
    b = Node(name="B", path="/r/B/", is_dir=True, size=0, children=[], file_count=0)
    f = Node(name="f", path="/r/f", is_dir=False, size=3, file_count=1)
    return Node(name="r", path="/r", is_dir=True, size=8, children=[a, f, b], file_count=2)


def test_put_primes_materialized_child_directories() -> None:
    cache = ScanCache(clock=FakeClock())
    root = _tree()
    cache.put("/r/", root)

    assert cache.get("/r") == root
    assert cache.get("/r/A") == root.children[0]
    assert cache.get("/r/B") == root.children[2]
    assert cache.get("/r/f") is None
    assert cache.get("/r/A/deep") is None
    assert len(cache) == 3


def test_entries_are_copies() -> None:
    cache = ScanCache(clock=FakeClock())
    root = _tree()
    cache.put("/r", root)
    root.children[0].size = 12345

    got = cache.get("/r")
    assert got.children[0].size == 5
    got.children.clear()
    assert len(cache.get("/r").children) == 3


def test_ttl_boundary() -> None:
    clock = FakeClock()
    cache = ScanCache(ttl=3600, clock=clock)
    cache.put("/r", _tree())

    clock.now += 3599.9
    assert "/r" in cache
    assert cache.get("/r/A") is not None

    clock.now = 1000.0 + 3600
    assert cache.get("/r") is None
    assert "/r" not in cache
    # expiry is lazy
    assert len(cache) == 3


def test_overwrite_refreshes_timestamp() -> None:
    clock = FakeClock()
    cache = ScanCache(ttl=10, clock=clock)
    cache.put("/r", _tree())
    clock.now += 8
    newer = _tree()
    newer.size = 99
    cache.put("/r", newer)
    clock.now += 8
    assert cache.get("/r").size == 99
    assert cache.get("/r/A") is not None


def test_explicit_timestamp() -> None:
    clock = FakeClock(now=5000.0)
    cache = ScanCache(ttl=100, clock=clock)
    cache.put("/r", _tree(), now=4850.0)
    assert cache.get("/r") is None


def test_clear() -> None:
    cache = ScanCache(clock=FakeClock())
    cache.put("/r", _tree())
    cache.clear()
    assert len(cache) == 0
    assert cache.get("/r") is None


def test_file_node_put_has_no_children_to_prime() -> None:
    cache = ScanCache(clock=FakeClock())
    leaf = Node(name="f", path="/r/f", is_dir=False, size=3, file_count=1)
    cache.put(leaf.path, leaf)
    keys: List[str] = [k for k in ("/r/f", "/r") if k in cache]
    assert keys == ["/r/f"]
