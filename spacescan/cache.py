from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import CACHE_TTL_SECONDS
from .models import Node
from .paths import normalize_path

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    node: Node
    timestamp: float


class ScanCache:
    """Scan results keyed by normalized path, valid for ``ttl`` seconds.

    Expired entries are misses but stay in the table until overwritten or
    cleared. Nodes are copied on the way in and on the way out, so callers
    never share a tree with the cache.
    """

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def _fresh(self, key: str, now: float) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None or now - entry.timestamp >= self.ttl:
            return None
        return entry

    def get(self, key: str) -> Optional[Node]:
        key = normalize_path(key)
        now = self._clock()
        with self._lock:
            entry = self._fresh(key, now)
            node = entry.node if entry else None
        if node is None:
            return None
        logger.debug("Cache hit: %s", key)
        # entries are never mutated after insertion, copying outside the lock is safe
        return node.clone()

    def put(self, key: str, node: Node, now: Optional[float] = None):
        """Store ``node`` under ``key`` and each materialized child directory under its own path."""
        if now is None:
            now = self._clock()
        batch = {normalize_path(key): node.clone()}
        for child in node.children or ():
            if child.is_dir and child.children is not None:
                batch[normalize_path(child.path)] = child.clone()
        with self._lock:
            for k, n in batch.items():
                self._entries[k] = CacheEntry(n, now)

    def clear(self):
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.debug("Cache cleared (%d entries)", dropped)

    def __contains__(self, key: str) -> bool:
        key = normalize_path(key)
        now = self._clock()
        with self._lock:
            return self._fresh(key, now) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
