from __future__ import annotations
import os
from dataclasses import dataclass

CACHE_TTL_SECONDS = 60 * 60
PROGRESS_INTERVAL = 0.10          # seconds between progress snapshots
DEEP_CANCEL_CHECK_EVERY = 100     # deep aggregation polls the token once per N entries
LOOKAHEAD_DEPTH = 2               # levels below the root that get real child lists
DEFAULT_MAX_WORKERS = min(32, (os.cpu_count() or 1) + 4)
DEFAULT_MAX_CONCURRENT_SCANS = 4


@dataclass(frozen=True)
class EngineConfig:
    cache_ttl: float = CACHE_TTL_SECONDS
    progress_interval: float = PROGRESS_INTERVAL
    max_workers: int = DEFAULT_MAX_WORKERS
    max_concurrent_scans: int = DEFAULT_MAX_CONCURRENT_SCANS

    def __post_init__(self):
        for name in ("cache_ttl", "progress_interval", "max_workers", "max_concurrent_scans"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
