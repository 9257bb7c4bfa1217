from __future__ import annotations
import logging
import os
import shutil
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

from .cache import ScanCache
from .cancel import CancelRegistry, CancelToken
from .config import EngineConfig
from .drives import list_drives
from .errors import ScanCancelled, ScanError, ScanIOError, ScanNotFoundError, WorkerFailure
from .models import Node, ScanStats
from .paths import normalize_path
from .progress import ProgressCb, ProgressReporter
from .scanner import TreeWalker
from .utils import format_bytes

logger = logging.getLogger(__name__)


class ScanHandle:
    """A scan in flight (or already answered from the cache)."""

    def __init__(self, scan_id: Optional[int], path: str, future: "Future[Node]",
                 token: Optional[CancelToken] = None, from_cache: bool = False):
        self.scan_id = scan_id
        self.path = path
        self.from_cache = from_cache
        self._future = future
        self._token = token

    def result(self, timeout: Optional[float] = None) -> Node:
        return self._future.result(timeout)

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> bool:
        if self._token is None or self._future.done():
            return False
        self._token.cancel()
        return True


class ScanEngine:
    """Owns the result cache, the cancel registry and the worker pools.

    Create one per application and call ``shutdown()`` (or use it as a context
    manager) when done. Any number of scans may run at once; each gets its own
    id, token and counters.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.cache = ScanCache(ttl=self.config.cache_ttl)
        self.registry = CancelRegistry()
        self._pool = ThreadPoolExecutor(max_workers=self.config.max_workers,
                                        thread_name_prefix="scan-worker")
        self._dispatch = ThreadPoolExecutor(max_workers=self.config.max_concurrent_scans,
                                            thread_name_prefix="scan")
        self.walker = TreeWalker(self._pool)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()

    # ---------- Call surface
    def scan(self, path: str, force_refresh: bool = False,
             on_progress: Optional[ProgressCb] = None) -> Node:
        return self.start_scan(path, force_refresh, on_progress).result()

    def start_scan(self, path: str, force_refresh: bool = False,
                   on_progress: Optional[ProgressCb] = None) -> ScanHandle:
        key = normalize_path(path)
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                fut: Future = Future()
                fut.set_result(cached)
                return ScanHandle(None, path, fut, from_cache=True)

        if not os.path.exists(path):
            raise ScanNotFoundError(path)

        scan_id, token = self.registry.register()
        stats = ScanStats()
        reporter = None
        if on_progress is not None:
            reporter = ProgressReporter(path, stats, token, on_progress,
                                        self.config.progress_interval).start()
        try:
            fut = self._dispatch.submit(self._run, scan_id, key, path, stats, token, reporter)
        except RuntimeError:
            # engine already shut down
            if reporter:
                reporter.stop()
            self.registry.unregister(scan_id)
            raise
        return ScanHandle(scan_id, path, fut, token)

    def cancel(self, scan_id: Optional[int] = None) -> bool:
        return self.registry.cancel(scan_id)

    def clear_cache(self):
        self.cache.clear()

    def delete_item(self, path: str):
        """Remove a file or a whole directory, then drop every cached result.

        Removing anything changes the size of all its ancestors, so the whole
        cache goes rather than just the affected paths.
        """
        if not os.path.lexists(path):
            raise ScanNotFoundError(path)
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            raise ScanIOError(path, e.strerror or str(e)) from e
        finally:
            self.clear_cache()
        logger.info("Deleted %s", path)

    def list_drives(self) -> List[Node]:
        return list_drives()

    def shutdown(self, wait: bool = True):
        cancelled = self.registry.cancel_all()
        if cancelled:
            logger.info("Shutting down, cancelled %d running scan(s)", cancelled)
        self._dispatch.shutdown(wait=wait)
        self._pool.shutdown(wait=wait)

    # ---------- Worker
    def _run(self, scan_id: int, key: str, path: str, stats: ScanStats,
             token: CancelToken, reporter: Optional[ProgressReporter]) -> Node:
        t0 = time.time()
        logger.info("Scan #%d started: %s", scan_id, path)
        try:
            node = self.walker.scan(path, stats, token)
        except ScanCancelled:
            files, size, _ = stats.snapshot()
            logger.info("Scan #%d cancelled: %s after %s in %d files", scan_id, path, format_bytes(size), files)
            raise
        except ScanError:
            raise
        except Exception as e:
            logger.error("Scan #%d failed: %s", scan_id, path, exc_info=True)
            raise WorkerFailure(f"scan of {path} failed: {e!r}") from e
        finally:
            if reporter:
                reporter.stop()
            self.registry.unregister(scan_id)

        self.cache.put(key, node)
        files, size, errors = stats.snapshot()
        logger.info("Scan #%d finished: %s, %s in %d files, %d errors, %.1f sec",
                    scan_id, path, format_bytes(size), files, errors, time.time() - t0)
        return node
