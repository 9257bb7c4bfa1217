from __future__ import annotations
import logging
import threading
from typing import Callable, Optional

from .config import PROGRESS_INTERVAL
from .models import ScanProgress, ScanStats

logger = logging.getLogger(__name__)

ProgressCb = Callable[[ScanProgress], None]


class ProgressReporter:
    """Samples a scan's counters on a fixed cadence and hands them to ``observer``.

    Stops on its own once the scan's token is set, or when ``stop()`` is called
    after the scan returns. Snapshots carry no ordering guarantee relative to
    the scan result.
    """

    def __init__(self, path: str, stats: ScanStats, cancel: Optional[Callable[[], bool]],
                 observer: ProgressCb, interval: float = PROGRESS_INTERVAL):
        self.path = path
        self.stats = stats
        self.cancel = cancel
        self.observer = observer
        self.interval = interval
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"progress:{path}", daemon=True)

    def start(self) -> "ProgressReporter":
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None):
        self._finished.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.stop()

    def _run(self):
        while True:
            if self._finished.is_set() or (self.cancel and self.cancel()):
                break
            files, size, errors = self.stats.snapshot()
            try:
                self.observer(ScanProgress(self.path, files, size, errors))
            except Exception:
                logger.warning("Progress observer failed for %s", self.path, exc_info=True)
            self._finished.wait(self.interval)
