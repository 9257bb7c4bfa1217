from __future__ import annotations
import threading
from typing import Optional

from PySide6.QtCore import QThread, Signal

from .engine import ScanEngine, ScanHandle
from .errors import ScanCancelled
from .models import ScanProgress


class ScanThread(QThread):
    """Runs one engine scan off the GUI thread and reports back through signals."""
    progress = Signal(object)   # ScanProgress (byte counts may exceed int32)
    done = Signal(object)       # Node
    cancelled = Signal()
    error = Signal(str)

    def __init__(self, engine: ScanEngine, path: str, force_refresh: bool = False, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.path = path
        self.force_refresh = force_refresh
        self._lock = threading.Lock()
        self._handle: Optional[ScanHandle] = None
        self._cancel_requested = False

    def cancel(self):
        with self._lock:
            self._cancel_requested = True
            handle = self._handle
        if handle:
            handle.cancel()

    def _on_progress(self, snap: ScanProgress):
        self.progress.emit(snap)

    def run(self):
        try:
            with self._lock:
                if self._cancel_requested:
                    raise ScanCancelled(self.path)
                self._handle = self.engine.start_scan(self.path, self.force_refresh,
                                                      on_progress=self._on_progress)
            self.done.emit(self._handle.result())
        except ScanCancelled:
            self.cancelled.emit()
        except Exception as e:
            self.error.emit(str(e))
