from __future__ import annotations

from .engine import ScanEngine, ScanHandle
from .log import configure_logging
from .errors import ScanError, ScanNotFoundError, ScanCancelled, ScanIOError, WorkerFailure
from .models import Node, ScanProgress, ScanStats

__version__ = "0.1.0"
