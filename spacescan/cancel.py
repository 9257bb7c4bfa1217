from __future__ import annotations
import itertools
import logging
import threading
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class CancelToken:
    """One-way flag shared by every worker of a single scan."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


class CancelRegistry:
    """Tokens of the scans currently in flight, addressable by scan id.

    ``cancel()`` without an id reaches only the most recently registered scan,
    and only while it runs; older scans are reachable by id alone.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: Dict[int, CancelToken] = {}
        self._ids = itertools.count(1)
        self._latest: Optional[int] = None

    def register(self) -> Tuple[int, CancelToken]:
        token = CancelToken()
        with self._lock:
            scan_id = next(self._ids)
            self._tokens[scan_id] = token
            self._latest = scan_id
        return scan_id, token

    def unregister(self, scan_id: int):
        with self._lock:
            self._tokens.pop(scan_id, None)
            if self._latest == scan_id:
                self._latest = None

    def cancel(self, scan_id: Optional[int] = None) -> bool:
        with self._lock:
            if scan_id is None:
                scan_id = self._latest
            token = self._tokens.get(scan_id) if scan_id is not None else None
        if token is None:
            return False
        logger.info("Cancel requested for scan #%d", scan_id)
        token.cancel()
        return True

    def cancel_all(self) -> int:
        with self._lock:
            tokens = list(self._tokens.values())
        for t in tokens:
            t.cancel()
        return len(tokens)

    def active_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._tokens)
