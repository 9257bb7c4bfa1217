from __future__ import annotations


class ScanError(Exception):
    """Base class for every error a scan call can raise."""


class ScanNotFoundError(ScanError):
    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}")
        self.path = path


class ScanCancelled(ScanError):
    def __init__(self, path: str = ""):
        super().__init__(f"Cancelled: {path}" if path else "Cancelled")
        self.path = path


class ScanIOError(ScanError):
    """The scan root (or an item to delete) could not be accessed at all."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class WorkerFailure(ScanError):
    """A worker task died with an unexpected exception; see ``__cause__``."""
