from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple

@dataclass
class Node:
    name: str
    path: str
    is_dir: bool
    size: int = 0
    children: Optional[List["Node"]] = None
    last_modified: int = 0
    file_count: int = 0

    def clone(self) -> "Node":
        kids = None if self.children is None else [c.clone() for c in self.children]
        return Node(name=self.name, path=self.path, is_dir=self.is_dir, size=self.size,
                    children=kids, last_modified=self.last_modified, file_count=self.file_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "is_dir": self.is_dir,
            "children": None if self.children is None else [c.to_dict() for c in self.children],
            "last_modified": self.last_modified,
            "file_count": self.file_count,
        }


@dataclass
class ScanProgress:
    path: str
    files_scanned: int
    bytes_scanned: int
    errors: int

    def to_dict(self) -> Dict[str, Any]:
        # event payload shape consumed by the UI
        return {
            "path": self.path,
            "filesScanned": self.files_scanned,
            "bytesScanned": self.bytes_scanned,
            "errors": self.errors,
        }


@dataclass
class ScanStats:
    """Counters of one scan invocation, shared by every worker of that scan.

    Values only ever grow; a finished or cancelled scan keeps what it counted.
    """
    files_scanned: int = 0
    bytes_scanned: int = 0
    errors: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_file(self, size: int):
        with self._lock:
            self.files_scanned += 1
            self.bytes_scanned += size

    def add_error(self):
        with self._lock:
            self.errors += 1

    def snapshot(self) -> Tuple[int, int, int]:
        with self._lock:
            return self.files_scanned, self.bytes_scanned, self.errors
