from __future__ import annotations

"""
Shared fixtures: on-disk trees with known sizes, a worker pool and an engine.

Trees are described as nested dicts: a dict value is a directory, an int
value is a file of that many bytes.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterator

import pytest

from spacescan.config import EngineConfig
from spacescan.engine import ScanEngine


def _build(base: Path, layout: Dict[str, Any]) -> None:
    for name, value in layout.items():
        target = base / name
        if isinstance(value, dict):
            target.mkdir()
            _build(target, value)
        else:
            target.write_bytes(b"x" * value)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create a directory tree under ``tmp_path`` and return its root."""
    def _make(layout: Dict[str, Any], name: str = "root") -> Path:
        root = tmp_path / name
        root.mkdir()
        _build(root, layout)
        return root
    return _make


@pytest.fixture
def scenario_tree(make_tree: Callable[..., Path]) -> Path:
    return make_tree({"a.txt": 10, "sub": {"b.txt": 20, "c.txt": 5}})


@pytest.fixture
def pool() -> Iterator[ThreadPoolExecutor]:
    with ThreadPoolExecutor(max_workers=4) as executor:
        yield executor


@pytest.fixture
def engine() -> Iterator[ScanEngine]:
    eng = ScanEngine(EngineConfig(max_workers=4, max_concurrent_scans=2))
    yield eng
    eng.shutdown()
