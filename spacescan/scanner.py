from __future__ import annotations
import logging
import os
import stat as statmod
import threading
from concurrent.futures import Executor, FIRST_EXCEPTION, wait
from typing import Callable, Dict, Optional, List, Tuple

from .config import DEEP_CANCEL_CHECK_EVERY
from .errors import ScanError, ScanCancelled, ScanIOError, ScanNotFoundError, WorkerFailure
from .models import Node, ScanStats

logger = logging.getLogger(__name__)

CancelCb = Callable[[], bool]
Listing = List[Tuple[os.DirEntry, os.stat_result]]


def _check(cancel: Optional[CancelCb], path: str):
    if cancel and cancel():
        raise ScanCancelled(path)


def _note_error(stats: Optional[ScanStats], path: str, err: OSError):
    logger.debug("Skipping unreadable %s: %s", path, err)
    if stats is not None:
        stats.add_error()


def _count_file(stats: Optional[ScanStats], size: int):
    if stats is not None:
        stats.add_file(size)


def _mtime(st: os.stat_result) -> int:
    return int(st.st_mtime) if st.st_mtime > 0 else 0


def _list_dir(dir_path: str, cancel: Optional[CancelCb]) -> Tuple[Listing, Listing]:
    """Split the entries of ``dir_path`` into regular files and directories.

    Symlinks and entries whose metadata cannot be read are left out. An error
    opening the directory itself propagates as ``OSError``.
    """
    files: Listing = []
    dirs: Listing = []
    with os.scandir(dir_path) as it:
        for entry in it:
            _check(cancel, dir_path)
            try:
                if entry.is_symlink():
                    continue
                st = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            if statmod.S_ISDIR(st.st_mode):
                dirs.append((entry, st))
            elif statmod.S_ISREG(st.st_mode):
                files.append((entry, st))
    return files, dirs


def deep_stats(path: str,
               stats: Optional[ScanStats] = None,
               cancel: Optional[CancelCb] = None) -> Tuple[int, int]:
    """Total size and file count of everything below ``path``, at any depth.

    Nothing but the two sums is kept, so memory stays flat however deep the
    tree goes. Unreadable directories and entries are counted as errors in
    ``stats`` and skipped. The token is polled once per
    ``DEEP_CANCEL_CHECK_EVERY`` visited entries.
    """
    size = 0
    count = 0
    visited = 0
    pending = [path]
    while pending:
        cur = pending.pop()
        try:
            with os.scandir(cur) as it:
                for entry in it:
                    if visited % DEEP_CANCEL_CHECK_EVERY == 0:
                        _check(cancel, path)
                    visited += 1
                    try:
                        if entry.is_symlink():
                            continue
                        st = entry.stat(follow_symlinks=False)
                    except OSError as e:
                        _note_error(stats, entry.path, e)
                        continue
                    if statmod.S_ISDIR(st.st_mode):
                        pending.append(entry.path)
                    elif statmod.S_ISREG(st.st_mode):
                        size += st.st_size
                        count += 1
                        _count_file(stats, st.st_size)
        except OSError as e:
            _note_error(stats, cur, e)
    return size, count


class _Abort:
    """First failure seen by any task of one fan-out tree.

    Tasks poll it in place of the scan's own token, so a failing sibling stops
    the others at their next checkpoint.
    """

    def __init__(self, cancel: Optional[CancelCb]):
        self._cancel = cancel
        self._lock = threading.Lock()
        self.error: Optional[ScanError] = None

    def set(self, err: ScanError):
        with self._lock:
            if self.error is None:
                self.error = err

    def __call__(self) -> bool:
        return self.error is not None or bool(self._cancel and self._cancel())


def _sort_children(nodes: List[Node]):
    # list.sort is stable with reverse=True too, ties keep listing order
    nodes.sort(key=lambda n: n.size, reverse=True)


def _file_node(entry: os.DirEntry, st: os.stat_result) -> Node:
    return Node(name=entry.name, path=entry.path, is_dir=False, size=st.st_size,
                children=None, last_modified=_mtime(st), file_count=1)


class TreeWalker:
    """Builds the node tree of one directory.

    The root and each of its subdirectories get real ``children`` lists;
    directories one level further down only carry totals from ``deep_stats``.
    Every subdirectory at both levels is handled by its own task on ``pool``.
    """

    def __init__(self, pool: Executor):
        self.pool = pool

    def scan(self, path: str,
             stats: Optional[ScanStats] = None,
             cancel: Optional[CancelCb] = None) -> Node:
        if not os.path.exists(path):
            raise ScanNotFoundError(path)
        abort = _Abort(cancel)
        _check(abort, path)

        try:
            files, dirs = _list_dir(path, abort)
            root_st = os.stat(path)
        except OSError as e:
            raise ScanIOError(path, e.strerror or str(e)) from e

        total = 0
        count = 0
        file_nodes: List[Node] = []
        for entry, st in files:
            _check(abort, path)
            total += st.st_size
            count += 1
            _count_file(stats, st.st_size)
            file_nodes.append(_file_node(entry, st))

        dir_nodes = self._fan_out(self._scan_subdir, dirs, stats, abort)
        for d in dir_nodes:
            total += d.size
            count += d.file_count

        children = dir_nodes + file_nodes
        _sort_children(children)
        return Node(name=os.path.basename(path.rstrip("\\/")) or path,
                    path=path, is_dir=True, size=total, children=children,
                    last_modified=_mtime(root_st), file_count=count)

    def _scan_subdir(self, item, stats: Optional[ScanStats], abort: _Abort) -> Node:
        entry, st = item
        node = Node(name=entry.name, path=entry.path, is_dir=True, size=0,
                    children=[], last_modified=_mtime(st), file_count=0)
        try:
            files, dirs = _list_dir(entry.path, abort)
        except OSError as e:
            _note_error(stats, entry.path, e)
            return node

        leaves: List[Node] = []
        for fe, fst in files:
            _check(abort, entry.path)
            node.size += fst.st_size
            node.file_count += 1
            _count_file(stats, fst.st_size)
            leaves.append(_file_node(fe, fst))

        subdirs = self._fan_out(self._aggregate_subdir, dirs, stats, abort)
        for d in subdirs:
            node.size += d.size
            node.file_count += d.file_count

        node.children = subdirs + leaves
        _sort_children(node.children)
        return node

    def _aggregate_subdir(self, item, stats: Optional[ScanStats], abort: _Abort) -> Node:
        entry, st = item
        size, count = deep_stats(entry.path, stats, abort)
        return Node(name=entry.name, path=entry.path, is_dir=True, size=size,
                    children=None, last_modified=_mtime(st), file_count=count)

    def _fan_out(self, fn, items: Listing, stats: Optional[ScanStats], abort: _Abort) -> List[Node]:
        """Run ``fn`` for every item on the pool, results in item order.

        Tasks nobody has picked up yet are run by the waiter itself, which keeps
        nested fan-outs from starving a bounded pool. The wait for the rest ends
        at the first failure, without blocking on siblings still running.
        """
        if not items:
            return []

        def task(item):
            try:
                return fn(item, stats, abort)
            except ScanError as e:
                abort.set(e)
                raise
            except Exception as e:
                logger.error("Scan worker failed on %s", item[0].path, exc_info=True)
                failure = WorkerFailure(f"worker failed on {item[0].path}: {e!r}")
                abort.set(failure)
                raise failure from e

        futures = [self.pool.submit(task, item) for item in items]
        inline: Dict[int, Node] = {}
        try:
            for i, (item, fut) in enumerate(zip(items, futures)):
                if abort.error is not None:
                    raise abort.error
                if fut.cancel():
                    inline[i] = task(item)
            pending = [f for i, f in enumerate(futures) if i not in inline]
            wait(pending, return_when=FIRST_EXCEPTION)
            if abort.error is not None:
                raise abort.error
            return [inline[i] if i in inline else f.result() for i, f in enumerate(futures)]
        except ScanError as e:
            for f in futures:
                f.cancel()
            first = abort.error
            if first is not None and first is not e:
                raise first
            raise
