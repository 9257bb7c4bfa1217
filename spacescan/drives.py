from __future__ import annotations
import os
import logging
from typing import List

import psutil

from .models import Node

logger = logging.getLogger(__name__)


def list_drives() -> List[Node]:
    """Mounted volumes as directory nodes whose size is the space in use.

    Children are not listed; scan the node's path to get them.
    """
    drives: List[Node] = []
    seen = set()
    for p in psutil.disk_partitions(all=False):
        mp = p.mountpoint
        if not mp:
            continue
        mp_norm = os.path.abspath(mp)
        if mp_norm in seen:
            continue
        seen.add(mp_norm)
        try:
            u = psutil.disk_usage(mp_norm)
        except OSError as e:
            logger.debug("Skipping volume %s: %s", mp_norm, e)
            continue
        try:
            mtime = int(os.stat(mp_norm).st_mtime)
        except OSError:
            mtime = 0
        name = p.device if mp_norm not in ("/", "\\") else "System Root"
        drives.append(Node(
            name=name or mp_norm,
            path=mp_norm,
            is_dir=True,
            size=int(u.used),
            children=None,
            last_modified=mtime,
            file_count=0,
        ))
    drives.sort(key=lambda d: d.path.lower())
    return drives
