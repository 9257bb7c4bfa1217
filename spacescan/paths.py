from __future__ import annotations


def is_root(path: str) -> bool:
    if path in ("/", "\\"):
        return True
    return len(path) == 3 and path[1] == ":" and path[2] in "\\/"  # C:\


def normalize_path(path: str) -> str:
    """Cache key for ``path``: one trailing separator dropped, roots kept as-is."""
    if len(path) > 1 and path[-1] in "\\/" and not is_root(path):
        return path[:-1]
    return path
