from __future__ import annotations

_UNITS = ("KB", "MB", "GB", "TB", "PB")


def format_bytes(num: int) -> str:
    """Size for log lines, e.g. ``1536 -> '1.50 KB'``; whole bytes below 1 KB."""
    if num < 1024:
        return f"{num} B"
    value = float(num)
    for unit in _UNITS:
        value /= 1024.0
        if value < 1024.0:
            break
    return f"{value:.2f} {unit}"
