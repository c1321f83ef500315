from __future__ import annotations

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in _UNITS:
        if value < 1024 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def shorten_path(path: str, width: int = 50) -> str:
    """Keep the tail of *path* so it fits in *width* characters."""
    if len(path) <= width:
        return path
    return "..." + path[-(width - 3) :]


def format_ratio(ratio: float | None) -> str:
    return "unknown" if ratio is None else f"{ratio:.1f}x"
