"""Helper functions for prefix arithmetic and listing formatting."""
import posixpath
from datetime import datetime
from typing import Optional

SIZE_UNITS = "KMGTPE"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(size_bytes: int) -> str:
    unit = 1024
    if size_bytes < unit:
        return f"{size_bytes} B"

    div, exp = unit, 0
    n = size_bytes // unit
    while n >= unit and exp < len(SIZE_UNITS) - 1:
        div *= unit
        exp += 1
        n //= unit

    return f"{size_bytes / div:.1f} {SIZE_UNITS[exp]}B"


def format_modified(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime(TIMESTAMP_FORMAT)


def directory_prefix(key: str) -> str:
    """Turn a key into an explicit listing prefix; the bucket root is ``""``."""
    if key and not key.endswith("/"):
        key += "/"
    if key == "/":
        return ""
    return key


def parent_prefix(prefix: str) -> str:
    trimmed = prefix[:-1] if prefix.endswith("/") else prefix
    parent = posixpath.dirname(trimmed)
    return f"{parent}/" if parent else ""


def base_name(key: str) -> str:
    trimmed = key.rstrip("/")
    if not trimmed:
        return "/"
    return trimmed.rsplit("/", 1)[-1]
