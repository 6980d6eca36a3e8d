"""Resolved status of a dependency."""

from enum import Enum


class DepStatus(str, Enum):
    """Merge state of a dependency as seen by the status lookup."""

    MERGED = "merged"
    OPEN = "open"
    CLOSED = "closed"
    DRAFT = "draft"
    UNKNOWN = "unknown"
