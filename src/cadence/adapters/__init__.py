"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStore
from .snapshot_file import SnapshotFile

__all__ = [
    "JsonTaskStore",
    "SnapshotFile",
]
