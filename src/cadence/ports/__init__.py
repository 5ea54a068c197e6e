"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .snapshot_sink import SnapshotSink

__all__ = [
    "TaskStore",
    "SnapshotSink",
]
