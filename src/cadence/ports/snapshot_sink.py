"""Snapshot publishing interface."""

from typing import Protocol

from cadence.core.snapshot import TaskSnapshot


class SnapshotSink(Protocol):
    """Interface for handing flattened tasks to a display surface."""

    def publish(self, snapshots: list[TaskSnapshot]) -> None:
        """Replace the published snapshot."""
        ...

    def read(self) -> list[TaskSnapshot]:
        """Read back the published snapshot (empty if none)."""
        ...
