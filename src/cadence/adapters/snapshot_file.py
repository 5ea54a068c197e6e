"""File-based snapshot adapter."""

import json
import logging
from pathlib import Path

from cadence.core.snapshot import TaskSnapshot

logger = logging.getLogger(__name__)


class SnapshotFile:
    """
    Snapshot published as a JSON array of flattened tasks.

    Implements SnapshotSink protocol. A display surface polls the file and
    recomputes due dates from it without calling back into cadence.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def publish(self, snapshots: list[TaskSnapshot]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([s.to_dict() for s in snapshots], indent=2))
        logger.info(f"Published {len(snapshots)} tasks to {self.path}")

    def read(self) -> list[TaskSnapshot]:
        if not self.path.exists():
            return []
        try:
            return [TaskSnapshot.from_dict(d) for d in json.loads(self.path.read_text())]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable snapshot {self.path}: {e}")
            return []
