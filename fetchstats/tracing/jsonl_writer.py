"""JSONL file-based snapshot sink."""

from __future__ import annotations

import logging
from pathlib import Path

from fetchstats.stats.models import StatsSnapshot
from fetchstats.tracing.interface import SnapshotSink

logger = logging.getLogger(__name__)


class JSONLSnapshotWriter(SnapshotSink):
    """Appends one serialized snapshot per line to ``{trace_dir}/snapshots.jsonl``."""

    FILENAME = "snapshots.jsonl"

    def __init__(self, trace_dir: str = "./traces") -> None:
        self._dir = Path(trace_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._dir / self.FILENAME

    async def save(self, snapshot: StatsSnapshot) -> None:
        with open(self.path, "a") as f:
            f.write(snapshot.model_dump_json() + "\n")
        logger.info("Saved snapshot %s to %s", snapshot.trace_id, self.path)
