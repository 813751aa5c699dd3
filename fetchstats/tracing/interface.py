"""SnapshotSink ABC — persists finalized snapshots for offline comparison."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fetchstats.stats.models import StatsSnapshot


class SnapshotSink(ABC):
    @abstractmethod
    async def save(self, snapshot: StatsSnapshot) -> None: ...
