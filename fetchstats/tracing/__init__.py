from fetchstats.tracing.interface import SnapshotSink
from fetchstats.tracing.jsonl_writer import JSONLSnapshotWriter

__all__ = ["JSONLSnapshotWriter", "SnapshotSink"]
