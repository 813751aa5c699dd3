"""fetchstats — instrumented single HTTP/HTTPS fetch with pluggable reporters.

Usage::

    from fetchstats import FetchRequest, create_fetcher

    fetcher = create_fetcher()
    result = await fetcher.fetch(FetchRequest(uri="https://example.com", reporters=["Connection"]))
    for outcome in result.reports:
        print(outcome.title, outcome.body)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from fetchstats.engine.fetcher import Fetcher
from fetchstats.engine.models import FetchRequest, FetchResult, ReportOutcome, ReportStatus
from fetchstats.reporters.registry import ReporterRegistry, build_default_registry
from fetchstats.stats.collector import StatsCollector
from fetchstats.stats.models import StatsSnapshot
from fetchstats.tracing.jsonl_writer import JSONLSnapshotWriter

__all__ = [
    "FetchRequest",
    "FetchResult",
    "Fetcher",
    "ReportOutcome",
    "ReportStatus",
    "ReporterRegistry",
    "StatsCollector",
    "StatsSnapshot",
    "build_default_registry",
    "create_fetcher",
]


def create_fetcher(
    *,
    timeout: float | None = None,
    trace_dir: str | None = None,
    registry: ReporterRegistry | None = None,
) -> Fetcher:
    """Wire all components and return a ready-to-use Fetcher.

    Environment variables (all optional):
      FETCHSTATS_TIMEOUT    — overall request timeout in seconds, default ``30``
      FETCHSTATS_TRACE_DIR  — append each snapshot to ``<dir>/snapshots.jsonl``
    """
    if timeout is None:
        timeout = float(os.environ.get("FETCHSTATS_TIMEOUT", Fetcher.DEFAULT_TIMEOUT))
    trace_dir = trace_dir or os.environ.get("FETCHSTATS_TRACE_DIR") or None

    sink = JSONLSnapshotWriter(trace_dir) if trace_dir else None

    return Fetcher(
        registry=registry or build_default_registry(),
        timeout=timeout,
        snapshot_sink=sink,
    )
