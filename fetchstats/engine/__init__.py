from fetchstats.engine.models import (
    FetchRequest,
    FetchResult,
    ReportOutcome,
    ReportStatus,
)
from fetchstats.engine.fetcher import Fetcher

__all__ = [
    "FetchRequest",
    "FetchResult",
    "Fetcher",
    "ReportOutcome",
    "ReportStatus",
]
