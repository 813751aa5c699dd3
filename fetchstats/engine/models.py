"""Orchestrator-level models — inbound fetch request and outbound results."""

from __future__ import annotations

import os
import uuid
from enum import Enum

from pydantic import BaseModel, Field

from fetchstats.stats.models import StatsSnapshot


# ---------------------------------------------------------------------------
# Inbound request (adapter → fetcher)
# ---------------------------------------------------------------------------

class FetchRequest(BaseModel):
    """Adapter-agnostic description of the single fetch to perform."""
    uri: str
    no_cache: bool = False
    out_file: str = os.devnull
    reporters: list[str] = Field(default_factory=list)
    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


# ---------------------------------------------------------------------------
# Reporter outcomes
# ---------------------------------------------------------------------------

class ReportStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    UNKNOWN = "unknown"


class ReportOutcome(BaseModel):
    name: str
    status: ReportStatus
    title: str = ""
    description: str = ""
    body: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Result (fetcher → adapter)
# ---------------------------------------------------------------------------

class FetchResult(BaseModel):
    snapshot: StatsSnapshot
    reports: list[ReportOutcome] = Field(default_factory=list)
