"""Shared fixtures for fetchstats tests."""

from __future__ import annotations

import pytest

from fetchstats.reporters.registry import build_default_registry
from fetchstats.stats.collector import StatsCollector
from fetchstats.stats.models import NS_PER_SECOND, SessionPhase, StatsSnapshot


class FakeClock:
    """Epoch-nanosecond clock that advances by ``step`` on every read."""

    def __init__(self, start: int = 1_700_000_000 * NS_PER_SECOND, step: int = 1_000_000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value

    def advance(self, ns: int) -> None:
        self.now += ns


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def frozen_clock():
    """A clock that does not move unless advanced explicitly."""
    return FakeClock(step=0)


@pytest.fixture
def collector(clock):
    return StatsCollector(clock=clock)


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def make_snapshot():
    """Factory for snapshots with a connected session and the given response headers."""

    def _make(response_headers: dict[str, list[str]] | None = None, **fields) -> StatsSnapshot:
        fields.setdefault("session", SessionPhase(
            host_port="gw.example:443",
            local="10.0.0.2:51000",
            remote="203.0.113.5:443",
        ))
        headers = {k: tuple(v) for k, v in (response_headers or {}).items()}
        return StatsSnapshot(response_headers=headers, **fields)

    return _make
