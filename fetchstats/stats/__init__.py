from fetchstats.stats.models import (
    ConnectionPhase,
    DnsPhase,
    RequestPhase,
    SessionPhase,
    StatsSnapshot,
    TlsPhase,
)
from fetchstats.stats.collector import StatsCollector
from fetchstats.stats.hooks import Hook, LifecycleHooks, bind_hooks

__all__ = [
    "ConnectionPhase",
    "DnsPhase",
    "Hook",
    "LifecycleHooks",
    "RequestPhase",
    "SessionPhase",
    "StatsCollector",
    "StatsSnapshot",
    "TlsPhase",
    "bind_hooks",
]
