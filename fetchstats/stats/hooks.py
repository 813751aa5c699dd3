"""Named lifecycle hooks bound to a StatsCollector."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

from fetchstats.stats.collector import StatsCollector


class Hook(str, Enum):
    DNS_START = "dns_start"
    DNS_DONE = "dns_done"
    CONNECT_START = "connect_start"
    CONNECT_DONE = "connect_done"
    TLS_START = "tls_start"
    TLS_DONE = "tls_done"
    GET_CONN = "get_conn"
    GOT_CONN = "got_conn"
    WROTE_REQUEST = "wrote_request"
    GOT_FIRST_RESPONSE_BYTE = "got_first_response_byte"


LifecycleHooks = Mapping[Hook, Callable[..., Any]]


def bind_hooks(collector: StatsCollector) -> LifecycleHooks:
    """Return a read-only ``Hook -> callable`` map driving *collector*.

    Transport adapters only ever go through this map, so the collector's
    contract is just the set of mutators listed here.
    """
    return MappingProxyType({
        Hook.DNS_START: collector.start_dns,
        Hook.DNS_DONE: collector.end_dns,
        Hook.CONNECT_START: collector.start_connect,
        Hook.CONNECT_DONE: collector.end_connect,
        Hook.TLS_START: collector.start_tls,
        Hook.TLS_DONE: collector.end_tls,
        Hook.GET_CONN: collector.start_session,
        Hook.GOT_CONN: collector.got_session,
        Hook.WROTE_REQUEST: collector.wrote_request,
        Hook.GOT_FIRST_RESPONSE_BYTE: collector.first_byte_received,
    })
