"""Snapshot data model — no internal dependencies, only Pydantic + stdlib.

All timestamps are integer nanoseconds since the epoch, or ``None`` when the
event never happened.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

NS_PER_SECOND = 1_000_000_000

HeaderMap = dict[str, tuple[str, ...]]


def canonical_header_key(key: str) -> str:
    """``x-ipfs-lb-pop`` -> ``X-Ipfs-Lb-Pop``."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def normalize_headers(
    headers: Mapping[str, Iterable[str]] | Iterable[tuple[str, str]],
) -> HeaderMap:
    """Merge headers into a canonical-key map, sorted by key.

    Accepts either a mapping of name to values or an iterable of
    ``(name, value)`` pairs (e.g. ``httpx.Headers.multi_items()``).
    Values keep their arrival order.
    """
    merged: dict[str, list[str]] = {}
    if isinstance(headers, Mapping):
        pairs = (
            (k, v)
            for k, values in headers.items()
            for v in ([values] if isinstance(values, str) else values)
        )
    else:
        pairs = iter(headers)
    for key, value in pairs:
        merged.setdefault(canonical_header_key(key), []).append(value)
    return {k: tuple(merged[k]) for k in sorted(merged)}


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

class _Phase(BaseModel):
    model_config = ConfigDict(frozen=True)


class DnsPhase(_Phase):
    """DNS lookup(s) before connecting."""
    start_time: int | None = None
    end_time: int | None = None
    host: str = ""
    addrs: tuple[str, ...] = ()
    error: str | None = None


class ConnectionPhase(_Phase):
    """Just the TCP portion of the pre-transfer work."""
    start_time: int | None = None
    end_time: int | None = None
    protocol: str = ""
    address: str = ""
    error: str | None = None


class TlsPhase(_Phase):
    start_time: int | None = None
    end_time: int | None = None
    version: str | None = None
    cipher_suite: str | None = None
    server_name: str = ""
    error: str | None = None


class SessionPhase(_Phase):
    """The whole of the pre-transfer work (DNS, TCP, TLS)."""
    start_time: int | None = None
    end_time: int | None = None
    host_port: str = ""
    local: str | None = None
    remote: str | None = None


class RequestPhase(_Phase):
    start_time: int | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Snapshot (collector -> reporters)
# ---------------------------------------------------------------------------

class StatsSnapshot(BaseModel):
    """Frozen view of one request's lifecycle, handed to reporters."""

    model_config = ConfigDict(frozen=True)

    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    url: str | None = None
    status_code: int | None = None
    http_version: str | None = None

    total_bytes: int = 0
    current_second: int | None = None
    current_second_bytes: int = 0
    per_second: tuple[int, ...] = ()
    start_time: int | None = None
    end_time: int | None = None

    dns: DnsPhase = Field(default_factory=DnsPhase)
    tls: TlsPhase = Field(default_factory=TlsPhase)
    connection: ConnectionPhase = Field(default_factory=ConnectionPhase)
    session: SessionPhase = Field(default_factory=SessionPhase)
    request: RequestPhase = Field(default_factory=RequestPhase)
    first_byte_time: int | None = None

    request_headers: Mapping[str, tuple[str, ...]] = Field(default_factory=dict, validate_default=True)
    response_headers: Mapping[str, tuple[str, ...]] = Field(default_factory=dict, validate_default=True)

    @field_validator("request_headers", "response_headers", mode="after")
    @classmethod
    def _read_only_headers(cls, value: Mapping[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("request_headers", "response_headers")
    def _dump_headers(self, value: Mapping[str, tuple[str, ...]]) -> HeaderMap:
        return dict(value)

    @property
    def duration_ns(self) -> int | None:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def response_header(self, key: str) -> str | None:
        """First value of a response header, or ``None`` if absent."""
        values = self.response_headers.get(key)
        return values[0] if values else None
