"""httpx/httpcore trace adapter — translates ``extensions["trace"]`` events into hooks.

httpcore reports events named ``<prefix>.<step>.<started|complete|failed>``,
e.g. ``connection.connect_tcp.started`` or ``http11.send_request_body.complete``.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Any, Awaitable, Callable

import httpx

from fetchstats.stats.hooks import Hook, LifecycleHooks

logger = logging.getLogger(__name__)

Resolver = Callable[[str, int], Awaitable[list[str]]]


async def system_resolver(host: str, port: int) -> list[str]:
    """Resolve *host* with the event loop's ``getaddrinfo``; unique IPs in order."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    addrs: list[str] = []
    for *_, sockaddr in infos:
        ip = str(sockaddr[0])
        if ip not in addrs:
            addrs.append(ip)
    return addrs


def format_addr(addr: Any) -> str | None:
    """``("10.0.0.1", 443)`` -> ``10.0.0.1:443``; IPv6 hosts are bracketed."""
    if addr is None:
        return None
    if isinstance(addr, (tuple, list)) and len(addr) >= 2:
        host, port = str(addr[0]), addr[1]
        if ":" in host:
            host = f"[{host}]"
        return f"{host}:{port}"
    return str(addr)


def _stream_info(stream: Any, name: str) -> Any:
    getter = getattr(stream, "get_extra_info", None)
    if not callable(getter):
        return None
    return getter(name)


class HttpxTraceAdapter:
    """Async trace callback for one ``httpx.AsyncClient`` request.

    Usage::

        adapter = HttpxTraceAdapter(bind_hooks(collector))
        adapter.begin(request.url)
        request.extensions["trace"] = adapter
    """

    def __init__(self, hooks: LifecycleHooks, resolver: Resolver | None = None) -> None:
        self._hooks = hooks
        self._resolver = resolver or system_resolver
        self._stream: Any = None
        self._got_conn = False
        self._tcp_addr = ""
        self._sni = ""

    def begin(self, url: httpx.URL) -> None:
        """Fire ``get_conn`` before the request is handed to the pool."""
        port = url.port or (443 if url.scheme == "https" else 80)
        self._hooks[Hook.GET_CONN](f"{url.host}:{port}")

    async def __call__(self, event_name: str, info: dict[str, Any]) -> None:
        step, _, state = event_name.rpartition(".")
        prefix, _, op = step.partition(".")
        if prefix == "connection":
            await self._on_connection(op, state, info)
        elif prefix in ("http11", "http2"):
            self._on_http(op, state, info)
        else:
            logger.debug("Ignoring trace event %s", event_name)

    # -- connection.* -------------------------------------------------------

    async def _on_connection(self, op: str, state: str, info: dict[str, Any]) -> None:
        if op == "connect_tcp":
            if state == "started":
                await self._connect_started(info["host"], info["port"])
            elif state == "complete":
                self._stream = info.get("return_value")
                addr = format_addr(_stream_info(self._stream, "server_addr")) or self._tcp_addr
                self._hooks[Hook.CONNECT_DONE]("tcp", addr, None)
            elif state == "failed":
                self._hooks[Hook.CONNECT_DONE]("tcp", self._tcp_addr, info.get("exception"))
        elif op == "start_tls":
            if state == "started":
                self._sni = str(info.get("server_hostname") or "")
                self._hooks[Hook.TLS_START]()
            elif state == "complete":
                self._stream = info.get("return_value") or self._stream
                self._tls_done()
            elif state == "failed":
                self._hooks[Hook.TLS_DONE](None, None, self._sni, info.get("exception"))

    async def _connect_started(self, host: str, port: int) -> None:
        self._hooks[Hook.DNS_START](host)
        try:
            addrs = await self._resolver(host, port)
        except OSError as exc:
            self._hooks[Hook.DNS_DONE]([], exc)
            addrs = []
        else:
            self._hooks[Hook.DNS_DONE](addrs)
        self._tcp_addr = format_addr((addrs[0], port)) if addrs else f"{host}:{port}"
        self._hooks[Hook.CONNECT_START]("tcp", self._tcp_addr)

    def _tls_done(self) -> None:
        ssl_object = _stream_info(self._stream, "ssl_object")
        version = cipher = None
        server_name = self._sni
        if ssl_object is not None:
            version = ssl_object.version()
            cipher_info = ssl_object.cipher()
            cipher = cipher_info[0] if cipher_info else None
            server_name = getattr(ssl_object, "server_hostname", None) or server_name
        self._hooks[Hook.TLS_DONE](version, cipher, server_name)

    # -- http11.* / http2.* -------------------------------------------------

    def _on_http(self, op: str, state: str, info: dict[str, Any]) -> None:
        if op == "send_request_headers" and state == "started" and not self._got_conn:
            self._got_conn = True
            self._hooks[Hook.GOT_CONN](
                format_addr(_stream_info(self._stream, "client_addr")),
                format_addr(_stream_info(self._stream, "server_addr")),
            )
        elif op == "send_request_body" and state in ("complete", "failed"):
            self._hooks[Hook.WROTE_REQUEST](info.get("exception"))
        elif op == "receive_response_headers" and state == "complete":
            self._hooks[Hook.GOT_FIRST_RESPONSE_BYTE]()
