"""Fetcher — performs one instrumented fetch and dispatches reporters."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import httpx

from fetchstats.engine.models import FetchRequest, FetchResult
from fetchstats.errors import FetchError, UnsupportedSchemeError
from fetchstats.reporters.registry import ReporterRegistry, dispatch
from fetchstats.stats.collector import StatsCollector
from fetchstats.stats.hooks import bind_hooks
from fetchstats.tracing.interface import SnapshotSink
from fetchstats.transport.httpx_trace import HttpxTraceAdapter, Resolver

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS: list[tuple[str, str]] = [
    ("Pragma", "no-cache"),
    ("Cache-Control", "no-cache"),
    ("Cache-Control", "no-store"),
    ("Cache-Control", "must-revalidate"),
    ("Expires", "0"),
]


class Fetcher:
    """Public API: ``result = await fetcher.fetch(FetchRequest(uri=...))``"""

    DEFAULT_TIMEOUT: float = 30.0

    def __init__(
        self,
        registry: ReporterRegistry,
        timeout: float = DEFAULT_TIMEOUT,
        snapshot_sink: SnapshotSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        resolver: Resolver | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._registry = registry
        self._timeout = timeout
        self._sink = snapshot_sink
        self._transport = transport
        self._resolver = resolver
        self._clock = clock

    @property
    def registry(self) -> ReporterRegistry:
        return self._registry

    @property
    def timeout(self) -> float:
        return self._timeout

    # ------------------------------------------------------------------
    # Public fetch
    # ------------------------------------------------------------------

    async def fetch(self, req: FetchRequest) -> FetchResult:
        url = self._parse_url(req.uri)
        logger.info("Downloading '%s'", req.uri)

        # 1. Exchange ---------------------------------------------------
        collector = StatsCollector(clock=self._clock)
        try:
            meta = await asyncio.wait_for(
                self._exchange(req, url, collector),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise FetchError(f"Request for {req.uri} timed out after {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Request for {req.uri} failed: {exc}") from exc

        duration = collector.duration_ns()
        total = collector.total_bytes_transferred()
        rate = total / duration * 1_000_000_000 / 1024 if duration > 0 else 0.0
        logger.info("Total transferred: %d in %d (%f kB/s)", total, duration, rate)

        # 2. Snapshot ---------------------------------------------------
        snapshot = collector.snapshot(trace_id=req.trace_id, url=str(url), **meta)
        logger.info("%s", snapshot.model_dump_json())
        if self._sink is not None:
            await self._sink.save(snapshot)

        # 3. Reporters --------------------------------------------------
        reports = dispatch(self._registry, snapshot, req.reporters)
        return FetchResult(snapshot=snapshot, reports=reports)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_url(uri: str) -> httpx.URL:
        try:
            url = httpx.URL(uri)
        except httpx.InvalidURL as exc:
            raise FetchError(f"Request for {uri} failed: {exc}") from exc
        # http/https for now
        if url.scheme not in ("http", "https") or not url.host:
            raise UnsupportedSchemeError(uri)
        return url

    async def _exchange(
        self,
        req: FetchRequest,
        url: httpx.URL,
        collector: StatsCollector,
    ) -> dict[str, Any]:
        headers: list[tuple[str, str]] = []
        if req.no_cache:
            logger.info("Requesting that content not come from cache")
            headers.extend(NO_CACHE_HEADERS)

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self._timeout),
            trust_env=True,
        ) as client:
            request = client.build_request("GET", url, headers=headers)
            collector.set_request_headers(request.headers.multi_items())

            adapter = HttpxTraceAdapter(bind_hooks(collector), resolver=self._resolver)
            request.extensions["trace"] = adapter
            adapter.begin(request.url)

            response = await client.send(request, stream=True)
            try:
                collector.set_response_headers(response.headers.multi_items())
                await self._copy_body(response, req.out_file, collector)
            finally:
                await response.aclose()

        return {"status_code": response.status_code, "http_version": response.http_version}

    @staticmethod
    async def _copy_body(
        response: httpx.Response,
        out_file: str,
        collector: StatsCollector,
    ) -> None:
        logger.info("Writing retrieved data to '%s'", out_file)
        try:
            out = open(out_file, "wb")
        except OSError as exc:
            raise FetchError(f"Cannot open output '{out_file}': {exc}") from exc

        try:
            with out:
                collector.start()
                async for chunk in response.aiter_bytes():
                    out.write(chunk)
                    collector.write(chunk)
                collector.stop()
        except OSError as exc:
            raise FetchError(f"Cannot write output '{out_file}': {exc}") from exc
