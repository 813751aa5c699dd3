"""Tests for Fetcher — end-to-end fetch against a mocked transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from fetchstats import create_fetcher
from fetchstats.engine import fetcher as fetcher_module
from fetchstats.engine.fetcher import Fetcher
from fetchstats.engine.models import FetchRequest, ReportStatus
from fetchstats.errors import FetchError, UnsupportedSchemeError
from fetchstats.tracing.jsonl_writer import JSONLSnapshotWriter

GATEWAY_URL = "https://gw.example/ipfs/bafybeigdyrzt"
IPFS_HEADERS = {
    "X-Ipfs-Lb-Pop": "gateway-bank1-lb",
    "X-Ipfs-Pop": "ipfs-bank7-node",
    "X-Proxy-Cache": "MISS",
}


class SlowTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, content=b"late")


class DelayedTransport(httpx.AsyncBaseTransport):
    """Answers after a simulated delay, honouring the request's read timeout."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.timeouts: dict = {}

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.timeouts = request.extensions.get("timeout", {})
        read = self.timeouts.get("read")
        if read is not None and read < self.delay:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, content=b"ok")


class FullDisk:
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def write(self, data: bytes) -> int:
        raise OSError(28, "No space left on device")


class TestFetch:
    async def test_fetch_collects_headers_bytes_and_reports(self, httpx_mock, registry, tmp_path):
        body = b"x" * 4096
        httpx_mock.add_response(url=GATEWAY_URL, headers=IPFS_HEADERS, content=body)
        out_file = tmp_path / "out.bin"

        fetcher = Fetcher(registry=registry)
        result = await fetcher.fetch(FetchRequest(
            uri=GATEWAY_URL,
            out_file=str(out_file),
            reporters=["IPFSGW", "Bogus", "Saturn"],
        ))

        snapshot = result.snapshot
        assert snapshot.url == GATEWAY_URL
        assert snapshot.status_code == 200
        assert snapshot.total_bytes == len(body)
        assert sum(snapshot.per_second) == len(body)
        assert snapshot.duration_ns is not None and snapshot.duration_ns >= 0
        assert snapshot.response_headers["X-Ipfs-Pop"] == ("ipfs-bank7-node",)
        assert out_file.read_bytes() == body

        statuses = {o.name: o.status for o in result.reports}
        assert statuses == {
            "IPFSGW": ReportStatus.OK,
            "Bogus": ReportStatus.UNKNOWN,
            "Saturn": ReportStatus.FAILED,
        }
        ipfs = result.reports[0]
        assert "The request was an IPFS gateway cache MISS" in ipfs.body

    async def test_no_cache_headers_sent_and_recorded(self, httpx_mock, registry):
        httpx_mock.add_response(url="http://origin.example/", content=b"ok")

        result = await Fetcher(registry=registry).fetch(
            FetchRequest(uri="http://origin.example/", no_cache=True)
        )

        sent = httpx_mock.get_request()
        assert sent.headers["Pragma"] == "no-cache"
        assert sent.headers.get_list("Cache-Control") == ["no-cache", "no-store", "must-revalidate"]
        assert sent.headers["Expires"] == "0"

        recorded = result.snapshot.request_headers
        assert recorded["Cache-Control"] == ("no-cache", "no-store", "must-revalidate")
        assert recorded["Pragma"] == ("no-cache",)

    async def test_no_reporters_requested(self, httpx_mock, registry):
        httpx_mock.add_response(url="http://origin.example/", content=b"")
        result = await Fetcher(registry=registry).fetch(FetchRequest(uri="http://origin.example/"))
        assert result.reports == []
        assert result.snapshot.total_bytes == 0
        assert result.snapshot.per_second == ()

    async def test_snapshot_saved_to_sink(self, httpx_mock, registry, tmp_path):
        httpx_mock.add_response(url="http://origin.example/", content=b"hello")
        sink = JSONLSnapshotWriter(str(tmp_path / "traces"))

        result = await Fetcher(registry=registry, snapshot_sink=sink).fetch(
            FetchRequest(uri="http://origin.example/", trace_id="run-1")
        )

        lines = sink.path.read_text().strip().split("\n")
        assert len(lines) == 1
        saved = json.loads(lines[0])
        assert saved["trace_id"] == "run-1"
        assert saved["total_bytes"] == 5
        assert result.snapshot.trace_id == "run-1"


class TestFatalConditions:
    @pytest.mark.parametrize("uri", ["ftp://example.test/file", "example.test", "ipfs://bafy"])
    async def test_unsupported_scheme(self, registry, uri):
        with pytest.raises(UnsupportedSchemeError):
            await Fetcher(registry=registry).fetch(FetchRequest(uri=uri))

    async def test_timeout_is_fatal(self, registry):
        fetcher = Fetcher(registry=registry, timeout=0.05, transport=SlowTransport())
        with pytest.raises(FetchError, match="timed out"):
            await fetcher.fetch(FetchRequest(uri="http://slow.example/", reporters=["Header"]))

    async def test_transport_error_is_fatal(self, registry):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = Fetcher(registry=registry, transport=httpx.MockTransport(refuse))
        with pytest.raises(FetchError, match="connection refused") as exc_info:
            await fetcher.fetch(FetchRequest(uri="http://down.example/"))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_overall_timeout_governs_slow_server(self, registry):
        transport = DelayedTransport(delay=6.0)
        fetcher = Fetcher(registry=registry, timeout=30.0, transport=transport)

        result = await fetcher.fetch(FetchRequest(uri="http://slow.example/"))

        assert result.snapshot.total_bytes == 2
        assert transport.timeouts["read"] == 30.0
        assert transport.timeouts["connect"] == 30.0

    async def test_short_timeout_still_fails_slow_server(self, registry):
        fetcher = Fetcher(registry=registry, timeout=1.0, transport=DelayedTransport(delay=6.0))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(FetchRequest(uri="http://slow.example/"))
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    async def test_write_failure_is_fatal(self, httpx_mock, registry, monkeypatch):
        httpx_mock.add_response(url="http://origin.example/", content=b"data")
        monkeypatch.setattr(fetcher_module, "open", lambda *a, **kw: FullDisk(), raising=False)

        with pytest.raises(FetchError, match="Cannot write output") as exc_info:
            await Fetcher(registry=registry).fetch(FetchRequest(uri="http://origin.example/"))
        assert isinstance(exc_info.value.__cause__, OSError)

    async def test_unwritable_output_is_fatal(self, httpx_mock, registry, tmp_path):
        httpx_mock.add_response(url="http://origin.example/", content=b"data")
        with pytest.raises(FetchError, match="Cannot open output"):
            await Fetcher(registry=registry).fetch(FetchRequest(
                uri="http://origin.example/",
                out_file=str(tmp_path / "missing" / "out.bin"),
            ))


class TestCreateFetcher:
    def test_env_configuration(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FETCHSTATS_TIMEOUT", "5")
        monkeypatch.setenv("FETCHSTATS_TRACE_DIR", str(tmp_path / "traces"))
        fetcher = create_fetcher()
        assert fetcher.timeout == 5.0
        assert (tmp_path / "traces").is_dir()
        assert fetcher.registry.names() == ["Connection", "Header", "IPFSGW", "Saturn"]

    def test_keyword_overrides_env(self, monkeypatch):
        monkeypatch.setenv("FETCHSTATS_TIMEOUT", "5")
        monkeypatch.delenv("FETCHSTATS_TRACE_DIR", raising=False)
        assert create_fetcher(timeout=1.5).timeout == 1.5

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FETCHSTATS_TIMEOUT", raising=False)
        monkeypatch.delenv("FETCHSTATS_TRACE_DIR", raising=False)
        assert create_fetcher().timeout == Fetcher.DEFAULT_TIMEOUT
