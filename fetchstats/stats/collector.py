"""StatsCollector — records one request's lifecycle and counts body bytes."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Sequence

from fetchstats.stats.models import (
    NS_PER_SECOND,
    ConnectionPhase,
    DnsPhase,
    HeaderMap,
    RequestPhase,
    SessionPhase,
    StatsSnapshot,
    TlsPhase,
    normalize_headers,
)

logger = logging.getLogger(__name__)


def anchored_clock() -> Callable[[], int]:
    """Epoch-nanosecond clock that never steps backwards.

    Reads the wall clock once, then advances with ``time.monotonic_ns``.
    """
    offset = time.time_ns() - time.monotonic_ns()

    def now() -> int:
        return offset + time.monotonic_ns()

    return now


def _err(error: BaseException | str | None) -> str | None:
    return None if error is None else str(error)


class StatsCollector:
    """Passive recorder for the hooks of a single request.

    Mutators are called in protocol order by a transport adapter; ordering is
    not enforced here. The collector also acts as a byte sink (``write``) for
    the response body, keeping a crude per-second throughput history.

    Once ``stop()`` has been called the collector is frozen and further
    mutator calls are ignored.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock if clock is not None else anchored_clock()
        self._frozen = False

        self.total_bytes = 0
        self.current_second: int | None = None
        self.current_second_bytes = 0
        self.per_second: list[int] = []
        self.start_time: int | None = None
        self.end_time: int | None = None

        self.dns = DnsPhase()
        self.tls = TlsPhase()
        self.connection = ConnectionPhase()
        self.session = SessionPhase()
        self.request = RequestPhase()
        self.first_byte_time: int | None = None

        self.request_headers: HeaderMap = {}
        self.response_headers: HeaderMap = {}

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _mutable(self, op: str) -> bool:
        if self._frozen:
            logger.warning("Ignoring %s on finalized collector", op)
            return False
        return True

    # -- headers ------------------------------------------------------------

    def set_request_headers(
        self, headers: Mapping[str, Iterable[str]] | Iterable[tuple[str, str]]
    ) -> None:
        if not self._mutable("set_request_headers"):
            return
        self.request_headers = normalize_headers(headers)
        self._log_headers("Request", self.request_headers)

    def set_response_headers(
        self, headers: Mapping[str, Iterable[str]] | Iterable[tuple[str, str]]
    ) -> None:
        if not self._mutable("set_response_headers"):
            return
        self.response_headers = normalize_headers(headers)
        self._log_headers("Response", self.response_headers)

    @staticmethod
    def _log_headers(section: str, headers: HeaderMap) -> None:
        logger.info("%s Headers:", section)
        for key, values in headers.items():
            logger.info("  %s: %s", key, list(values))

    # -- byte sink ----------------------------------------------------------

    def write(self, chunk: bytes) -> int:
        n = len(chunk)
        if not self._mutable("write"):
            return n
        self.total_bytes += n

        # Crude breakdown per second
        curr = self._clock() // NS_PER_SECOND
        if self.current_second is None:
            self.current_second = curr
        elif curr != self.current_second:
            logger.info("%d transferred, %d bytes/s", self.total_bytes, self.current_second_bytes)
            self.per_second.append(self.current_second_bytes)
            self.current_second_bytes = 0
            self.current_second = curr
        self.current_second_bytes += n
        return n

    # -- lifecycle hooks ----------------------------------------------------

    def start_dns(self, host: str) -> None:
        if not self._mutable("start_dns"):
            return
        self.dns = self.dns.model_copy(update={"start_time": self._clock(), "host": host})
        logger.info("DNS Request for '%s' starting", host)

    def end_dns(self, addrs: Sequence[str], error: BaseException | str | None = None) -> None:
        if not self._mutable("end_dns"):
            return
        self.dns = self.dns.model_copy(update={
            "end_time": self._clock(),
            "addrs": tuple(addrs),
            "error": _err(error),
        })
        if error is None:
            logger.info("DNS Request for '%s' returned: %s", self.dns.host, list(addrs))
        else:
            logger.info("DNS Request for '%s' failed: %s", self.dns.host, error)

    def start_connect(self, network: str, addr: str) -> None:
        if not self._mutable("start_connect"):
            return
        self.connection = self.connection.model_copy(update={
            "start_time": self._clock(),
            "protocol": network,
            "address": addr,
        })
        logger.info("Initiating %s connection to %s", network.upper(), addr)

    def end_connect(
        self, network: str, addr: str, error: BaseException | str | None = None
    ) -> None:
        if not self._mutable("end_connect"):
            return
        self.connection = self.connection.model_copy(update={
            "end_time": self._clock(),
            "protocol": network,
            "address": addr,
            "error": _err(error),
        })
        if error is None:
            logger.info("Connection to %s succeeded", addr)
        else:
            logger.info("Connection to %s failed: %s", addr, error)

    def start_tls(self) -> None:
        if not self._mutable("start_tls"):
            return
        self.tls = self.tls.model_copy(update={"start_time": self._clock()})
        logger.info("Initiating TLS handshake")

    def end_tls(
        self,
        version: str | None,
        cipher_suite: str | None,
        server_name: str,
        error: BaseException | str | None = None,
    ) -> None:
        if not self._mutable("end_tls"):
            return
        self.tls = self.tls.model_copy(update={
            "end_time": self._clock(),
            "version": version,
            "cipher_suite": cipher_suite,
            "server_name": server_name,
            "error": _err(error),
        })
        if error is None:
            logger.info("Initiated TLS handshake")
        else:
            logger.info("TLS handshake failed: %s", error)

    def start_session(self, host_port: str) -> None:
        if not self._mutable("start_session"):
            return
        self.session = self.session.model_copy(update={
            "start_time": self._clock(),
            "host_port": host_port,
        })
        logger.info("Initiating session to %s", host_port)

    def got_session(self, local: str | None, remote: str | None) -> None:
        if not self._mutable("got_session"):
            return
        self.session = self.session.model_copy(update={
            "end_time": self._clock(),
            "local": local,
            "remote": remote,
        })
        logger.info("Initiated session to %s: %s => %s", self.session.host_port, local, remote)

    def wrote_request(self, error: BaseException | str | None = None) -> None:
        if not self._mutable("wrote_request"):
            return
        self.request = RequestPhase(start_time=self._clock(), error=_err(error))
        logger.info("HTTP Request made")

    def first_byte_received(self) -> None:
        if not self._mutable("first_byte_received"):
            return
        now = self._clock()
        self.first_byte_time = now
        self.current_second = now // NS_PER_SECOND
        logger.info("Received first byte")

    # -- transfer bracket ---------------------------------------------------

    def start(self) -> None:
        if not self._mutable("start"):
            return
        self.start_time = self._clock()

    def stop(self) -> None:
        """Finalize: record the end time, flush the trailing second, freeze."""
        if not self._mutable("stop"):
            return
        self.end_time = self._clock()
        if self.current_second_bytes:
            self.per_second.append(self.current_second_bytes)
            self.current_second_bytes = 0
        self._frozen = True

    def duration_ns(self) -> int:
        if not self._frozen or self.start_time is None or self.end_time is None:
            raise RuntimeError("duration is only available after start() and stop()")
        return self.end_time - self.start_time

    def total_bytes_transferred(self) -> int:
        return self.total_bytes

    # -- snapshot -----------------------------------------------------------

    def snapshot(self, **extra: Any) -> StatsSnapshot:
        """Return an immutable copy of the current state.

        ``extra`` carries orchestrator-level fields (url, status_code, ...).
        """
        return StatsSnapshot(
            total_bytes=self.total_bytes,
            current_second=self.current_second,
            current_second_bytes=self.current_second_bytes,
            per_second=tuple(self.per_second),
            start_time=self.start_time,
            end_time=self.end_time,
            dns=self.dns,
            tls=self.tls,
            connection=self.connection,
            session=self.session,
            request=self.request,
            first_byte_time=self.first_byte_time,
            request_headers=dict(self.request_headers),
            response_headers=dict(self.response_headers),
            **extra,
        )
