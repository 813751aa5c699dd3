"""Connection reporter — timing of session establishment (DNS, TCP, TLS)."""

from __future__ import annotations

from fetchstats.reporters.interface import Reporter, render_table
from fetchstats.stats.models import NS_PER_SECOND, StatsSnapshot

COLUMNS = ["DNS Lookup", "Connection", "TLS", "Request", "First Byte"]


def ns_diff_seconds(end: int | None, start: int | None) -> float | None:
    """``end - start`` in fractional seconds, ``None`` if either is unset."""
    if end is None or start is None:
        return None
    return (end - start) / NS_PER_SECOND


class ConnectionReporter(Reporter):
    @property
    def name(self) -> str:
        return "Connection"

    def title(self) -> str:
        return "Session Establishment"

    def description(self) -> str:
        return "Shows the timing for various stages of establishment of a HTTP/HTTPS session"

    def durations(self, s: StatsSnapshot) -> dict[str, float | None]:
        """Phase durations keyed by column name; ``None`` where a phase never ran."""
        return {
            "DNS Lookup": ns_diff_seconds(s.dns.end_time, s.dns.start_time),
            "Connection": ns_diff_seconds(s.connection.end_time, s.connection.start_time),
            "TLS": ns_diff_seconds(s.tls.end_time, s.tls.start_time),
            "Request": ns_diff_seconds(s.request.start_time, s.session.end_time),
            "First Byte": ns_diff_seconds(s.first_byte_time, s.request.start_time),
        }

    def report(self, snapshot: StatsSnapshot) -> str:
        durations = self.durations(snapshot)
        data = ["-" if durations[c] is None else f"{durations[c]:f}" for c in COLUMNS]

        dns, tls = snapshot.dns, snapshot.tls
        hints = [
            f"{dns.host}\n{', '.join(dns.addrs)}",
            snapshot.connection.address,
            f"ver: {tls.version or '-'}\nname: {tls.server_name}",
            "",
            "",
        ]
        return render_table(COLUMNS, [data, hints])
