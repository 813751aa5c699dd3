"""Header reporter — request and response headers, one row per value."""

from __future__ import annotations

from fetchstats.reporters.interface import Reporter, render_table
from fetchstats.stats.models import StatsSnapshot


class HeaderReporter(Reporter):
    @property
    def name(self) -> str:
        return "Header"

    def title(self) -> str:
        return "Request and Response Headers"

    def description(self) -> str:
        return "Shows Request and Response headers from a HTTP/HTTPS request"

    def rows(self, snapshot: StatsSnapshot) -> list[tuple[str, str, str]]:
        rows: list[tuple[str, str, str]] = []
        for section, headers in (
            ("Request", snapshot.request_headers),
            ("Response", snapshot.response_headers),
        ):
            for key in sorted(headers):
                rows.extend((section, key, value) for value in headers[key])
        return rows

    def report(self, snapshot: StatsSnapshot) -> str:
        return render_table(["", "Key", "Value"], self.rows(snapshot))
