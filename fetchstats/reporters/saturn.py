"""Saturn reporter — node and cache details from the Saturn web3 CDN."""

from __future__ import annotations

from fetchstats.reporters.interface import Reporter, render_table, require_headers
from fetchstats.stats.models import StatsSnapshot

# Checked, and reported missing, in this order
REQUIRED_HEADERS = (
    "Saturn-Transfer-Id",
    "Saturn-Node-Id",
    "Saturn-Node-Version",
    "Saturn-Cache-Status",
)


class SaturnReporter(Reporter):
    @property
    def name(self) -> str:
        return "Saturn"

    def title(self) -> str:
        return "Saturn CDN"

    def description(self) -> str:
        return "Shows information about Saturn CDN, where applicable"

    def report(self, snapshot: StatsSnapshot) -> str:
        transfer_id, node_id, node_version, cache_status = require_headers(
            snapshot, REQUIRED_HEADERS
        )
        return render_table(
            ["Client", "Transfer ID", "Saturn Node", "Saturn Node ID", "Node Version", "Cache Status"],
            [[
                snapshot.session.local or "",
                transfer_id,
                snapshot.session.remote or "",
                node_id,
                node_version,
                cache_status,
            ]],
        )
