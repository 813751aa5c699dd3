"""IPFS gateway reporter — path through the gateway's load balancer and node."""

from __future__ import annotations

from fetchstats.reporters.interface import Reporter, render_table, require_headers
from fetchstats.stats.models import StatsSnapshot

REQUIRED_HEADERS = ("X-Ipfs-Lb-Pop", "X-Ipfs-Pop")
CACHE_HEADER = "X-Proxy-Cache"


class IpfsGatewayReporter(Reporter):
    @property
    def name(self) -> str:
        return "IPFSGW"

    def title(self) -> str:
        return "IPFS Gateway Path"

    def description(self) -> str:
        return "Shows Information about the path through the IPFS Gateway"

    def report(self, snapshot: StatsSnapshot) -> str:
        lb_pop, ipfs_pop = require_headers(snapshot, REQUIRED_HEADERS)
        out = render_table(
            ["Client", "Gateway", "Load Balancer", "IPFS Node"],
            [[snapshot.session.local or "", snapshot.session.remote or "", lb_pop, ipfs_pop]],
        )
        cache = snapshot.response_header(CACHE_HEADER)
        if cache is not None:
            out += f"The request was an IPFS gateway cache {cache}\n"
        return out
