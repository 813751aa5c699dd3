from fetchstats.reporters.interface import Reporter
from fetchstats.reporters.connection import ConnectionReporter
from fetchstats.reporters.headers import HeaderReporter
from fetchstats.reporters.ipfs_gateway import IpfsGatewayReporter
from fetchstats.reporters.saturn import SaturnReporter
from fetchstats.reporters.registry import (
    ReporterRegistry,
    build_default_registry,
    dispatch,
    parse_reporter_names,
)

__all__ = [
    "ConnectionReporter",
    "HeaderReporter",
    "IpfsGatewayReporter",
    "Reporter",
    "ReporterRegistry",
    "SaturnReporter",
    "build_default_registry",
    "dispatch",
    "parse_reporter_names",
]
