"""Reporter registry and dispatch."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator

from fetchstats.engine.models import ReportOutcome, ReportStatus
from fetchstats.errors import ReporterError
from fetchstats.reporters.connection import ConnectionReporter
from fetchstats.reporters.headers import HeaderReporter
from fetchstats.reporters.interface import Reporter
from fetchstats.reporters.ipfs_gateway import IpfsGatewayReporter
from fetchstats.reporters.saturn import SaturnReporter
from fetchstats.stats.models import StatsSnapshot

logger = logging.getLogger(__name__)


class ReporterRegistry:
    """Immutable, case-sensitive ``name -> Reporter`` catalog."""

    def __init__(self, reporters: Iterable[Reporter]) -> None:
        catalog: dict[str, Reporter] = {}
        for reporter in reporters:
            if reporter.name in catalog:
                raise ValueError(f"Duplicate reporter name '{reporter.name}'")
            catalog[reporter.name] = reporter
        self._reporters = MappingProxyType(catalog)

    def get(self, name: str) -> Reporter | None:
        return self._reporters.get(name)

    def names(self) -> list[str]:
        return sorted(self._reporters)

    def __contains__(self, name: object) -> bool:
        return name in self._reporters

    def __iter__(self) -> Iterator[Reporter]:
        return (self._reporters[n] for n in self.names())

    def __len__(self) -> int:
        return len(self._reporters)


def build_default_registry() -> ReporterRegistry:
    return ReporterRegistry([
        ConnectionReporter(),
        HeaderReporter(),
        IpfsGatewayReporter(),
        SaturnReporter(),
    ])


def parse_reporter_names(raw: str) -> list[str]:
    """Split the comma-separated form, dropping empty entries."""
    return [name.strip() for name in raw.split(",") if name.strip()]


def run_reporter(name: str, reporter: Reporter, snapshot: StatsSnapshot) -> ReportOutcome:
    title, description = reporter.title(), reporter.description()
    try:
        body = reporter.report(snapshot)
    except ReporterError as exc:
        logger.info("Reporter %s failed: %s", name, exc)
        return ReportOutcome(
            name=name, status=ReportStatus.FAILED,
            title=title, description=description, error=str(exc),
        )
    except Exception as exc:
        logger.exception("Reporter %s raised unexpectedly", name)
        return ReportOutcome(
            name=name, status=ReportStatus.FAILED,
            title=title, description=description, error=f"{type(exc).__name__}: {exc}",
        )
    return ReportOutcome(
        name=name, status=ReportStatus.OK,
        title=title, description=description, body=body,
    )


def dispatch(
    registry: ReporterRegistry,
    snapshot: StatsSnapshot,
    names: Iterable[str],
) -> list[ReportOutcome]:
    """Run each requested reporter in order; one outcome per non-empty name."""
    outcomes: list[ReportOutcome] = []
    for name in names:
        if not name:
            continue
        reporter = registry.get(name)
        if reporter is None:
            logger.warning("Unknown reporter '%s'", name)
            outcomes.append(ReportOutcome(name=name, status=ReportStatus.UNKNOWN))
            continue
        outcomes.append(run_reporter(name, reporter, snapshot))
    return outcomes
