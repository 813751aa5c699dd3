"""Tests for ReporterRegistry and dispatch."""

from __future__ import annotations

import pytest

from fetchstats.engine.models import ReportStatus
from fetchstats.reporters.headers import HeaderReporter
from fetchstats.reporters.interface import Reporter
from fetchstats.reporters.registry import ReporterRegistry, dispatch, parse_reporter_names
from fetchstats.stats.models import StatsSnapshot


class ExplodingReporter(Reporter):
    @property
    def name(self) -> str:
        return "Boom"

    def title(self) -> str:
        return "Boom"

    def description(self) -> str:
        return "Always raises"

    def report(self, snapshot: StatsSnapshot) -> str:
        raise KeyError("unexpected")


class TestRegistry:
    def test_default_catalog(self, registry):
        assert registry.names() == ["Connection", "Header", "IPFSGW", "Saturn"]
        assert len(registry) == 4
        assert [r.name for r in registry] == registry.names()

    def test_lookup_is_case_sensitive(self, registry):
        assert registry.get("Header") is not None
        assert registry.get("header") is None
        assert "IPFSGW" in registry
        assert "ipfsgw" not in registry

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ReporterRegistry([HeaderReporter(), HeaderReporter()])

    def test_catalog_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._reporters["Extra"] = HeaderReporter()


class TestDispatch:
    def test_unknown_name_is_skipped(self, registry, make_snapshot, caplog):
        outcomes = dispatch(registry, make_snapshot(), ["Bogus", "Header"])

        assert [o.name for o in outcomes] == ["Bogus", "Header"]
        assert outcomes[0].status == ReportStatus.UNKNOWN
        assert outcomes[1].status == ReportStatus.OK
        assert outcomes[1].title == "Request and Response Headers"
        assert outcomes[1].body
        assert "Unknown reporter 'Bogus'" in caplog.text

    def test_unknown_name_does_not_mask_failure(self, registry, make_snapshot):
        outcomes = dispatch(registry, make_snapshot(), ["Saturn", "Bogus"])
        assert outcomes[0].status == ReportStatus.FAILED
        assert outcomes[0].error == "Header Saturn-Transfer-Id is not present in response"
        assert outcomes[0].body is None
        assert outcomes[1].status == ReportStatus.UNKNOWN

    def test_failure_does_not_stop_later_reporters(self, registry, make_snapshot):
        outcomes = dispatch(registry, make_snapshot(), ["IPFSGW", "Connection", "Header"])
        assert [o.status for o in outcomes] == [
            ReportStatus.FAILED,
            ReportStatus.OK,
            ReportStatus.OK,
        ]

    def test_unexpected_exception_becomes_failure(self, make_snapshot):
        registry = ReporterRegistry([ExplodingReporter(), HeaderReporter()])
        outcomes = dispatch(registry, make_snapshot(), ["Boom", "Header"])
        assert outcomes[0].status == ReportStatus.FAILED
        assert "KeyError" in outcomes[0].error
        assert outcomes[1].status == ReportStatus.OK

    def test_empty_request(self, registry, make_snapshot):
        assert dispatch(registry, make_snapshot(), []) == []
        assert dispatch(registry, make_snapshot(), ["", ""]) == []


class TestParseReporterNames:
    def test_splits_and_strips(self):
        assert parse_reporter_names("Connection, Header,,Saturn ") == ["Connection", "Header", "Saturn"]

    def test_empty(self):
        assert parse_reporter_names("") == []
