"""Exception hierarchy — no internal deps."""

from __future__ import annotations


class FetchStatsError(Exception):
    """Base class for all fetchstats errors."""


class ReporterError(FetchStatsError):
    """A reporter cannot produce its view from the given snapshot."""


class MissingHeaderError(ReporterError):
    def __init__(self, header: str) -> None:
        super().__init__(f"Header {header} is not present in response")
        self.header = header


class FetchError(FetchStatsError):
    """Fatal failure of the fetch itself; no reports are produced."""


class UnsupportedSchemeError(FetchStatsError, ValueError):
    def __init__(self, uri: str) -> None:
        super().__init__(f"Only http:// and https:// URIs are supported, got '{uri}'")
        self.uri = uri
