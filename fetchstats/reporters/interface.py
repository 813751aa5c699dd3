"""Reporter ABC — renders a human-readable view of a frozen StatsSnapshot."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from fetchstats.errors import MissingHeaderError
from fetchstats.stats.models import StatsSnapshot

TABLE_WIDTH = 160


class Reporter(ABC):
    """Post-processor over the data gathered during a request.

    ``report`` is a pure function of the snapshot. Raise
    :class:`~fetchstats.errors.ReporterError` when required data is absent.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def title(self) -> str: ...

    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def report(self, snapshot: StatsSnapshot) -> str: ...


def require_headers(snapshot: StatsSnapshot, names: Sequence[str]) -> list[str]:
    """Return the first value of each response header, failing on the first missing one."""
    values: list[str] = []
    for name in names:
        value = snapshot.response_header(name)
        if value is None:
            raise MissingHeaderError(name)
        values.append(value)
    return values


def render_table(columns: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render an ASCII table to a string (no colour, fixed width)."""
    table = Table(box=box.ASCII, show_lines=True, header_style="")
    for column in columns:
        table.add_column(column, justify="left", overflow="fold")
    for row in rows:
        table.add_row(*row)

    buf = io.StringIO()
    console = Console(file=buf, width=TABLE_WIDTH, color_system=None, highlight=False)
    console.print(table)
    return buf.getvalue()
