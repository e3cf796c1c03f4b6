"""In-memory record of the issues behind the most recent report."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Iterable

from .classify import ReportData, is_epic


@dataclass(frozen=True)
class LastReportEntry:
    issue_number: int
    repository: str
    item_id: str
    kind: str | None = None


class LastReportStore:
    """Holds the (issue, project item) pairs of the last generated report.

    Epic entries are dropped when recorded. Each new
    report replaces the previous record wholesale. Generating a report
    while a bulk update still reads the previous one is not supported.
    """

    def __init__(self):
        self._entries: tuple[LastReportEntry, ...] = ()
        self.team: str | None = None
        self.status: str | None = None
        self.generated_at: _dt.datetime | None = None

    def record(self, entries: Iterable[LastReportEntry], team: str | None = None, status: str | None = None) -> None:
        self._entries = tuple(e for e in entries if not is_epic(e.kind))
        self.team = team
        self.status = status
        self.generated_at = _dt.datetime.now(_dt.timezone.utc)

    def record_report(self, data: ReportData, team: str | None = None, status: str | None = None) -> None:
        self.record(
            (
                LastReportEntry(
                    issue_number=i.number,
                    repository=i.repository,
                    item_id=i.item_id or "",
                    kind=i.kind,
                )
                for i in data.all_issues()
            ),
            team=team,
            status=status,
        )

    @property
    def entries(self) -> tuple[LastReportEntry, ...]:
        return self._entries

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def clear(self) -> None:
        self._entries = ()
        self.team = None
        self.status = None
        self.generated_at = None
