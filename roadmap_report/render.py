"""Markdown rendering of classified board issues.

Every verb in a report follows the tense of the reported Status: a status
naming validation or done reads as finished work, one naming progress as
ongoing work, and anything else as planned work.
"""

from __future__ import annotations

import calendar
import random
import re
from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

from .classify import (
    NO_PARENT,
    ReportData,
    ReportIssue,
    extract_repo_name,
    group_by_parent,
    is_parent_completed,
)
from .projects import ParentIssue

NO_ISSUES = "There are currently no issues in this team and status."
DIVIDER = "--------------------------------------------------------"
MAX_EXAMPLES = 2

Sampler = Callable[[Sequence[ReportIssue], int], Sequence[ReportIssue]]


@dataclass(frozen=True)
class Phrasing:
    tldr_completed: str
    tldr_progress: str
    section_completed: str
    section_progress: str
    customer_verb: str
    operational_verb: str
    other_verb: str
    # Section parent lines open with the phrase instead of the parent link
    section_leads: bool = False


PAST = Phrasing(
    tldr_completed="We completed",
    tldr_progress="We made progress on",
    section_completed="completed",
    section_progress="made progress on",
    customer_verb="delivered",
    operational_verb="resolved",
    other_verb="completed",
)
PRESENT = Phrasing(
    tldr_completed="We are working on",
    tldr_progress="We are working on",
    section_completed="are working on",
    section_progress="are working on",
    customer_verb="are delivering",
    operational_verb="are resolving",
    other_verb="are working on",
)
FUTURE = Phrasing(
    tldr_completed="We plan to work on",
    tldr_progress="We plan to work on",
    section_completed="is planned",
    section_progress="is planned",
    customer_verb="plan to deliver",
    operational_verb="plan to resolve",
    other_verb="plan to work on",
)
# Month-in-review report
MONTHLY = Phrasing(
    tldr_completed="We finished with",
    tldr_progress="We made progress on",
    section_completed="We finished with",
    section_progress="We made progress on",
    customer_verb="delivered",
    operational_verb="resolved",
    other_verb="completed",
    section_leads=True,
)


def phrasing_for_status(status: str) -> Phrasing:
    normalized = status.strip().lower()
    if "validation" in normalized or "done" in normalized:
        return PAST
    if "progress" in normalized:
        return PRESENT
    return FUTURE


def random_examples(issues: Sequence[ReportIssue], count: int) -> list[ReportIssue]:
    shuffled = list(issues)
    random.shuffle(shuffled)
    return shuffled[: min(count, len(shuffled))]


def join_with_and(parts: Sequence[str]) -> str:
    """``A``, ``A and B``, ``A, B and C``."""
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]
    return ", ".join(parts[:-1]) + " and " + parts[-1]


def cite(title: str, number: int, url: str, repository: str | None = None) -> str:
    repo = repository or extract_repo_name(url)
    return f"{title} ([{repo}#{number}]({url}))"


def cite_parent(parent: ParentIssue) -> str:
    return cite(parent.title, parent.number, parent.url)


def issue_line(issue: ReportIssue) -> str:
    return f"{issue.title} - [{issue.repository}#{issue.number}]({issue.url})"


class ReportRenderer:
    """Turns ReportData into a Markdown report.

    ``sampler`` picks the example issues quoted in the TL;DR; it defaults to a
    random pick and can be swapped for a deterministic one.
    """

    def __init__(self, sampler: Sampler | None = None):
        self.sampler = sampler or random_examples

    def _examples(self, issues: Sequence[ReportIssue]) -> str:
        examples = self.sampler(issues, MAX_EXAMPLES)
        if not examples:
            return ""
        return ", including " + " and ".join(cite(i.title, i.number, i.url, i.repository) for i in examples)

    def _roadmap_tldr(self, issues: list[ReportIssue], phrasing: Phrasing) -> list[str]:
        completed: list[str] = []
        in_progress: list[str] = []
        for key, children in group_by_parent(issues).items():
            parent = children[0].parent_issue
            if key == NO_PARENT or parent is None:
                continue
            if is_parent_completed(parent):
                completed.append(cite_parent(parent))
            else:
                in_progress.append(cite_parent(parent))

        lines = []
        if completed:
            lines.append(f"- {phrasing.tldr_completed} {join_with_and(completed)}.")
        if in_progress:
            lines.append(f"- {phrasing.tldr_progress} {join_with_and(in_progress)}.")
        return lines

    def create_tldr(self, data: ReportData, phrasing: Phrasing) -> str:
        """TL;DR body, one bullet per line."""
        if data.total == 0:
            return NO_ISSUES

        lines: list[str] = []
        if data.roadmap:
            lines.extend(self._roadmap_tldr(data.roadmap, phrasing))
        if data.customer_work:
            lines.append(
                f"- We {phrasing.customer_verb} {len(data.customer_work)} customer requests, "
                "providing direct value to our customers and improving their platform experience"
                f"{self._examples(data.customer_work)}."
            )
        if data.operational_work:
            lines.append(
                f"- We {phrasing.operational_verb} {len(data.operational_work)} operational issues, "
                "improving platform stability, maintainability, and user experience"
                f"{self._examples(data.operational_work)}."
            )
        if data.other_issues:
            lines.append(
                f"- We {phrasing.other_verb} {len(data.other_issues)} other issues, "
                "covering various tasks and improvements"
                f"{self._examples(data.other_issues)}."
            )
        return "\n".join(lines)

    def create_section(self, name: str, issues: list[ReportIssue], phrasing: Phrasing) -> str:
        lines = [f"**{name}**"]
        for key, children in group_by_parent(issues).items():
            parent = children[0].parent_issue
            if key == NO_PARENT or parent is None:
                lines.extend(f"- {issue_line(i)}" for i in children)
                continue
            phrase = phrasing.section_completed if is_parent_completed(parent) else phrasing.section_progress
            if phrasing.section_leads:
                lines.append(f"- {phrase} {cite_parent(parent)} by")
            else:
                lines.append(f"- {cite_parent(parent)} {phrase} by")
            lines.extend(f"  - {issue_line(i)}" for i in children)
        return "\n".join(lines) + "\n\n"

    def _render(self, title: str, data: ReportData, phrasing: Phrasing) -> str:
        report = f"# {title}\n\n"
        report += "**TL;DR**\n" + self.create_tldr(data, phrasing) + "\n"
        report += f"\n{DIVIDER}\n\n"
        for name, issues in data.sections():
            if issues:
                report += self.create_section(name, issues, phrasing)
        return report

    def render_team_status(self, data: ReportData, team: str, status: str) -> str:
        return self._render(f"Team {team} - Status: {status}", data, phrasing_for_status(status))

    def render_monthly(self, data: ReportData, team: str, year: int, month: int) -> str:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {month}")
        title = f"Team {team} Issue Report - {calendar.month_name[month]} {year}"
        return self._render(title, data, MONTHLY)


# ── Reading reports back ─────────────────────────────────────


class IssueRef(NamedTuple):
    number: int
    repository: str


_CITATION_RE = re.compile(r"\[([^\[\]\s#]+)#(\d+)\]\(")


def extract_issues_from_report(markdown: str) -> list[IssueRef]:
    """Every ``[repo#number](...)`` link in a report, de-duplicated, by issue number."""
    refs = {IssueRef(int(number), repo) for repo, number in _CITATION_RE.findall(markdown)}
    return sorted(refs)
