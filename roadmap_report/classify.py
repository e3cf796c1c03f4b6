"""Sort board items into report buckets by their Kind field and group them by parent."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .projects import ParentIssue, ProjectItem

NO_PARENT = "No Parent"

ROADMAP = "Roadmap"
CUSTOMER_WORK = "Customer Work"
OPERATIONAL_WORK = "Operational Work"
OTHER_ISSUES = "Other Issues"

# Kinds on the board carry an emoji suffix ("Epic 🎯"); only the leading word counts.
KIND_EPIC = "epic"
KIND_STORY = "story"
KIND_REQUEST = "request"
OPERATIONAL_KINDS = frozenset({"postmortem", "operational"})

_REPO_RE = re.compile(r"/([^/]+)/issues(?:/|$)")
_MARKER_RE = re.compile(r"[A-Za-z]+")


def kind_marker(kind: str | None) -> str | None:
    """Lower-cased leading word of a Kind value, or None."""
    if not kind:
        return None
    m = _MARKER_RE.search(kind)
    return m.group(0).lower() if m else None


def is_epic(kind: str | None) -> bool:
    return kind_marker(kind) == KIND_EPIC


def extract_repo_name(url: str | None) -> str:
    """Repository name from an issue URL (the segment before ``/issues``)."""
    if not url:
        return "unknown"
    m = _REPO_RE.search(url)
    return m.group(1) if m else "unknown"


@dataclass(frozen=True)
class ReportIssue:
    number: int
    title: str
    url: str
    repository: str
    state: str
    kind: str | None = None
    parent_issue: ParentIssue | None = None
    item_id: str | None = None

    @classmethod
    def from_item(cls, item: ProjectItem) -> ReportIssue:
        return cls(
            number=item.issue_number,
            title=item.title,
            url=item.url,
            repository=extract_repo_name(item.url),
            state=item.state,
            kind=item.kind,
            parent_issue=item.parent,
            item_id=item.item_id,
        )


@dataclass
class ReportData:
    roadmap: list[ReportIssue] = field(default_factory=list)
    customer_work: list[ReportIssue] = field(default_factory=list)
    operational_work: list[ReportIssue] = field(default_factory=list)
    other_issues: list[ReportIssue] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(issues) for _, issues in self.sections())

    def sections(self) -> Iterator[tuple[str, list[ReportIssue]]]:
        """Buckets in report order."""
        yield ROADMAP, self.roadmap
        yield CUSTOMER_WORK, self.customer_work
        yield OPERATIONAL_WORK, self.operational_work
        yield OTHER_ISSUES, self.other_issues

    def all_issues(self) -> list[ReportIssue]:
        return [issue for _, issues in self.sections() for issue in issues]


def classify(items: Iterable[ProjectItem]) -> ReportData:
    """Bucket items by Kind. Epics are dropped; they only show up as parents."""
    data = ReportData()
    for item in items:
        marker = kind_marker(item.kind)
        if marker == KIND_EPIC:
            continue
        issue = ReportIssue.from_item(item)
        if marker == KIND_STORY:
            data.roadmap.append(issue)
        elif marker == KIND_REQUEST:
            data.customer_work.append(issue)
        elif marker in OPERATIONAL_KINDS:
            data.operational_work.append(issue)
        else:
            data.other_issues.append(issue)
    return data


def group_by_parent(issues: Iterable[ReportIssue]) -> dict[str, list[ReportIssue]]:
    """Group by parent title in first-seen order; parentless issues go under NO_PARENT."""
    groups: dict[str, list[ReportIssue]] = {}
    for issue in issues:
        key = issue.parent_issue.title if issue.parent_issue else NO_PARENT
        groups.setdefault(key, []).append(issue)
    return groups


def is_parent_completed(parent: ParentIssue) -> bool:
    # The parent's own state decides, whatever its children look like.
    return parent.closed
