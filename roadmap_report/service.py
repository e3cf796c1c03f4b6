"""The report workflow: fetch the board, classify, render, remember, update."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from . import config
from .classify import classify
from .github import GitHubClient
from .projects import (
    LinkedProject,
    ProjectItem,
    ProjectLocator,
    fetch_all_items,
    fetch_single_select_fields,
    get_linked_roadmap_project,
    search_items,
)
from .render import ReportRenderer
from .state import LastReportStore
from .update import BulkStatusUpdater

logger = logging.getLogger(__name__)


@dataclass
class DetailedIssue:
    issue: dict[str, Any]
    comments: list[dict[str, Any]]
    repository: dict[str, Any]
    linked_projects: list[LinkedProject]


class IssueReportService:
    """Entry point for report generation and the follow-up bulk status change.

    One instance owns one LastReportStore: ``update_last_report_issues_status``
    acts on whatever the most recent ``generate_*`` call on the same instance
    reported.
    """

    def __init__(
        self,
        client: GitHubClient | None = None,
        org: str | None = None,
        project_title: str | None = None,
        store: LastReportStore | None = None,
        renderer: ReportRenderer | None = None,
        update_delay: float | None = None,
    ):
        self.client = client or GitHubClient()
        self.org = org or config.GITHUB_ORG
        self.project_title = project_title or config.ROADMAP_PROJECT_TITLE
        self.store = store if store is not None else LastReportStore()
        self.renderer = renderer or ReportRenderer()
        self.updater = BulkStatusUpdater(self.client, delay=update_delay)

    async def _project_id(self) -> str:
        return await ProjectLocator(self.client, self.org).locate(self.project_title)

    async def get_roadmap_team_and_status_options(self) -> dict[str, list[str]]:
        project_id = await self._project_id()
        fields = await fetch_single_select_fields(self.client, project_id)
        team = fields.get("team")
        status = fields.get("status")
        return {
            "teamOptions": team.option_names() if team else [],
            "statusOptions": status.option_names() if status else [],
        }

    async def search_roadmap_issues(
        self, team: str | None = None, status: str | None = None, kind: str | None = None
    ) -> list[ProjectItem]:
        project_id = await self._project_id()
        items = await fetch_all_items(self.client, project_id)
        matched = search_items(items, team=team, status=status, kind=kind)
        logger.info("Found %d of %d board issues matching team=%r status=%r kind=%r",
                    len(matched), len(items), team, status, kind)
        return matched

    async def generate_report(self, team: str, status: str) -> str:
        """Markdown report of the board issues with this Team and Status."""
        logger.info("Generating report for team %r and status %r", team, status)
        items = await self.search_roadmap_issues(team, status)
        data = classify(items)
        report = self.renderer.render_team_status(data, team, status)
        self.store.record_report(data, team=team, status=status)
        return report

    async def generate_monthly_report(self, team: str, status: str, year: int, month: int) -> str:
        """Month-in-review variant of ``generate_report``."""
        logger.info("Generating %d/%d report for team %r and status %r", month, year, team, status)
        items = await self.search_roadmap_issues(team, status)
        data = classify(items)
        report = self.renderer.render_monthly(data, team, year, month)
        self.store.record_report(data, team=team, status=status)
        return report

    async def update_last_report_issues_status(self, new_status: str) -> dict[str, Any]:
        entries = self.store.entries
        # Nothing to resolve when there is no previous report
        project_id = await self._project_id() if entries else ""
        result = await self.updater.update(project_id, entries, new_status)
        return result.to_dict()

    async def get_detailed_issue(self, owner: str, repo: str, number: int) -> DetailedIssue:
        """Issue, comments, repository and board fields, fetched concurrently."""
        issue, comments, repository, linked = await asyncio.gather(
            self.client.get_issue(owner, repo, number),
            self.client.get_issue_comments(owner, repo, number),
            self.client.get_repository(owner, repo),
            get_linked_roadmap_project(self.client, owner, repo, number, self.project_title),
        )
        return DetailedIssue(issue=issue, comments=comments, repository=repository, linked_projects=linked)
