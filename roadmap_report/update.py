"""Moving every issue of the last report to a new Status on the board."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from . import config
from .classify import is_epic
from .errors import GitHubAPIError, IssueUpdateError, StatusOptionNotFound
from .github import GitHubClient
from .projects import StatusFieldConfig, fetch_single_select_fields
from .state import LastReportEntry

logger = logging.getLogger(__name__)

EPIC_SKIP_REASON = "Cannot update status for Epic issues"
NO_LAST_REPORT = "No issues from a previous report. Generate a report first."

UPDATE_STATUS_MUTATION = """
mutation UpdateItemStatus($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(input: {
    projectId: $projectId
    itemId: $itemId
    fieldId: $fieldId
    value: { singleSelectOptionId: $optionId }
  }) {
    projectV2Item { id }
  }
}
"""


@dataclass
class UpdateFailure:
    issue_number: int
    error: str


@dataclass
class BulkUpdateResult:
    updated: int = 0
    failed: int = 0
    total_issues: int = 0
    errors: list[UpdateFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def add_failure(self, exc: IssueUpdateError) -> None:
        self.failed += 1
        self.errors.append(UpdateFailure(issue_number=exc.issue_number, error=exc.reason))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "updated": self.updated,
            "failed": self.failed,
            "totalIssues": self.total_issues,
            "errors": [{"issueNumber": e.issue_number, "error": e.error} for e in self.errors],
        }


async def resolve_status_field(client: GitHubClient, project_id: str, status: str) -> tuple[StatusFieldConfig, str]:
    """Status field config and the option id for ``status``; read fresh on every call."""
    fields = await fetch_single_select_fields(client, project_id)
    status_field = fields.get("status")
    if status_field is None:
        raise StatusOptionNotFound(status, [])
    option_id = status_field.option_id(status)
    if option_id is None:
        raise StatusOptionNotFound(status, status_field.option_names())
    return status_field, option_id


class BulkStatusUpdater:
    """Applies one Status option to a list of project items, one item at a time."""

    def __init__(self, client: GitHubClient, delay: float | None = None):
        self.client = client
        self.delay = config.STATUS_UPDATE_DELAY if delay is None else delay

    async def _update_item(self, project_id: str, field_id: str, option_id: str, entry: LastReportEntry) -> None:
        if is_epic(entry.kind):
            raise IssueUpdateError(entry.issue_number, EPIC_SKIP_REASON)
        if not entry.item_id:
            raise IssueUpdateError(entry.issue_number, "No project item recorded for this issue")
        try:
            await self.client.execute_query(
                UPDATE_STATUS_MUTATION,
                {"projectId": project_id, "itemId": entry.item_id, "fieldId": field_id, "optionId": option_id},
                allow_partial=False,
            )
        except GitHubAPIError as exc:
            raise IssueUpdateError(entry.issue_number, str(exc)) from exc

    async def update(self, project_id: str, entries: Sequence[LastReportEntry], new_status: str) -> BulkUpdateResult:
        if not entries:
            return BulkUpdateResult(failed=1, errors=[UpdateFailure(issue_number=0, error=NO_LAST_REPORT)])

        status_field, option_id = await resolve_status_field(self.client, project_id, new_status)
        logger.info("Moving %d issues to status %r", len(entries), new_status)

        result = BulkUpdateResult(total_issues=len(entries))
        for index, entry in enumerate(entries):
            if index and self.delay:
                await asyncio.sleep(self.delay)
            try:
                await self._update_item(project_id, status_field.field_id, option_id, entry)
            except IssueUpdateError as exc:
                logger.warning("Status update failed for %s#%d: %s", entry.repository, entry.issue_number, exc.reason)
                result.add_failure(exc)
                continue
            result.updated += 1

        logger.info("Status update done: %d updated, %d failed", result.updated, result.failed)
        return result
