"""Shared fixtures: a fake GitHub API served through httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from roadmap_report.github import GitHubClient
from roadmap_report.render import ReportRenderer
from roadmap_report.service import IssueReportService
from roadmap_report.state import LastReportStore

PROJECT_ID = "PVT_1001"
STATUS_FIELD_ID = "PVTSSF_status"
TEAM_FIELD_ID = "PVTSSF_team"
STATUS_OPTIONS = ["Inbox 📥", "In Progress ⛏️", "Validation ☑️", "Done ✅"]
TEAM_OPTIONS = ["Atlas 🗺️", "Phoenix 🔥"]


def issue_node(
    number: int,
    *,
    kind: str | None = None,
    status: str | None = "Validation ☑️",
    team: str | None = "Atlas 🗺️",
    state: str = "CLOSED",
    repo: str = "roadmap",
    parent: dict[str, Any] | None = None,
    title: str | None = None,
    extra_fields: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """One ``items.nodes`` entry as the GraphQL API returns it."""
    fields: list[dict[str, Any]] = list(extra_fields or [])
    for name, value in (("Status", status), ("Team", team), ("Kind", kind)):
        if value is not None:
            fields.append(
                {"__typename": "ProjectV2ItemFieldSingleSelectValue", "name": value, "field": {"name": name}}
            )
    return {
        "id": f"PVTI_{number}",
        "content": {
            "__typename": "Issue",
            "id": f"I_{number}",
            "number": number,
            "title": title or f"Issue {number}",
            "url": f"https://github.com/giantswarm/{repo}/issues/{number}",
            "state": state,
            "createdAt": "2025-01-01T00:00:00Z",
            "updatedAt": "2025-01-02T00:00:00Z",
            "parent": parent,
        },
        "fieldValues": {"nodes": fields},
    }


def parent_node(number: int, title: str, *, closed: bool, repo: str = "roadmap") -> dict[str, Any]:
    return {
        "number": number,
        "title": title,
        "url": f"https://github.com/giantswarm/{repo}/issues/{number}",
        "closed": closed,
    }


def first_pick(issues, count):
    return list(issues)[:count]


class FakeGitHub:
    """Answers the GraphQL operations and REST paths the package uses.

    ``items`` is split into pages of ``page_size``; every request is kept in
    ``requests`` as ``(operation, variables)``.
    """

    def __init__(self, items: list[dict[str, Any]] | None = None, page_size: int = 100):
        self.items = items or []
        self.page_size = page_size
        self.projects = [{"id": PROJECT_ID, "title": "Roadmap", "number": 273, "url": "https://github.com/orgs/giantswarm/projects/273"}]
        self.status_options = list(STATUS_OPTIONS)
        self.team_options = list(TEAM_OPTIONS)
        self.failing_items: set[str] = set()
        self.graphql_errors: list[dict[str, Any]] | None = None
        self.rest: dict[str, Any] = {}
        self.requests: list[tuple[str, dict[str, Any]]] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> GitHubClient:
        return GitHubClient(
            token="test-token",
            graphql_url="https://api.github.test/graphql",
            api_base_url="https://api.github.test",
            transport=self.transport,
        )

    def operations(self, name: str) -> list[dict[str, Any]]:
        return [v for op, v in self.requests if op == name]

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/graphql":
            body = json.loads(request.content)
            return self._graphql(body["query"], body.get("variables") or {})
        self.requests.append(("GET", {"path": request.url.path}))
        if request.url.path in self.rest:
            return httpx.Response(200, json=self.rest[request.url.path])
        return httpx.Response(404, json={"message": "Not Found"})

    def _graphql(self, query: str, variables: dict[str, Any]) -> httpx.Response:
        for op in ("FindProjects", "ProjectItems", "ProjectFields", "UpdateItemStatus", "IssueProjects"):
            if f" {op}(" in query:
                break
        else:
            return httpx.Response(400, json={"message": "unknown operation"})
        self.requests.append((op, variables))
        if self.graphql_errors is not None:
            return httpx.Response(200, json={"data": None, "errors": self.graphql_errors})
        return httpx.Response(200, json=getattr(self, f"_{op}")(variables))

    def _FindProjects(self, variables):
        return {"data": {"organization": {"projectsV2": {"nodes": self.projects}}}}

    def _ProjectItems(self, variables):
        start = int(variables["after"]) if variables.get("after") else 0
        size = min(self.page_size, variables["first"])
        page = self.items[start : start + size]
        end = start + len(page)
        return {
            "data": {
                "node": {
                    "items": {
                        "pageInfo": {"hasNextPage": end < len(self.items), "endCursor": str(end)},
                        "nodes": page,
                    }
                }
            }
        }

    def _ProjectFields(self, variables):
        return {
            "data": {
                "node": {
                    "fields": {
                        "nodes": [
                            {},
                            {
                                "id": STATUS_FIELD_ID,
                                "name": "Status",
                                "options": [{"id": f"opt_{i}", "name": n} for i, n in enumerate(self.status_options)],
                            },
                            {
                                "id": TEAM_FIELD_ID,
                                "name": "Team",
                                "options": [{"id": f"team_{i}", "name": n} for i, n in enumerate(self.team_options)],
                            },
                        ]
                    }
                }
            }
        }

    def _UpdateItemStatus(self, variables):
        if variables["itemId"] in self.failing_items:
            return {"data": {"updateProjectV2ItemFieldValue": None}, "errors": [{"message": "Item is archived"}]}
        return {"data": {"updateProjectV2ItemFieldValue": {"projectV2Item": {"id": variables["itemId"]}}}}

    def _IssueProjects(self, variables):
        number = variables["number"]
        return {
            "data": {
                "repository": {
                    "issue": {
                        "id": f"I_{number}",
                        "parent": parent_node(1, "Epic one", closed=False),
                        "projectsV2": {
                            "nodes": [
                                {"id": "PVT_9", "title": "Other board", "number": 9, "url": "u9"},
                                dict(self.projects[0], createdAt=None, updatedAt=None, shortDescription="Roadmap board"),
                            ]
                        },
                    }
                }
            }
        }


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def service(github):
    return IssueReportService(
        client=github.client(),
        org="giantswarm",
        project_title="Roadmap",
        store=LastReportStore(),
        renderer=ReportRenderer(sampler=first_pick),
        update_delay=0,
    )
